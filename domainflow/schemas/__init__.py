"""Pydantic schemas package.

Folder intent:
  common.py     — ApiModel base + HealthResponse (API schemas inherit ApiModel)
  domain.py     — domain requests, resources and lifecycle operation results
  providers.py  — payloads received from the hosting provider and the DNS resolver
"""
