"""Routers package — HTTP endpoint definitions.

Files:
  deps.py  — shared dependencies (service factory, provider clients, actor header)
  v1/      — Versioned API routes (/api/v1/*)
"""
