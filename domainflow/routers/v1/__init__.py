"""v1 router package — all /api/v1/* endpoints live here.

Files:
  domains.py  — domain CRUD and lifecycle operations (register, verify, ssl, remove)
  dns.py      — DNS requirements, hosting provider health, hostname resolution

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to domainflow/services/.
"""
