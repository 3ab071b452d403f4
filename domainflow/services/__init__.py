"""Services package — all business logic lives here, never in routers.

Files:
  domain.py            — entry point used by routers (CRUD, targeting, lifecycle operations)
  domain_store.py      — the only writer of domain status; pairs every change with an event
  ownership.py         — TXT-record ownership verification
  registrar.py         — hosting provider registration / deregistration
  ssl.py               — certificate reconciliation and activation
  dns_requirements.py  — records a domain owner must publish
  hostnames.py         — hostname validation, apex detection, verification tokens
  netlify.py           — hosting provider API client
  dns_lookup.py        — DNS-over-HTTPS TXT lookups

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
