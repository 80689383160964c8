"""
User Access API service package.

The service fronts user-management reads, enforcing:
- Authentication: bearer JWT verified before any route logic
- Authorization: capability checks per route
- Caching: Redis-backed response cache with per-route TTLs

Structure:
- app.main: FastAPI app, service wiring and health checks.
- app.routes: route table and router construction.
- app.domain: auth gate and permission gate.
- app.caching: cache keys and the response cache.
- app.adapters: HTTP clients for the user directory and credit-score services.
- app.controllers / app.services: request handlers and cached lookups.
"""
