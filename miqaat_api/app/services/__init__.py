"""
Service layer abstraction.

Each service encapsulates the business logic for one domain and talks
to SQLite through ``core.db``.  API handlers stay thin: they validate
the request, call a service and translate service exceptions into HTTP
responses.
"""
