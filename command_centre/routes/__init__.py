"""
FastAPI routers for all API endpoints.

Each module defines a router for one dashboard area (clients, employees,
finance, ...). Endpoints follow the same 6-step flow: auth, validate,
domain filter, call service, map to the response model, persist.
"""
