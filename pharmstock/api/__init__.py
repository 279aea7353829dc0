"""HTTP API: FastAPI application, routers and middleware."""
