"""
API routes module.

FastAPI routers for all HTTP endpoints; see runner_gateway.api.main.create_app.
"""
