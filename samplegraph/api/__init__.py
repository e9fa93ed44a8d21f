"""HTTP layer: FastAPI router, middleware and response schemas."""

from samplegraph.api.routes import router

__all__ = ["router"]
