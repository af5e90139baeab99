"""API routers."""

from fastapi import APIRouter

from .auth_routes import router as auth_router
from .routes import router as links_router

api_router = APIRouter()
api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
# Links last: its catch-all redirect route must not shadow anything
api_router.include_router(links_router, tags=["Links"])

__all__ = ["api_router"]
