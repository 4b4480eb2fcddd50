from fastapi import APIRouter

from airboard.api.routes import admin, auth, boards, channels, view

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(boards.router, tags=["boards"])
api_router.include_router(channels.router, tags=["channels"])
api_router.include_router(view.router, tags=["view"])
api_router.include_router(admin.router, tags=["admin"])
