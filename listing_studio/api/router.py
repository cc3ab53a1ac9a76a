from fastapi import APIRouter
from listing_studio.api.v1 import health, plugin, scene

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(plugin.router, prefix="/plugin", tags=["plugin"])
api_router.include_router(scene.router, prefix="/scene", tags=["scene"])
