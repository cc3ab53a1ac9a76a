from fastapi import APIRouter

from listing_studio.commands import get_command_registry
from listing_studio.config import settings

router = APIRouter()


@router.get("")
async def health():
    return {
        "status": "healthy",
        "storage_backend": settings.STORAGE_BACKEND,
        "commands": get_command_registry().command_types(),
    }
