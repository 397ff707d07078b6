"""
API v1 Router
"""

from fastapi import APIRouter
from . import groups

router = APIRouter()

router.include_router(groups.router, prefix="/groups", tags=["Groups"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/groups",
            "/groups/{groupId}",
            "/groups/{groupId}/members",
            "/groups/{groupId}/leave",
        ],
    }
