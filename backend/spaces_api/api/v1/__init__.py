"""
Spaces File API v1 Router Aggregator.

Combines all v1 endpoint routers into a single APIRouter that the
application mounts under the /api/v1 prefix.

Router Structure:
    - /spaces: File upload, download, metadata, listing, existence and delete
"""

from fastapi import APIRouter

from spaces_api.api.v1.spaces import router as spaces_router


api_router = APIRouter()

api_router.include_router(
    spaces_router,
    prefix="/spaces",
    tags=["spaces"],
)

__all__ = ["api_router"]
