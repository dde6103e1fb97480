"""
API v1 router aggregating all endpoint routers.
"""

from fastapi import APIRouter

from docvault.api.v1.endpoints import categories, documents, users, webhooks

api_router = APIRouter()

api_router.include_router(
    documents.router,
    prefix="/documents",
    tags=["Documents"],
)
api_router.include_router(
    categories.router,
    prefix="/categories",
    tags=["Categories"],
)
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"],
)
api_router.include_router(
    webhooks.router,
    prefix="/webhooks",
    tags=["Webhooks"],
)
