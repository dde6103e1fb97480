"""
User endpoints.

Role management for admins, plus the signed-in user's own profile,
favorites and recently viewed documents.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from docvault.api.deps import get_current_admin, get_current_user, get_user_service
from docvault.core.rate_limiter import RATE_LIMITS, limiter
from docvault.models.user import UserRecord
from docvault.schemas.user import (
    DocumentReference,
    FavoritesResponse,
    RecentResponse,
    UserListResponse,
    UserRoleResponse,
    UserRoleUpdate,
)
from docvault.services.user_service import DEFAULT_LIST_LIMIT, UserService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=UserListResponse, summary="List users")
@limiter.limit(RATE_LIMITS["default"])
def list_users(
    request: Request,
    admin: Annotated[UserRecord, Depends(get_current_admin)],
    service: Annotated[UserService, Depends(get_user_service)],
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1, le=500),
    skip: int = Query(0, ge=0),
):
    return UserListResponse(
        users=service.list_users(limit=limit, skip=skip),
        total=service.count_users(),
    )


@router.get("/me", response_model=UserRecord, summary="Current user")
@limiter.limit(RATE_LIMITS["default"])
def read_current_user(
    request: Request,
    current_user: Annotated[UserRecord, Depends(get_current_user)],
):
    return current_user


@router.get("/me/favorites", summary="List favorite documents")
@limiter.limit(RATE_LIMITS["default"])
def get_favorites(
    request: Request,
    current_user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    return {"favorites": service.get_favorites(current_user.external_id)}


@router.post("/me/favorites", response_model=FavoritesResponse, summary="Toggle a favorite")
@limiter.limit(RATE_LIMITS["default"])
def toggle_favorite(
    request: Request,
    body: DocumentReference,
    current_user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Add the document to favorites, or remove it if it is already there."""
    user = service.toggle_favorite(current_user.external_id, body.document_id)
    return FavoritesResponse(favorites=user.favorites)


@router.get("/me/recent", response_model=RecentResponse, summary="Recently viewed documents")
@limiter.limit(RATE_LIMITS["default"])
def get_recent(
    request: Request,
    current_user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    return RecentResponse(recent=service.get_recent(current_user.external_id))


@router.post("/me/recent", summary="Record a document view")
@limiter.limit(RATE_LIMITS["default"])
def add_recent(
    request: Request,
    body: DocumentReference,
    current_user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    service.add_to_recent(current_user.external_id, body.document_id)
    return {"success": True}


@router.patch(
    "/{external_id}/role",
    response_model=UserRoleResponse,
    summary="Change a user's role",
)
@limiter.limit(RATE_LIMITS["default"])
def update_user_role(
    request: Request,
    external_id: str,
    role_in: UserRoleUpdate,
    admin: Annotated[UserRecord, Depends(get_current_admin)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Admins may change anyone's role except their own."""
    user = service.update_role(admin.external_id, external_id, role_in.role)
    return UserRoleResponse(user=user)
