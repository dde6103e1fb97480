"""
User schemas for request/response validation.
"""

from typing import List

from pydantic import Field

from docvault.models.user import RecentView, UserRecord
from docvault.schemas.base import CamelModel


class UserListResponse(CamelModel):
    users: List[UserRecord]
    total: int


class UserRoleUpdate(CamelModel):
    """Schema for updating a user's role."""

    role: str = Field(..., description="New role: admin or user")


class UserRoleResponse(CamelModel):
    success: bool = True
    user: UserRecord


class DocumentReference(CamelModel):
    """Body naming a document, used by favorites and recent endpoints."""

    document_id: str = Field(..., description="Document ID")


class FavoritesResponse(CamelModel):
    success: bool = True
    favorites: List[str]


class RecentResponse(CamelModel):
    recent: List[RecentView]
