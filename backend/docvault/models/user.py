"""
User model with role, favorites and recently viewed documents.

Users are mirrored from the external identity provider; the role is the
only field managed inside this application.
"""

import enum
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

RECENT_DOCUMENTS_LIMIT = 10


class UserRole(str, enum.Enum):
    """User role enumeration."""

    USER = "user"    # Browse, view and download enabled documents
    ADMIN = "admin"  # Full access to all features


class RecentView(BaseModel):
    """One entry of a user's recently viewed list."""

    document_id: str
    viewed_at: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class IdentityProfile(BaseModel):
    """Profile fields supplied by the identity provider."""

    external_id: str
    email: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "IdentityProfile":
        """Build a profile from verified session token claims."""
        return cls(
            external_id=claims["sub"],
            email=claims.get("email") or "",
            first_name=claims.get("first_name"),
            last_name=claims.get("last_name"),
            image_url=claims.get("image_url"),
        )


class UserRecord(BaseModel):
    """
    User record.

    Attributes:
        id: Record ID (ObjectId hex string).
        external_id: Identity provider user ID.
        email: Primary email address.
        role: User role for RBAC.
        favorites: Favorite document IDs.
        recently_viewed: Most-recent-first view history, capped at
            RECENT_DOCUMENTS_LIMIT entries.
    """

    id: str
    external_id: str
    email: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None
    role: UserRole = UserRole.USER
    favorites: List[str] = Field(default_factory=list)
    recently_viewed: List[RecentView] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def from_mongo(cls, doc: Dict[str, Any]) -> "UserRecord":
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        data["favorites"] = [str(doc_id) for doc_id in data.get("favorites") or []]
        data["recentlyViewed"] = [
            {"documentId": str(entry["documentId"]), "viewedAt": entry["viewedAt"]}
            for entry in data.get("recentlyViewed") or []
        ]
        return cls.model_validate(data)

    def __repr__(self) -> str:
        return f"<UserRecord(external_id={self.external_id}, role={self.role.value})>"
