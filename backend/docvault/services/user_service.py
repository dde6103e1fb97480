"""
User service.

Mirrors identity provider users into the ``users`` collection and manages
roles, favorites and the recently viewed list. Every mutation is a single
atomic update on one user document.
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from docvault.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from docvault.db.mongo import parse_object_id, utcnow
from docvault.models.user import (
    RECENT_DOCUMENTS_LIMIT,
    IdentityProfile,
    RecentView,
    UserRecord,
    UserRole,
)
from docvault.schemas.webhook import IdentityEvent

logger = logging.getLogger(__name__)

COLLECTION = "users"
DEFAULT_LIST_LIMIT = 100


class UserService:
    """Operations on user records."""

    def __init__(self, db: Database):
        self.collection = db[COLLECTION]

    def _document_oid(self, document_id: str):
        oid = parse_object_id(document_id)
        if oid is None:
            raise ValidationError("Invalid document ID")
        return oid

    def _profile_fields(self, profile: IdentityProfile) -> Dict[str, Any]:
        return {
            "email": profile.email,
            "firstName": profile.first_name,
            "lastName": profile.last_name,
            "imageUrl": profile.image_url,
        }

    def get_user(self, external_id: str) -> Optional[UserRecord]:
        doc = self.collection.find_one({"externalId": external_id})
        return UserRecord.from_mongo(doc) if doc else None

    def get_role(self, external_id: str) -> Optional[UserRole]:
        user = self.get_user(external_id)
        return user.role if user else None

    def sync_user(self, profile: IdentityProfile) -> UserRecord:
        """
        Create or refresh a user from identity provider data.

        New users start with the USER role and empty favorites and recent
        lists; existing users only get their profile fields refreshed.
        """
        now = utcnow()
        doc = self.collection.find_one_and_update(
            {"externalId": profile.external_id},
            {
                "$set": {**self._profile_fields(profile), "updatedAt": now},
                "$setOnInsert": {
                    "role": UserRole.USER.value,
                    "favorites": [],
                    "recentlyViewed": [],
                    "createdAt": now,
                },
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return UserRecord.from_mongo(doc)

    def update_profile(self, profile: IdentityProfile) -> Optional[UserRecord]:
        """Refresh profile fields of an existing user. Returns None if unknown."""
        doc = self.collection.find_one_and_update(
            {"externalId": profile.external_id},
            {"$set": {**self._profile_fields(profile), "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return UserRecord.from_mongo(doc) if doc else None

    def delete_user(self, external_id: str) -> bool:
        result = self.collection.delete_one({"externalId": external_id})
        return result.deleted_count == 1

    def list_users(self, limit: int = DEFAULT_LIST_LIMIT, skip: int = 0) -> List[UserRecord]:
        """List users newest first."""
        cursor = (
            self.collection.find({})
            .sort([("createdAt", -1), ("_id", -1)])
            .skip(skip)
            .limit(limit)
        )
        return [UserRecord.from_mongo(doc) for doc in cursor]

    def count_users(self) -> int:
        return self.collection.count_documents({})

    def update_role(self, actor_id: str, target_id: str, role: str) -> UserRecord:
        """
        Change a user's role.

        Args:
            actor_id: External ID of the admin making the change.
            target_id: External ID of the user being changed.
            role: New role value.

        Raises:
            ValidationError: If the role is not a known role.
            ForbiddenError: If an admin tries to change their own role.
            NotFoundError: If the target user does not exist.
        """
        try:
            new_role = UserRole(role)
        except ValueError:
            raise ValidationError("Invalid role")

        if actor_id == target_id:
            raise ForbiddenError("You cannot change your own role")

        doc = self.collection.find_one_and_update(
            {"externalId": target_id},
            {"$set": {"role": new_role.value, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("User not found")

        logger.info(f"User {actor_id} set role of {target_id} to {new_role.value}")
        return UserRecord.from_mongo(doc)

    def toggle_favorite(self, external_id: str, document_id: str) -> UserRecord:
        """
        Add a document to favorites, or remove it if already present.

        Raises:
            ValidationError: If the document ID is malformed.
            NotFoundError: If the user does not exist.
        """
        oid = self._document_oid(document_id)

        doc = self.collection.find_one_and_update(
            {"externalId": external_id, "favorites": oid},
            {"$pull": {"favorites": oid}, "$set": {"updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            doc = self.collection.find_one_and_update(
                {"externalId": external_id},
                {"$addToSet": {"favorites": oid}, "$set": {"updatedAt": utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFoundError("User not found")
        return UserRecord.from_mongo(doc)

    def get_favorites(self, external_id: str) -> List[str]:
        user = self.get_user(external_id)
        return user.favorites if user else []

    def add_to_recent(self, external_id: str, document_id: str) -> UserRecord:
        """
        Record a document view at the front of the recent list.

        An earlier entry for the same document is removed first, and the
        list is capped at RECENT_DOCUMENTS_LIMIT entries. The push only
        applies while the document is absent from the list, so concurrent
        views of the same document never leave two entries behind.

        Raises:
            ValidationError: If the document ID is malformed.
            NotFoundError: If the user does not exist.
        """
        oid = self._document_oid(document_id)
        now = utcnow()

        self.collection.update_one(
            {"externalId": external_id},
            {"$pull": {"recentlyViewed": {"documentId": oid}}},
        )
        doc = self.collection.find_one_and_update(
            {"externalId": external_id, "recentlyViewed.documentId": {"$ne": oid}},
            {
                "$push": {
                    "recentlyViewed": {
                        "$each": [{"documentId": oid, "viewedAt": now}],
                        "$position": 0,
                        "$slice": RECENT_DOCUMENTS_LIMIT,
                    }
                },
                "$set": {"updatedAt": now},
            },
            return_document=ReturnDocument.AFTER,
        )
        if doc is not None:
            return UserRecord.from_mongo(doc)

        # Missing user, or a concurrent view already put the document back
        user = self.get_user(external_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_recent(self, external_id: str) -> List[RecentView]:
        user = self.get_user(external_id)
        return user.recently_viewed if user else []

    def forget_document(self, document_id: str) -> int:
        """Remove a document from every user's favorites and recent list."""
        oid = parse_object_id(document_id)
        if oid is None:
            return 0
        result = self.collection.update_many(
            {"$or": [{"favorites": oid}, {"recentlyViewed.documentId": oid}]},
            {"$pull": {"favorites": oid, "recentlyViewed": {"documentId": oid}}},
        )
        return result.modified_count

    def handle_identity_event(self, event: IdentityEvent) -> str:
        """
        Apply a user lifecycle event from the identity provider.

        Returns:
            str: What was done, for the webhook response and logs.
        """
        data = event.data

        if event.type == "user.created":
            profile = data.to_profile()
            if not profile.email:
                logger.warning(f"Ignoring user.created for {data.id} without email")
                return "ignored"
            self.sync_user(profile)
            logger.info(f"Created user {data.id} from identity webhook")
            return "created"

        if event.type == "user.updated":
            if self.update_profile(data.to_profile()) is None:
                logger.warning(f"user.updated for unknown user {data.id}")
                return "ignored"
            return "updated"

        if event.type == "user.deleted":
            if data.id and self.delete_user(data.id):
                logger.info(f"Deleted user {data.id} from identity webhook")
                return "deleted"
            return "ignored"

        logger.info(f"Unhandled identity event type {event.type}")
        return "ignored"
