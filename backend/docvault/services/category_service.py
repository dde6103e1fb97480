"""
Category service.

Categories are keyed by a slug derived from their name, so "Data
Structures" and "data structures!!" collide.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from docvault.core.exceptions import ConflictError, NotFoundError, ValidationError
from docvault.db.mongo import parse_object_id, utcnow
from docvault.models.category import CategoryRecord

logger = logging.getLogger(__name__)

COLLECTION = "categories"
DUPLICATE_MESSAGE = "Category with this name already exists"


def slugify(name: str) -> str:
    """Derive a URL-safe slug from a category name."""
    slug = name.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return re.sub(r"^-+|-+$", "", slug)


class CategoryService:
    """CRUD operations for document categories."""

    def __init__(self, db: Database):
        self.collection = db[COLLECTION]

    def _slug_for(self, name: Optional[str]) -> str:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        slug = slugify(name)
        if not slug:
            raise ValidationError("Name must contain letters or digits")
        return slug

    def create(self, name: str, description: Optional[str] = None) -> CategoryRecord:
        """
        Create a category.

        Raises:
            ValidationError: If the name is blank or yields an empty slug.
            ConflictError: If a category with the same slug exists.
        """
        slug = self._slug_for(name)
        if self.collection.find_one({"slug": slug}) is not None:
            raise ConflictError(DUPLICATE_MESSAGE)

        now = utcnow()
        record: Dict[str, Any] = {
            "name": name.strip(),
            "slug": slug,
            "description": description,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            result = self.collection.insert_one(record)
        except DuplicateKeyError:
            raise ConflictError(DUPLICATE_MESSAGE)

        record["_id"] = result.inserted_id
        logger.info(f"Created category {slug}")
        return CategoryRecord.from_mongo(record)

    def get(self, category_id: str) -> CategoryRecord:
        oid = parse_object_id(category_id)
        doc = self.collection.find_one({"_id": oid}) if oid else None
        if doc is None:
            raise NotFoundError("Category not found")
        return CategoryRecord.from_mongo(doc)

    def update(
        self,
        category_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CategoryRecord:
        """
        Patch a category. A new name re-derives the slug.

        Raises:
            NotFoundError: If the category does not exist.
            ConflictError: If another category already holds the new slug.
        """
        oid = parse_object_id(category_id)
        if oid is None:
            raise NotFoundError("Category not found")

        updates: Dict[str, Any] = {"updatedAt": utcnow()}
        if name is not None:
            slug = self._slug_for(name)
            clash = self.collection.find_one({"slug": slug, "_id": {"$ne": oid}})
            if clash is not None:
                raise ConflictError(DUPLICATE_MESSAGE)
            updates["name"] = name.strip()
            updates["slug"] = slug
        if description is not None:
            updates["description"] = description

        try:
            doc = self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictError(DUPLICATE_MESSAGE)

        if doc is None:
            raise NotFoundError("Category not found")
        return CategoryRecord.from_mongo(doc)

    def delete(self, category_id: str) -> bool:
        """Delete a category. Returns False if it does not exist."""
        oid = parse_object_id(category_id)
        if oid is None:
            return False
        result = self.collection.delete_one({"_id": oid})
        return result.deleted_count == 1

    def list_categories(self) -> List[CategoryRecord]:
        """List categories ordered by name."""
        return [CategoryRecord.from_mongo(doc) for doc in self.collection.find().sort("name", 1)]
