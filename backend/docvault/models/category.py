"""
Category model for grouping documents.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CategoryRecord(BaseModel):
    """
    Category record.

    Attributes:
        id: Record ID (ObjectId hex string).
        name: Display name.
        slug: URL-safe unique key derived from the name.
        description: Optional description.
    """

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def from_mongo(cls, doc: Dict[str, Any]) -> "CategoryRecord":
        data = dict(doc)
        data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)
