"""
Category schemas for request validation.
"""

from typing import Optional

from pydantic import Field

from docvault.schemas.base import CamelModel


class CategoryCreate(CamelModel):
    """Schema for creating a category."""

    name: str = Field(..., description="Category name")
    description: Optional[str] = Field(None, description="Optional description")


class CategoryUpdate(CamelModel):
    """Schema for updating a category. Omitted fields are left unchanged."""

    name: Optional[str] = Field(None, description="New category name")
    description: Optional[str] = Field(None, description="New description")
