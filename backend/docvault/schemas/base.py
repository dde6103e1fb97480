"""
Shared base for API schemas.

API JSON uses camelCase keys; Python code uses snake_case attributes.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema that reads and writes camelCase JSON."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
