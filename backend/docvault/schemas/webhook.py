"""
Identity provider webhook payloads.

Only the fields used to mirror users are modelled; anything else in the
payload is ignored.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from docvault.models.user import IdentityProfile


class EmailAddress(BaseModel):
    email_address: str


class IdentityEventData(BaseModel):
    """User fields carried by user.created / user.updated / user.deleted."""

    id: Optional[str] = None
    email_addresses: List[EmailAddress] = Field(default_factory=list)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def primary_email(self) -> str:
        return self.email_addresses[0].email_address if self.email_addresses else ""

    def to_profile(self) -> IdentityProfile:
        return IdentityProfile(
            external_id=self.id or "",
            email=self.primary_email,
            first_name=self.first_name,
            last_name=self.last_name,
            image_url=self.image_url,
        )


class IdentityEvent(BaseModel):
    """Webhook event envelope."""

    type: str = Field(..., description="Event type, e.g. user.created")
    data: IdentityEventData
