"""
Identity provider webhook endpoint.

Mirrors user lifecycle events into the users collection. Signature
verification is handled by the provider's delivery infrastructure in
front of this service.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from docvault.api.deps import get_user_service
from docvault.core.rate_limiter import RATE_LIMITS, limiter
from docvault.schemas.webhook import IdentityEvent
from docvault.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/identity", summary="Identity provider user events")
@limiter.limit(RATE_LIMITS["webhook"])
def identity_webhook(
    request: Request,
    event: IdentityEvent,
    service: Annotated[UserService, Depends(get_user_service)],
):
    result = service.handle_identity_event(event)
    logger.info(f"Identity webhook {event.type}: {result}")
    return {"success": True, "result": result}
