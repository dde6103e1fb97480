"""
Category endpoints.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, Request, Response, status

from docvault.api.deps import get_category_service, get_current_admin, get_current_user
from docvault.core.exceptions import NotFoundError
from docvault.core.rate_limiter import RATE_LIMITS, limiter
from docvault.models.category import CategoryRecord
from docvault.models.user import UserRecord
from docvault.schemas.category import CategoryCreate, CategoryUpdate
from docvault.services.category_service import CategoryService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[CategoryRecord], summary="List categories")
@limiter.limit(RATE_LIMITS["default"])
def list_categories(
    request: Request,
    current_user: Annotated[UserRecord, Depends(get_current_user)],
    service: Annotated[CategoryService, Depends(get_category_service)],
):
    return service.list_categories()


@router.post(
    "",
    response_model=CategoryRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
)
@limiter.limit(RATE_LIMITS["default"])
def create_category(
    request: Request,
    category_in: CategoryCreate,
    admin: Annotated[UserRecord, Depends(get_current_admin)],
    service: Annotated[CategoryService, Depends(get_category_service)],
):
    """Create a category. Names that slugify to an existing slug are rejected with 409."""
    return service.create(category_in.name, category_in.description)


@router.put("/{category_id}", response_model=CategoryRecord, summary="Update a category")
@limiter.limit(RATE_LIMITS["default"])
def update_category(
    request: Request,
    category_id: str,
    category_in: CategoryUpdate,
    admin: Annotated[UserRecord, Depends(get_current_admin)],
    service: Annotated[CategoryService, Depends(get_category_service)],
):
    return service.update(
        category_id,
        name=category_in.name,
        description=category_in.description,
    )


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a category",
)
@limiter.limit(RATE_LIMITS["default"])
def delete_category(
    request: Request,
    category_id: str,
    admin: Annotated[UserRecord, Depends(get_current_admin)],
    service: Annotated[CategoryService, Depends(get_category_service)],
):
    if not service.delete(category_id):
        raise NotFoundError("Category not found")

    logger.info(f"Admin {admin.external_id} deleted category {category_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
