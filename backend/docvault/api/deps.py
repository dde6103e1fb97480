"""
API dependencies for dependency injection.

Provides the database handle, service instances, authentication and role
checks used by the route handlers.
"""

from typing import Annotated, Any, Callable, Dict, List, Optional, Union

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database

from docvault.core.exceptions import CredentialsException, ForbiddenError
from docvault.core.rbac import Permission, has_permission
from docvault.core.security import decode_token
from docvault.core.sentry import set_user_context
from docvault.db.mongo import get_db, get_gridfs_bucket
from docvault.models.user import IdentityProfile, UserRecord, UserRole
from docvault.services.category_service import CategoryService
from docvault.services.document_service import DocumentService
from docvault.services.storage_service import GridFSBlobStore
from docvault.services.user_service import UserService

# Missing credentials are reported as 401 by get_token_claims
bearer_scheme = HTTPBearer(auto_error=False)


def get_blob_store(db: Annotated[Database, Depends(get_db)]) -> GridFSBlobStore:
    return GridFSBlobStore(get_gridfs_bucket(db))


def get_document_service(
    db: Annotated[Database, Depends(get_db)],
    blob_store: Annotated[GridFSBlobStore, Depends(get_blob_store)],
) -> DocumentService:
    return DocumentService(db, blob_store)


def get_category_service(db: Annotated[Database, Depends(get_db)]) -> CategoryService:
    return CategoryService(db)


def get_user_service(db: Annotated[Database, Depends(get_db)]) -> UserService:
    return UserService(db)


def get_token_claims(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ] = None,
) -> Dict[str, Any]:
    """
    Verify the bearer token and return its claims.

    Raises:
        CredentialsException: If the header is missing or the token is invalid.
    """
    if credentials is None:
        raise CredentialsException("Not authenticated")

    claims = decode_token(credentials.credentials)
    if claims is None:
        raise CredentialsException()
    return claims


def get_current_user(
    claims: Annotated[Dict[str, Any], Depends(get_token_claims)],
    user_service: Annotated[UserService, Depends(get_user_service)],
) -> UserRecord:
    """
    Get the current user, creating the record on first sign-in.

    Args:
        claims: Verified token claims.
        user_service: User service.

    Returns:
        UserRecord: The authenticated user.
    """
    user = user_service.get_user(claims["sub"])
    if user is None:
        user = user_service.sync_user(IdentityProfile.from_claims(claims))

    set_user_context(user_id=user.external_id, role=user.role.value)
    return user


def get_current_role(
    current_user: Annotated[UserRecord, Depends(get_current_user)],
) -> UserRole:
    return current_user.role


def require_role(allowed_roles: Union[UserRole, List[UserRole]]) -> Callable:
    """
    Dependency factory that requires one of the given roles.

    Usage:
        @router.get("/admin")
        async def admin_endpoint(user: UserRecord = Depends(require_role(UserRole.ADMIN))):
            ...
    """
    if isinstance(allowed_roles, UserRole):
        allowed_roles = [allowed_roles]

    def role_checker(
        current_user: Annotated[UserRecord, Depends(get_current_user)],
    ) -> UserRecord:
        if current_user.role not in allowed_roles:
            raise ForbiddenError("Forbidden")
        return current_user

    return role_checker


def require_permission(required_permission: Permission) -> Callable:
    """Dependency factory that requires a specific permission."""

    def permission_checker(
        current_user: Annotated[UserRecord, Depends(get_current_user)],
    ) -> UserRecord:
        if not has_permission(current_user.role, required_permission):
            raise ForbiddenError("Forbidden")
        return current_user

    return permission_checker


get_current_admin = require_role(UserRole.ADMIN)
