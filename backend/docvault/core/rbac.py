"""
Role-Based Access Control (RBAC) Module.

Defines permissions, the role to permission table, and the document read rules
applied to readers without full document access. The FastAPI dependencies
built on top of this live in docvault.api.deps.
"""

import logging
from enum import Enum
from typing import List, Optional, Set

from docvault.core.exceptions import ForbiddenError
from docvault.models.document import DocumentMetadata, DocumentStatus, RetrievalMode
from docvault.models.user import UserRole

logger = logging.getLogger(__name__)


class Permission(str, Enum):
    """Granular permissions for fine-grained access control."""

    # Document permissions
    DOCUMENT_READ = "document:read"
    DOCUMENT_DOWNLOAD = "document:download"
    DOCUMENT_READ_ALL = "document:read_all"
    DOCUMENT_MANAGE = "document:manage"

    # Category permissions
    CATEGORY_READ = "category:read"
    CATEGORY_MANAGE = "category:manage"

    # User management permissions
    USER_VIEW = "user:view"
    USER_MANAGE_ROLES = "user:manage_roles"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserRole, Set[Permission]] = {
    UserRole.USER: {
        Permission.DOCUMENT_READ,
        Permission.DOCUMENT_DOWNLOAD,
        Permission.CATEGORY_READ,
    },
    UserRole.ADMIN: set(Permission),
}


def get_role_permissions(role: UserRole) -> Set[Permission]:
    """Get all permissions for a given role."""
    return ROLE_PERMISSIONS.get(role, set())


def has_permission(user_role: UserRole, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    return permission in get_role_permissions(user_role)


def has_any_permission(user_role: UserRole, permissions: List[Permission]) -> bool:
    """Check if a role has any of the specified permissions."""
    role_permissions = get_role_permissions(user_role)
    return any(p in role_permissions for p in permissions)


def check_document_access(
    role: UserRole,
    document: DocumentMetadata,
    mode: RetrievalMode,
) -> None:
    """
    Enforce the read rules for a single document.

    Readers without DOCUMENT_READ_ALL only see enabled documents, and may
    only fetch raw bytes for download when downloads are enabled. Inline
    viewing skips the download check.

    Raises:
        ForbiddenError: If the role may not read the document in this mode.
    """
    if has_permission(role, Permission.DOCUMENT_READ_ALL):
        return

    if not document.is_enabled:
        logger.info(f"Blocked {mode.value} of disabled document {document.id}")
        raise ForbiddenError("Document not available")

    if mode == RetrievalMode.DOWNLOAD and not document.download_enabled:
        logger.info(f"Blocked download of view-only document {document.id}")
        raise ForbiddenError("Downloads are disabled for this document")


def effective_status_filter(
    role: UserRole,
    requested: Optional[DocumentStatus] = None,
) -> Optional[DocumentStatus]:
    """Return the status filter a role is allowed to list with."""
    if has_permission(role, Permission.DOCUMENT_READ_ALL):
        return requested
    return DocumentStatus.ENABLED
