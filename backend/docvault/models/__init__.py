"""
Record models for the MongoDB collections.
"""

from docvault.models.category import CategoryRecord
from docvault.models.document import (
    DocumentCreate,
    DocumentMetadata,
    DocumentStatus,
    RetrievalMode,
    RetrievedDocument,
)
from docvault.models.user import (
    RECENT_DOCUMENTS_LIMIT,
    IdentityProfile,
    RecentView,
    UserRecord,
    UserRole,
)

__all__ = [
    "CategoryRecord",
    "DocumentCreate",
    "DocumentMetadata",
    "DocumentStatus",
    "RetrievalMode",
    "RetrievedDocument",
    "RECENT_DOCUMENTS_LIMIT",
    "IdentityProfile",
    "RecentView",
    "UserRecord",
    "UserRole",
]
