from .base import (
    VERSION_FIELD,
    VERSIONED_DOCUMENTS_INDEX,
    DocumentSession,
    DocumentStore,
    StoredDocument,
    document_version,
)
from .memory import InMemoryDocumentStore
from .metadata import EXPIRES, LAST_MODIFIED, UPLOAD_DATE, Metadata, parse_timestamp

__all__ = [
    "DocumentSession",
    "DocumentStore",
    "EXPIRES",
    "InMemoryDocumentStore",
    "LAST_MODIFIED",
    "Metadata",
    "StoredDocument",
    "UPLOAD_DATE",
    "VERSION_FIELD",
    "VERSIONED_DOCUMENTS_INDEX",
    "document_version",
    "parse_timestamp",
]
