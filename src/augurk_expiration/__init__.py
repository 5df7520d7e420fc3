from .configuration import Configuration, ConfigurationManager
from .db import DocumentStoreProvider
from .db.nosql import InMemoryDocumentStore
from .exceptions import AugurkError
from .expiration import ExpirationManager, ExpirationReport

__all__ = [
    # Base exception
    "AugurkError",
    # Configuration
    "Configuration",
    "ConfigurationManager",
    # Store
    "DocumentStoreProvider",
    "InMemoryDocumentStore",
    # Expiration
    "ExpirationManager",
    "ExpirationReport",
]
