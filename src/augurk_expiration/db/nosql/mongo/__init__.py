from .session import dispose_mongo, get_mongo_db, initialize_mongo
from .store import MongoDocumentStore

__all__ = [
    "MongoDocumentStore",
    "dispose_mongo",
    "get_mongo_db",
    "initialize_mongo",
]
