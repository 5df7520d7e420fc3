from .health import store_healthcheck
from .provider import DocumentStoreProvider
from .settings import StoreSettings, get_store_settings

__all__ = [
    "DocumentStoreProvider",
    "StoreSettings",
    "get_store_settings",
    "store_healthcheck",
]
