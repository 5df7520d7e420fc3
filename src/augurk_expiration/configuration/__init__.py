from .manager import CONFIGURATION_DOCUMENT_ID, ConfigurationManager
from .models import Configuration
from .settings import DEFAULT_EXPIRATION_REGEX, ExpirationSettings, get_expiration_settings

__all__ = [
    "CONFIGURATION_DOCUMENT_ID",
    "Configuration",
    "ConfigurationManager",
    "DEFAULT_EXPIRATION_REGEX",
    "ExpirationSettings",
    "get_expiration_settings",
]
