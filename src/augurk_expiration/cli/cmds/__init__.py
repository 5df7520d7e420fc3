from .config_cmds import register as register_config
from .expiration_cmds import register as register_expiration
from .jobs_cmds import register as register_jobs

__all__ = [
    "register_config",
    "register_expiration",
    "register_jobs",
]
