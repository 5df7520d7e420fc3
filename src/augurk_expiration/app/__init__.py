from .core.env import Env, EnvFlags, get_env, get_env_flags
from .core.logging import setup_logging

__all__ = [
    "Env",
    "EnvFlags",
    "get_env",
    "get_env_flags",
    "setup_logging",
]
