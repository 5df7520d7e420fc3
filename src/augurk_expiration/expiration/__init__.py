from .manager import ExpirationManager, ExpirationReport
from .policy import PolicyOutcome, apply_policy

__all__ = [
    "ExpirationManager",
    "ExpirationReport",
    "PolicyOutcome",
    "apply_policy",
]
