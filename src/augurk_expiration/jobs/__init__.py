from .expiration import APPLY_POLICY_TASK, PURGE_EXPIRED_TASK, register_expiration_jobs
from .scheduler import InMemoryScheduler, ScheduledTask

__all__ = [
    "APPLY_POLICY_TASK",
    "InMemoryScheduler",
    "PURGE_EXPIRED_TASK",
    "ScheduledTask",
    "register_expiration_jobs",
]
