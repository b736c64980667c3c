from .base import Executor, RunReport, TaskOutcome, TaskStatus
from .dryrun import DryRunExecutor
from .local import LocalExecutor

__all__ = [
    "DryRunExecutor",
    "Executor",
    "LocalExecutor",
    "RunReport",
    "TaskOutcome",
    "TaskStatus",
]
