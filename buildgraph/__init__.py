from fast_depends import Depends

from .config import BuildSettings
from .context import BuildContext
from .execution_plan import ExecutionPlan
from .executor import DryRunExecutor, Executor, LocalExecutor, RunReport, TaskStatus
from .registry import TaskRegistry
from .resolver import DependencyResolver
from .supervisor import Supervisor
from .task import Task, TaskBuilder, TaskKind

__all__ = [
    "BuildContext",
    "BuildSettings",
    "DependencyResolver",
    "Depends",
    "DryRunExecutor",
    "ExecutionPlan",
    "Executor",
    "LocalExecutor",
    "RunReport",
    "Supervisor",
    "Task",
    "TaskBuilder",
    "TaskKind",
    "TaskRegistry",
    "TaskStatus",
]
