from typing import TYPE_CHECKING

from buildgraph.logging import get_logger

from .base import Executor

if TYPE_CHECKING:  # pragma: no cover
    from buildgraph.registry import Hook
    from buildgraph.task import TaskRunner

logger = get_logger(__name__)


class DryRunExecutor(Executor):
    """
    An Executor that walks a plan and evaluates criteria without invoking any action
    or hook, to show what a run would do.
    """

    def invoke(self, runner: "TaskRunner") -> None:
        logger.info("task_would_run", task=runner.task.name)

    def run_hook(self, fn: "Hook") -> None:
        pass
