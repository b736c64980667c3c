from typing import TYPE_CHECKING

from buildgraph.task import TaskRunner

from .base import Executor

if TYPE_CHECKING:  # pragma: no cover
    from buildgraph.registry import Hook


class LocalExecutor(Executor):
    """
    An Executor for running plans in the current process. Every action blocks until it
    returns, including the external commands it starts.
    """

    def invoke(self, runner: TaskRunner) -> None:
        runner.run()

    def run_hook(self, fn: "Hook") -> None:
        TaskRunner.call(fn, self.context)
