import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from buildgraph.exceptions import ActionFailure, ExecutionError
from buildgraph.logging import get_logger
from buildgraph.task import TaskKind, TaskRunner

if TYPE_CHECKING:  # pragma: no cover
    from buildgraph.context import BuildContext
    from buildgraph.execution_plan import ExecutionPlan
    from buildgraph.registry import Hook, TaskRegistry
    from buildgraph.task import Task

logger = get_logger(__name__)

SETUP = "<setup>"
TEARDOWN = "<teardown>"


class TaskStatus(str, Enum):
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    GROUPED = "grouped"
    FAILED = "failed"
    NOT_RUN = "not run"


@dataclass(frozen=True)
class TaskOutcome:
    name: str
    status: TaskStatus
    duration: float = 0.0


@dataclass
class RunReport:
    plan: "ExecutionPlan"
    outcomes: list[TaskOutcome] = field(default_factory=list)
    error: ExecutionError | None = None
    duration: float = 0.0
    failed_name: str | None = None

    @property
    def target(self) -> str:
        return self.plan.target

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def failed_task(self) -> str | None:
        """Name of the task or hook (`<setup>`, `<teardown>`) that failed the run."""
        if self.failed_name is not None:
            return self.failed_name
        elif isinstance(self.error, ActionFailure):
            return self.error.task_name

        return next(
            (o.name for o in self.outcomes if o.status is TaskStatus.FAILED), None
        )

    def fail(self, name: str, error: Exception) -> None:
        self.error = _as_failure(name, error)
        self.failed_name = name

    def outcome(self, name: str) -> TaskOutcome:
        return next(o for o in self.outcomes if o.name == name)

    def statuses(self) -> dict[str, TaskStatus]:
        return {o.name: o.status for o in self.outcomes}

    def raise_for_failure(self) -> None:
        if self.error is not None:
            raise self.error

    def summary(self) -> str:
        """Task, duration and status of every task in the plan, as a text table."""
        width = max([len("Task"), *(len(o.name) for o in self.outcomes)]) + 4
        rule = "-" * (width + 28)

        lines = [f"{'Task':<{width}}{'Duration':<16}Status", rule]
        lines.extend(
            f"{o.name:<{width}}{o.duration:<16.3f}{o.status.value.capitalize()}"
            for o in self.outcomes
        )
        lines.extend([rule, f"{'Total:':<{width}}{self.duration:.3f}"])
        return "\n".join(lines)


def _as_failure(task_name: str, error: Exception) -> ExecutionError:
    # validation errors keep their identity, anything else is the action's failure
    if isinstance(error, ExecutionError):
        return error

    failure = ActionFailure(task_name, error)
    failure.__cause__ = error
    return failure


class Executor(ABC):
    """
    Runs an execution plan strictly in order, one task at a time. The first failing
    task stops the run; later tasks are reported as not run.
    """

    def __init__(self, registry: "TaskRegistry", context: "BuildContext") -> None:
        self.registry = registry
        self.context = context

    def run(self, plan: "ExecutionPlan") -> RunReport:
        report = RunReport(plan=plan)
        started = time.perf_counter()

        try:
            self._hook(SETUP, self.registry.setup_hook)
        except Exception as e:
            report.fail(SETUP, e)
            logger.error("setup_failed", error=str(e))

        for name in plan.tasks:
            if report.error is not None:
                report.outcomes.append(TaskOutcome(name, TaskStatus.NOT_RUN))
            else:
                task = self.registry.lookup(name)
                report.outcomes.append(self._run_task(task, report))

        try:
            self._hook(TEARDOWN, self.registry.teardown_hook)
        except Exception as e:
            logger.error("teardown_failed", error=str(e))
            if report.error is None:
                report.fail(TEARDOWN, e)

        report.duration = time.perf_counter() - started

        if report.succeeded:
            logger.info("run_succeeded", duration=round(report.duration, 3))
        else:
            logger.error(
                "run_failed", failed_task=report.failed_task, error=str(report.error)
            )

        return report

    def _run_task(self, task: "Task", report: RunReport) -> TaskOutcome:
        log = logger.bind(task=task.name)
        runner = TaskRunner(task=task, context=self.context)
        started = time.perf_counter()

        try:
            if not runner.eligible():
                # skipping suppresses only this task's action, dependents still run
                log.info("task_skipped")
                return TaskOutcome(task.name, TaskStatus.SKIPPED)

            if task.kind is TaskKind.GROUP:
                log.debug("task_grouped")
                return TaskOutcome(task.name, TaskStatus.GROUPED)

            log.info("task_started")
            self.invoke(runner)
        except Exception as e:
            duration = time.perf_counter() - started
            report.fail(task.name, e)
            log.error("task_failed", error=str(e), exc_info=True)
            return TaskOutcome(task.name, TaskStatus.FAILED, duration)

        duration = time.perf_counter() - started
        log.info("task_finished", duration=round(duration, 3))
        return TaskOutcome(task.name, TaskStatus.SUCCEEDED, duration)

    def _hook(self, name: str, fn: "Hook | None") -> None:
        if fn is not None:
            logger.debug("hook_started", hook=name)
            self.run_hook(fn)

    @abstractmethod
    def invoke(self, runner: TaskRunner) -> None:
        raise NotImplementedError()

    @abstractmethod
    def run_hook(self, fn: "Hook") -> None:
        raise NotImplementedError()
