import inspect
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from fast_depends import inject
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import TaskDefinitionError

if TYPE_CHECKING:  # pragma: no cover
    from .context import BuildContext
    from .registry import TaskRegistry

Action = Callable[..., Any]
Criterion = Callable[..., bool]

# supplied by the runner; every other parameter needs a default, e.g. `Depends(...)`
CONTEXT_PARAMETER = "context"


class TaskKind(str, Enum):
    GROUP = "group"
    ACTION = "action"


class Task(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    dependencies: tuple[str, ...] = ()
    criterion: Criterion | None = None
    action: Action | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def kind(self) -> TaskKind:
        return TaskKind.GROUP if self.action is None else TaskKind.ACTION

    def __repr__(self) -> str:
        return f"Task(name={self.name!r}, dependencies={self.dependencies!r})"


@lru_cache
def _get_available_parameters(fn) -> dict[str, dict[str, Any]]:
    init_signature = inspect.signature(fn)
    parameters = init_signature.parameters.values()
    return {
        param.name: {
            "annotation": param.annotation,
            "optional": param.default is not inspect.Parameter.empty,
        }
        for param in parameters
        if param.name != "self"
    }


@lru_cache(maxsize=None)
def _get_resolved_fn(fn: Callable[..., Any]) -> Callable[..., Any]:
    return inject(fn)


def _check_resolvable(task_name: str, role: str, fn: Callable[..., Any]) -> None:
    if not callable(fn):
        raise TaskDefinitionError(f"Task '{task_name}' {role} is not callable.")

    parameters = _get_available_parameters(fn)
    # optional also captures dependencies defined as `a = Depends(_a)`
    resolved_optional_args = {
        name for name, param in parameters.items() if param["optional"]
    }

    if missing_args := (
        parameters.keys() - {CONTEXT_PARAMETER} - resolved_optional_args
    ):
        raise TaskDefinitionError(
            f"Task '{task_name}' {role} has unresolvable parameters:"
            f" {sorted(missing_args)}"
        )


class TaskBuilder:
    """
    Fluent definition of a task:

        registry.task("Test").depends_on("Compile").when(run_tests).does(test)

    A builder can also decorate the action, which registers the task at once:

        @registry.task("Compile").depends_on("Restore")
        def compile(context: BuildContext) -> None: ...
    """

    def __init__(self, name: str, registry: "TaskRegistry | None" = None) -> None:
        self._name = name
        self._registry = registry
        self._description = ""
        self._dependencies: list[str] = []
        self._criteria: list[Criterion] = []
        self._action: Action | None = None

    def describe(self, description: str) -> "TaskBuilder":
        self._description = description
        return self

    def depends_on(self, *names: str) -> "TaskBuilder":
        for name in names:
            if name not in self._dependencies:
                self._dependencies.append(name)
        return self

    def when(self, criterion: Criterion | bool) -> "TaskBuilder":
        """Add a run criterion. Every criterion must hold for the action to run."""
        if isinstance(criterion, bool):
            value = criterion

            def criterion() -> bool:
                return value

        _check_resolvable(self._name, "criterion", criterion)
        self._criteria.append(criterion)
        return self

    def does(self, action: Action) -> "TaskBuilder":
        if self._action is not None:
            raise TaskDefinitionError(f"Task '{self._name}' already has an action.")

        _check_resolvable(self._name, "action", action)
        self._action = action
        return self

    def _criterion(self) -> Criterion | None:
        if not self._criteria:
            return None
        elif len(self._criteria) == 1:
            return self._criteria[0]

        criteria = tuple(self._criteria)

        def all_criteria(context) -> bool:
            return all(TaskRunner.call(criterion, context) for criterion in criteria)

        return all_criteria

    def build(self) -> Task:
        return Task(
            name=self._name,
            description=self._description,
            dependencies=tuple(self._dependencies),
            criterion=self._criterion(),
            action=self._action,
        )

    def register(self) -> Task:
        if self._registry is None:
            raise TaskDefinitionError(
                f"Task '{self._name}' is not bound to a registry."
            )

        task = self.build()
        self._registry.register(task)
        return task

    def __call__(self, fn: Action) -> Action:
        self.does(fn).register()
        return fn


@dataclass
class TaskRunner:
    """Evaluates a task's criterion and invokes its action against a context."""

    task: Task
    context: "BuildContext"

    @staticmethod
    def call(fn: Callable[..., Any], context: "BuildContext") -> Any:
        kwargs: dict[str, Any] = {}
        if CONTEXT_PARAMETER in _get_available_parameters(fn):
            kwargs[CONTEXT_PARAMETER] = context

        return _get_resolved_fn(fn)(**kwargs)

    def eligible(self) -> bool:
        if self.task.criterion is None:
            return True

        return bool(self.call(self.task.criterion, self.context))

    def run(self) -> None:
        if self.task.kind is TaskKind.ACTION:
            self.call(self.task.action, self.context)
