from collections.abc import Callable, Iterator, Mapping
from typing import Any

from .exceptions import DuplicateTaskError, RegistryFrozenError, UnknownTaskError
from .logging import get_logger
from .task import Task, TaskBuilder, _check_resolvable

logger = get_logger(__name__)

Hook = Callable[..., Any]


class TaskRegistry(Mapping[str, Task]):
    """
    The catalog of declared tasks, keyed by name in registration order. Registration
    closes once the registry is frozen, which the resolver does on first use.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._frozen = False
        self.setup_hook: Hook | None = None
        self.teardown_hook: Hook | None = None

    def task(self, name: str) -> TaskBuilder:
        return TaskBuilder(name, registry=self)

    def register(self, task: Task) -> Task:
        if self._frozen:
            raise RegistryFrozenError(task.name)
        elif task.name in self._tasks:
            raise DuplicateTaskError(task.name)

        self._tasks[task.name] = task
        logger.debug(
            "task_registered",
            task=task.name,
            kind=task.kind.value,
            dependencies=list(task.dependencies),
        )
        return task

    def setup(self, fn: Hook) -> Hook:
        """Register a hook run once before the first task of a run."""
        if self._frozen:
            raise RegistryFrozenError("<setup>")

        _check_resolvable("<setup>", "hook", fn)
        self.setup_hook = fn
        return fn

    def teardown(self, fn: Hook) -> Hook:
        """Register a hook run once after a run, whether or not it failed."""
        if self._frozen:
            raise RegistryFrozenError("<teardown>")

        _check_resolvable("<teardown>", "hook", fn)
        self.teardown_hook = fn
        return fn

    def lookup(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name) from None

    def get(self, name: str, default: Task | None = None) -> Task | None:
        return self._tasks.get(name, default)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __getitem__(self, name: str) -> Task:
        return self.lookup(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[str]:
        return iter(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)
