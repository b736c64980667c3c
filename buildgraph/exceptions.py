from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence
    from typing import Any


class BuildGraphError(Exception):
    def __init__(self, *args: "Any", **kwargs: "Any") -> None:
        super().__init__(*args, **kwargs)


##
## TASK DEFINITION
##


class TaskDefinitionError(BuildGraphError):
    def __init__(self, message: str) -> None:
        super().__init__(message)


class DuplicateTaskError(TaskDefinitionError):
    def __init__(self, task_name: str) -> None:
        self.task_name = task_name
        super().__init__(f"Task '{task_name}' is already registered.")


class RegistryFrozenError(TaskDefinitionError):
    def __init__(self, task_name: str) -> None:
        self.task_name = task_name
        super().__init__(
            f"Cannot register task '{task_name}'. Tasks must be registered before"
            " any target is resolved."
        )


##
## RESOLUTION
##


class ResolutionError(BuildGraphError):
    def __init__(self, message: str) -> None:
        super().__init__(message)


class UnknownTaskError(ResolutionError):
    def __init__(self, task_name: str, required_by: str | None = None) -> None:
        self.task_name = task_name
        self.required_by = required_by

        message = f"Task '{task_name}' is not registered."
        if required_by is not None:
            message = (
                f"Task '{task_name}' (a dependency of '{required_by}') is not"
                " registered."
            )
        super().__init__(message)


class CyclicDependencyError(ResolutionError):
    def __init__(self, cycle: "Sequence[str]") -> None:
        self.cycle = tuple(cycle)
        cycle_str = " -> ".join((*self.cycle, self.cycle[0]))
        super().__init__(
            f"Tasks cannot depend on themselves. Offending cycle:\n  {cycle_str}"
        )


##
## EXECUTION
##


class ExecutionError(BuildGraphError):
    def __init__(self, message: str) -> None:
        super().__init__(message)


class MissingParameterError(ExecutionError):
    def __init__(self, parameter: str, required_by: str) -> None:
        self.parameter = parameter
        self.required_by = required_by
        super().__init__(
            f"Parameter '{parameter}' is required by '{required_by}' but was not"
            " supplied."
        )


class ActionFailure(ExecutionError):
    def __init__(self, task_name: str, cause: BaseException) -> None:
        self.task_name = task_name
        self.cause = cause
        super().__init__(f"Task '{task_name}' failed: {cause}")


##
## COLLABORATORS
##


class CommandError(BuildGraphError):
    def __init__(
        self, argv: "Sequence[str]", returncode: int, stderr: str = ""
    ) -> None:
        self.argv = tuple(argv)
        self.returncode = returncode
        self.stderr = stderr

        message = f"Command '{' '.join(self.argv)}' exited with status {returncode}."
        if tail := stderr.strip().splitlines()[-5:]:
            message += "\n  " + "\n  ".join(tail)
        super().__init__(message)


class MetadataError(BuildGraphError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Unable to read version metadata from '{path}': {reason}")
