from typing import TYPE_CHECKING

from .executor import LocalExecutor
from .logging import bind_context, clear_context, get_logger
from .resolver import DependencyResolver

if TYPE_CHECKING:  # pragma: no cover
    from .context import BuildContext
    from .executor import Executor, RunReport
    from .registry import TaskRegistry
    from .topology import Topology

logger = get_logger(__name__)


class Supervisor:
    """
    Ties a registry, its context and an executor together for one process. There is no
    global instance; whoever builds the registry constructs the Supervisor.
    """

    def __init__(
        self,
        registry: "TaskRegistry",
        context: "BuildContext",
        executor: "Executor | None" = None,
    ) -> None:
        self.registry = registry
        self.context = context
        self.resolver = DependencyResolver(registry)
        self.executor: "Executor" = executor or LocalExecutor(registry, context)

    def run_target(self, target: str | None = None) -> "RunReport":
        """
        Resolve `target` (default: the target from the invocation flags) and run it.
        Resolution errors raise before any task runs; task failures are reported.
        """
        if target is None:
            target = self.context.flags.target

        plan = self.resolver.resolve(target)

        bind_context(plan_id=str(plan.uuid), target=target)
        try:
            logger.info(
                "run_started",
                tasks=list(plan.tasks),
                profile=self.context.profile,
                version=self.context.version,
            )
            return self.executor.run(plan)
        finally:
            clear_context()

    def tree(self, target: str | None = None) -> "Topology":
        if target is None:
            target = self.context.flags.target

        return self.resolver.topology(target)

    def describe(self) -> list[tuple[str, str]]:
        return [(task.name, task.description) for task in self.registry.values()]
