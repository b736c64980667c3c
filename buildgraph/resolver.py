"""
Dependency resolution for the task graph.
"""

from collections import deque

import networkx as nx

from .exceptions import CyclicDependencyError, UnknownTaskError
from .execution_plan import ExecutionPlan
from .logging import get_logger
from .registry import TaskRegistry
from .topology import Topology

logger = get_logger(__name__)


class DependencyResolver:
    def __init__(self, registry: TaskRegistry) -> None:
        self.registry = registry

    def topology(self, target: str) -> Topology:
        # tasks are fixed from the first resolution onwards
        self.registry.freeze()

        root = self.registry.lookup(target)

        # edges point from a task to its dependencies, added in declaration order so
        # that traversal visits dependencies in the order they were declared
        digraph = nx.DiGraph()
        digraph.add_node(root.name)

        pending = deque([root])
        seen = {root.name}
        while pending:
            task = pending.popleft()

            for dependency in task.dependencies:
                if (dependency_task := self.registry.get(dependency)) is None:
                    raise UnknownTaskError(dependency, required_by=task.name)

                digraph.add_edge(task.name, dependency)

                if dependency not in seen:
                    seen.add(dependency)
                    pending.append(dependency_task)

        try:
            cycle = nx.find_cycle(digraph, source=root.name)
        except nx.NetworkXNoCycle:
            pass
        else:
            raise CyclicDependencyError([edge[0] for edge in cycle])

        # post-order emits every dependency before its dependents, each task once at
        # its first discovery
        order = list(nx.dfs_postorder_nodes(digraph, source=root.name))

        return Topology(target=root.name, digraph=digraph, order=order)

    def resolve(self, target: str) -> ExecutionPlan:
        topology = self.topology(target)
        plan = ExecutionPlan(target=target, tasks=tuple(topology.order))

        logger.debug("plan_resolved", target=target, tasks=list(plan.tasks))
        return plan
