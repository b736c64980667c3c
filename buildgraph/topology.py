from typing import TYPE_CHECKING

from networkx import generate_network_text

if TYPE_CHECKING:  # pragma: no cover
    from networkx import DiGraph


class Topology:
    """
    The part of the task graph reachable from a target. Edges point from a task to
    each of its dependencies, so the target is the only root.
    """

    def __init__(self, *, target: str, digraph: "DiGraph", order: list[str]) -> None:
        self.target = target
        self.digraph = digraph
        self.order = order

    def dependencies(self, name: str) -> list[str]:
        return list(self.digraph.successors(name))

    def __str__(self) -> str:
        return "\n".join(
            generate_network_text(
                self.digraph, sources=[self.target], vertical_chains=True
            )
        )
