import random

import pytest

from buildgraph import DependencyResolver, Task, TaskRegistry
from buildgraph.exceptions import (
    CyclicDependencyError,
    RegistryFrozenError,
    UnknownTaskError,
)

PIPELINE = ["Clean", "Restore", "Compile", "Test", "Publish", "Package"]


def _registry(*tasks: Task) -> TaskRegistry:
    registry = TaskRegistry()
    for task in tasks:
        registry.register(task)
    return registry


def _chain() -> TaskRegistry:
    registry = TaskRegistry()
    previous: tuple[str, ...] = ()
    for name in PIPELINE:
        registry.register(Task(name=name, dependencies=previous))
        previous = (name,)
    registry.register(Task(name="Default", dependencies=("Package",)))
    return registry


def test_resolve_default_chain():
    plan = DependencyResolver(_chain()).resolve("Default")

    assert plan.target == "Default"
    assert plan.tasks == (*PIPELINE, "Default")


def test_resolve_intermediate_target():
    plan = DependencyResolver(_chain()).resolve("Compile")

    assert plan.tasks == ("Clean", "Restore", "Compile")


def test_resolve_diamond_emits_shared_dependency_once():
    registry = _registry(
        Task(name="base"),
        Task(name="left", dependencies=("base",)),
        Task(name="right", dependencies=("base",)),
        Task(name="top", dependencies=("left", "right")),
    )

    plan = DependencyResolver(registry).resolve("top")

    assert plan.tasks == ("base", "left", "right", "top")


def test_resolve_follows_declaration_order():
    registry = _registry(
        Task(name="a"),
        Task(name="b"),
        Task(name="c"),
        Task(name="top", dependencies=("c", "a", "b")),
    )

    assert DependencyResolver(registry).resolve("top").tasks == ("c", "a", "b", "top")


def test_resolve_excludes_unreachable_tasks():
    registry = _registry(
        Task(name="a"), Task(name="b"), Task(name="top", dependencies=("a",))
    )

    assert DependencyResolver(registry).resolve("top").tasks == ("a", "top")


def test_resolve_does_not_evaluate_criteria():
    def explode() -> bool:
        raise AssertionError("criteria are evaluated at run time")

    registry = _registry(
        Task(name="gated", criterion=explode),
        Task(name="top", dependencies=("gated",)),
    )

    assert DependencyResolver(registry).resolve("top").tasks == ("gated", "top")


@pytest.mark.parametrize("seed", range(10))
def test_resolve_random_dag(seed):
    rng = random.Random(seed)
    names = [f"t{i}" for i in range(25)]

    registry = TaskRegistry()
    for i, name in enumerate(names):
        dependencies = tuple(rng.sample(names[:i], k=rng.randint(0, min(i, 4))))
        registry.register(Task(name=name, dependencies=dependencies))

    target = names[-1]
    plan = DependencyResolver(registry).resolve(target)

    assert len(plan.tasks) == len(set(plan.tasks))
    assert plan.tasks[-1] == target
    for name in plan.tasks:
        for dependency in registry[name].dependencies:
            assert plan.index(dependency) < plan.index(name)


def test_resolve_unknown_target():
    with pytest.raises(UnknownTaskError) as exc_info:
        DependencyResolver(_chain()).resolve("Deploy")

    assert exc_info.value.task_name == "Deploy"


def test_resolve_unknown_dependency():
    registry = _registry(
        Task(name="a", dependencies=("missing",)),
        Task(name="top", dependencies=("a",)),
    )

    with pytest.raises(UnknownTaskError) as exc_info:
        DependencyResolver(registry).resolve("top")

    assert exc_info.value.task_name == "missing"
    assert exc_info.value.required_by == "a"


def test_resolve_names_are_case_sensitive():
    with pytest.raises(UnknownTaskError):
        DependencyResolver(_chain()).resolve("default")


@pytest.mark.parametrize(
    "tasks",
    (
        (Task(name="a", dependencies=("a",)),),
        (Task(name="a", dependencies=("b",)), Task(name="b", dependencies=("a",))),
        (
            Task(name="a", dependencies=("b",)),
            Task(name="b", dependencies=("c",)),
            Task(name="c", dependencies=("d",)),
            Task(name="d", dependencies=("b",)),
        ),
    ),
    ids=("self", "pair", "deep"),
)
def test_resolution_failure_cyclic(tasks):
    registry = _registry(*tasks)

    with pytest.raises(CyclicDependencyError) as exc_info:
        DependencyResolver(registry).resolve("a")

    assert set(exc_info.value.cycle) <= {task.name for task in tasks}


def test_resolve_cycle_below_target():
    registry = _registry(
        Task(name="leaf"),
        Task(name="x", dependencies=("leaf", "y")),
        Task(name="y", dependencies=("x",)),
        Task(name="top", dependencies=("x",)),
    )

    with pytest.raises(CyclicDependencyError) as exc_info:
        DependencyResolver(registry).resolve("top")

    assert set(exc_info.value.cycle) == {"x", "y"}


def test_resolve_freezes_registry():
    registry = _chain()
    DependencyResolver(registry).resolve("Default")

    assert registry.frozen
    with pytest.raises(RegistryFrozenError):
        registry.register(Task(name="Late"))


def test_resolve_fresh_plan_each_call():
    resolver = DependencyResolver(_chain())

    first = resolver.resolve("Default")
    second = resolver.resolve("Default")

    assert first.tasks == second.tasks
    assert first.uuid != second.uuid


def test_topology_tree():
    topology = DependencyResolver(_chain()).topology("Default")

    assert topology.order == [*PIPELINE, "Default"]
    assert topology.dependencies("Test") == ["Compile"]

    rendered = str(topology)
    assert rendered.splitlines()[0].endswith("Default")
    for name in PIPELINE:
        assert name in rendered
