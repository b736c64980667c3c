import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from buildgraph import BuildContext, BuildSettings, TaskRegistry
from buildgraph.exceptions import CommandError
from buildgraph.logging import configure_logging
from buildgraph.process import CommandResult

SOLUTION_INFO = """\
using System.Reflection;

[assembly: AssemblyCompany("Contoso")]
[assembly: AssemblyDescription("Widgets for everyone")]
[assembly: AssemblyProduct("Widgets")]
[assembly: AssemblyTitle("Widgets")]
[assembly: AssemblyVersion("1.2.0")]
[assembly: AssemblyFileVersion("1.2.0")]
[assembly: AssemblyInformationalVersion("1.2.0-beta")]
"""


class FakeRunner:
    """Records commands instead of running them."""

    def __init__(self) -> None:
        self.commands: list[tuple[str, ...]] = []
        self.failures: dict[str, int] = {}
        self.handlers: dict[str, Callable[[tuple[str, ...]], None]] = {}

    def run(self, argv, cwd: Path | None = None, check: bool = True) -> CommandResult:
        argv = tuple(str(arg) for arg in argv)
        self.commands.append(argv)

        subcommand = argv[1] if len(argv) > 1 else argv[0]
        if handler := self.handlers.get(subcommand):
            handler(argv)

        returncode = self.failures.get(subcommand, 0)
        if check and returncode:
            raise CommandError(argv, returncode, f"{subcommand} failed")

        return CommandResult(argv=argv, returncode=returncode)

    def subcommands(self) -> list[str]:
        return [
            " ".join(argv[1:3]) if argv[1] == "nuget" else argv[1]
            for argv in self.commands
        ]


@pytest.fixture(autouse=True)
def configure_test_logging():
    configure_logging(level=logging.WARNING)
    yield


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (
        "BUILDGRAPH_TARGET",
        "BUILDGRAPH_API_KEY",
        "BUILDGRAPH_SOURCE",
        "BUILDGRAPH_VERSION",
        "BUILDGRAPH_SKIP_CLEAN",
        "BUILDGRAPH_SKIP_TESTS",
        "BUILDGRAPH_DRY_RUN",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "SolutionInfo.cs").write_text(SOLUTION_INFO, encoding="utf-8")
    (tmp_path / "src" / "Product.sln").touch()

    tests_dir = tmp_path / "tests" / "Product.Tests"
    tests_dir.mkdir(parents=True)
    (tests_dir / "Product.Tests.csproj").touch()

    return tmp_path


@pytest.fixture
def settings(project: Path) -> BuildSettings:
    return BuildSettings(root_dir=project, configuration="Release")


@pytest.fixture
def context(settings: BuildSettings) -> BuildContext:
    return BuildContext.from_settings(settings)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def registry() -> TaskRegistry:
    return TaskRegistry()
