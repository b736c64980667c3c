"""
The product build: clean, restore, compile, test, publish, package and push, plus
the version bump tasks.

    Clean -> Restore -> Compile -> Test -> Publish -> Package -> Default
                                                             -> Push
    UpdateAssemblyVersion
    PrepareRelease
"""

import shutil
from dataclasses import dataclass

from fast_depends import Depends

from .archive import zip_directory
from .config import BuildSettings
from .context import BuildContext
from .exceptions import MissingParameterError
from .executor import DryRunExecutor, LocalExecutor
from .feed import NuGetFeed
from .logging import get_logger
from .process import CommandRunner
from .registry import TaskRegistry
from .supervisor import Supervisor
from .toolchain import DotNetToolchain, PackSettings
from .vcs import GitClient
from .versioning import VersioningWorkflow

logger = get_logger(__name__)


@dataclass
class Tools:
    toolchain: DotNetToolchain
    feed: NuGetFeed
    vcs: GitClient
    versioning: VersioningWorkflow

    @classmethod
    def create(
        cls, context: BuildContext, settings: BuildSettings, runner: CommandRunner
    ) -> "Tools":
        vcs = GitClient(runner, executable=settings.git, cwd=context.root_dir)
        return cls(
            toolchain=DotNetToolchain(runner, executable=settings.dotnet),
            feed=NuGetFeed(runner, executable=settings.dotnet),
            vcs=vcs,
            versioning=VersioningWorkflow(context, vcs),
        )


def require_api_key(context: BuildContext) -> str:
    if not context.flags.api_key.strip():
        raise MissingParameterError("api_key", "Push")
    return context.flags.api_key


def require_source(context: BuildContext) -> str:
    if not context.flags.source.strip():
        raise MissingParameterError("source", "Push")
    return context.flags.source


def run_tests(context: BuildContext) -> bool:
    return not context.flags.skip_tests


def register_build_tasks(registry: TaskRegistry, tools: Tools) -> TaskRegistry:
    @registry.setup
    def announce(context: BuildContext) -> None:
        logger.info(
            "build_started",
            product=context.product,
            version=context.version,
            profile=context.profile,
        )

    @registry.teardown
    def finish(context: BuildContext) -> None:
        logger.info("build_finished", product=context.product, version=context.version)

    @registry.task("Clean").describe("Cleans and recreates the artifact directories.")
    def clean(context: BuildContext) -> None:
        paths = context.paths
        if context.flags.skip_clean:
            logger.info("clean_suppressed", root=str(paths.root))
        elif paths.root.exists():
            shutil.rmtree(paths.root)

        for directory in paths.outputs:
            directory.mkdir(parents=True, exist_ok=True)

    @registry.task("Restore").describe("Restores NuGet packages.").depends_on("Clean")
    def restore(context: BuildContext) -> None:
        tools.toolchain.restore(context.solution)

    @registry.task("Compile").describe("Compiles the solution.").depends_on("Restore")
    def compile_solution(context: BuildContext) -> None:
        tools.toolchain.build(context.solution, context.profile)

    @(
        registry.task("Test")
        .describe("Runs the unit tests.")
        .depends_on("Compile")
        .when(run_tests)
    )
    def test(context: BuildContext) -> None:
        projects = context.find_test_projects()
        if not projects:
            logger.warning("no_test_projects", patterns=list(context.test_projects))

        for project in projects:
            tools.toolchain.test(project, context.profile, context.paths.test_results)

    @registry.task("Publish").describe("Publishes the application.").depends_on("Test")
    def publish(context: BuildContext) -> None:
        tools.toolchain.publish(
            context.publish_project, context.profile, context.paths.publish
        )

    @(
        registry.task("Package")
        .describe("Zips the published application and packs the libraries.")
        .depends_on("Publish")
    )
    def package(context: BuildContext) -> None:
        zip_directory(
            context.paths.publish,
            context.paths.packages / f"{context.product}-{context.version}.zip",
        )

        settings = PackSettings(
            profile=context.profile,
            version=context.version,
            output_dir=context.paths.nuget,
        )
        for project in context.pack_projects:
            tools.toolchain.pack(project, settings)

    @(
        registry.task("Push")
        .describe("Pushes the NuGet packages to the package feed.")
        .depends_on("Package")
    )
    def push(
        context: BuildContext,
        source: str = Depends(require_source),
        api_key: str = Depends(require_api_key),
    ) -> None:
        packages = sorted(context.paths.nuget.glob("*.nupkg"))
        if not packages:
            logger.warning("no_packages", directory=str(context.paths.nuget))

        for package in packages:
            tools.feed.push(package, source, api_key)

    @registry.task("UpdateAssemblyVersion").describe(
        "Writes --version into the shared assembly metadata."
    )
    def update_assembly_version(context: BuildContext) -> None:
        tools.versioning.update_assembly_version(context.flags.version)

    @registry.task("PrepareRelease").describe(
        "Updates the version, then commits and tags it."
    )
    def prepare_release(context: BuildContext) -> None:
        tools.versioning.prepare_release(context.flags.version)

    (
        registry.task("Default")
        .describe("Builds and packages the product.")
        .depends_on("Package")
        .register()
    )

    return registry


def create_supervisor(
    settings: BuildSettings, runner: CommandRunner | None = None
) -> Supervisor:
    context = BuildContext.from_settings(settings)
    runner = runner or CommandRunner(
        cwd=context.root_dir, timeout=settings.command_timeout
    )

    registry = register_build_tasks(
        TaskRegistry(), Tools.create(context, settings, runner)
    )

    executor_cls = DryRunExecutor if context.flags.dry_run else LocalExecutor
    return Supervisor(registry, context, executor_cls(registry, context))
