from pathlib import Path

from pydantic import BaseModel, ConfigDict

from .logging import get_logger
from .process import CommandRunner

logger = get_logger(__name__)


class PackSettings(BaseModel):
    profile: str
    version: str
    output_dir: Path
    package_id: str | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class DotNetToolchain:
    """Restore, build, test, publish and pack through the .NET CLI."""

    def __init__(self, runner: CommandRunner, executable: str = "dotnet") -> None:
        self.runner = runner
        self.executable = executable

    def restore(self, project: Path) -> None:
        self.runner.run([self.executable, "restore", project])

    def build(self, project: Path, profile: str) -> None:
        self.runner.run(
            [
                self.executable,
                "build",
                project,
                "--configuration",
                profile,
                "--no-restore",
            ]
        )

    def test(
        self, project: Path, profile: str, results_dir: Path | None = None
    ) -> None:
        argv = [
            self.executable,
            "test",
            project,
            "--configuration",
            profile,
            "--no-build",
        ]
        if results_dir is not None:
            argv += ["--results-directory", results_dir]
        self.runner.run(argv)

    def publish(self, project: Path, profile: str, output_dir: Path) -> None:
        self.runner.run(
            [
                self.executable,
                "publish",
                project,
                "--configuration",
                profile,
                "--no-build",
                "--output",
                output_dir,
            ]
        )

    def pack(self, project: Path, settings: PackSettings) -> Path:
        """Pack `project` and return the path of the produced `.nupkg`."""
        package_id = settings.package_id or project.stem
        self.runner.run(
            [
                self.executable,
                "pack",
                project,
                "--configuration",
                settings.profile,
                "--no-build",
                "--output",
                settings.output_dir,
                f"-p:PackageId={package_id}",
                f"-p:PackageVersion={settings.version}",
            ]
        )

        package = settings.output_dir / f"{package_id}.{settings.version}.nupkg"
        logger.debug("package_created", package=str(package))
        return package
