import platform
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from .config import BuildSettings
from .logging import get_logger
from .metadata import parse_metadata

logger = get_logger(__name__)


def resolve_profile(system: str | None = None) -> str:
    """Build profile for the host platform."""
    system = system if system is not None else platform.system()
    return "Release" if system == "Windows" else "Debug"


class BuildFlags(BaseModel):
    target: str = "Default"
    source: str = ""
    api_key: str = ""
    version: str = ""
    skip_clean: bool = False
    skip_tests: bool = False
    dry_run: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class BuildPaths(BaseModel):
    root: Path
    binaries: Path
    test_results: Path
    publish: Path
    packages: Path
    nuget: Path

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_root(cls, root: Path) -> "BuildPaths":
        return cls(
            root=root,
            binaries=root / "bin",
            test_results=root / "test-results",
            publish=root / "publish",
            packages=root / "packages",
            nuget=root / "nuget",
        )

    @property
    def outputs(self) -> tuple[Path, ...]:
        """Every output directory below the root, in creation order."""
        return (
            self.binaries,
            self.test_results,
            self.publish,
            self.packages,
            self.nuget,
        )


class BuildContext(BaseModel):
    """
    Configuration shared by every task of a run. Only `version` changes after setup,
    and only through the versioning workflow.
    """

    profile: str
    version: str
    flags: BuildFlags
    paths: BuildPaths

    root_dir: Path
    solution: Path
    metadata_file: Path
    test_projects: tuple[str, ...] = ()
    publish_project: Path
    pack_projects: tuple[Path, ...] = ()
    product: str

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    @classmethod
    def from_settings(cls, settings: BuildSettings) -> "BuildContext":
        root_dir = settings.root_dir.resolve()
        metadata_file = root_dir / settings.metadata_file

        if metadata_file.is_file():
            version = parse_metadata(metadata_file).version or settings.default_version
        else:
            logger.warning(
                "metadata_file_missing",
                path=str(metadata_file),
                version=settings.default_version,
            )
            version = settings.default_version

        context = cls(
            profile=settings.configuration or resolve_profile(),
            version=version,
            flags=BuildFlags(
                target=settings.target,
                source=settings.source,
                api_key=settings.api_key,
                version=settings.version,
                skip_clean=settings.skip_clean,
                skip_tests=settings.skip_tests,
                dry_run=settings.dry_run,
            ),
            paths=BuildPaths.from_root(root_dir / settings.artifacts_dir),
            root_dir=root_dir,
            solution=root_dir / settings.solution,
            metadata_file=metadata_file,
            test_projects=tuple(settings.test_projects),
            publish_project=root_dir / settings.publish_project,
            pack_projects=tuple(root_dir / p for p in settings.pack_projects),
            product=settings.product,
        )
        logger.debug(
            "context_resolved", profile=context.profile, version=context.version
        )
        return context

    def find_test_projects(self) -> list[Path]:
        found: dict[Path, None] = {}
        for pattern in self.test_projects:
            for path in sorted(self.root_dir.glob(pattern)):
                found.setdefault(path, None)
        return list(found)
