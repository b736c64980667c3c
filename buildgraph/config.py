from pathlib import Path
from typing import Annotated, Literal

from annotated_types import Gt
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BuildSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BUILDGRAPH_", extra="forbid")

    target: str = "Default"
    """Name of the task to resolve and run."""

    source: str = ""
    """Package feed the Push task publishes to."""

    api_key: str = ""
    """Credential for the package feed. Only the Push task requires it."""

    version: str = ""
    """Explicit version for the versioning tasks."""

    skip_clean: bool = False
    """Keep existing artifacts; the Clean task still (re)creates missing directories."""

    skip_tests: bool = False
    """Skip the Test task."""

    dry_run: bool = False
    """Resolve and evaluate criteria without invoking any task action."""

    configuration: str | None = None
    """Build profile. Resolved from the host platform when unset."""

    root_dir: Path = Path(".")
    """Repository root. Every other path is relative to it."""

    artifacts_dir: Path = Path("artifacts")
    """Root output directory cleaned by the Clean task."""

    solution: Path = Path("src/Product.sln")
    """Solution restored and compiled by the Restore and Compile tasks."""

    metadata_file: Path = Path("src/SolutionInfo.cs")
    """Shared assembly metadata holding the product version."""

    test_projects: list[str] = Field(
        default_factory=lambda: ["tests/**/*.Tests.csproj"]
    )
    """Glob patterns selecting the projects run by the Test task."""

    publish_project: Path = Path("src/Product/Product.csproj")
    """Application project published by the Publish task."""

    pack_projects: list[Path] = Field(default_factory=list)
    """Library projects packed into NuGet packages by the Package task."""

    product: str = "Product"
    """Name used for the zipped application package."""

    default_version: str = "0.0.0"
    """Version used when the metadata file does not exist yet."""

    dotnet: str = "dotnet"
    """.NET CLI executable."""

    git: str = "git"
    """Git executable."""

    command_timeout: Annotated[float, Gt(0)] | None = None
    """ Max seconds an external command may run. Unset means no timeout."""

    log_format: Literal["console", "json"] = "console"
    """Log renderer."""
