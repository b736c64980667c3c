"""
Version bumps outside the task graph.

Both entry points re-read the metadata file before writing, so fields other than the
version survive untouched, and writing the same version twice leaves the file as it
was. `prepare_release` additionally stages, commits and tags the change; it does not
inspect git's results beyond the exit status.
"""

from typing import TYPE_CHECKING

from .exceptions import MissingParameterError
from .logging import get_logger
from .metadata import parse_metadata, write_metadata

if TYPE_CHECKING:  # pragma: no cover
    from .context import BuildContext
    from .vcs import GitClient

logger = get_logger(__name__)

TAG_PREFIX = "v"


def release_tag(version: str) -> str:
    return f"{TAG_PREFIX}{version}"


def commit_message(version: str) -> str:
    return f"Bump version to {version}"


class VersioningWorkflow:
    def __init__(self, context: "BuildContext", vcs: "GitClient") -> None:
        self.context = context
        self.vcs = vcs

    def update_assembly_version(
        self, new_version: str, informational_version: str | None = None
    ) -> bool:
        """
        Set the version in the metadata file and the context. Returns whether the file
        was rewritten.
        """
        return self._update(new_version, informational_version, "UpdateAssemblyVersion")

    def prepare_release(self, new_version: str) -> None:
        version = self._require_version(new_version, "PrepareRelease")
        self._update(version, None, "PrepareRelease")

        self.vcs.add(self.context.metadata_file)
        self.vcs.commit(commit_message(version))
        self.vcs.tag(release_tag(version))

        logger.info("release_prepared", version=version, tag=release_tag(version))

    @staticmethod
    def _require_version(new_version: str | None, required_by: str) -> str:
        if new_version is None or not new_version.strip():
            raise MissingParameterError("version", required_by)

        return new_version.strip()

    def _update(
        self,
        new_version: str | None,
        informational_version: str | None,
        required_by: str,
    ) -> bool:
        version = self._require_version(new_version, required_by)
        path = self.context.metadata_file

        current = parse_metadata(path)
        changes = {"version": version, "file_version": version}
        if informational_version:
            changes["informational_version"] = informational_version

        changed = write_metadata(path, current.model_copy(update=changes))
        self.context.version = version

        logger.info(
            "assembly_version_updated",
            path=str(path),
            previous=current.version,
            version=version,
            rewritten=changed,
        )
        return changed
