from pathlib import Path
from typing import TYPE_CHECKING

from .process import CommandRunner

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence


class GitClient:
    """Thin wrapper over the git CLI. A non-zero exit raises `CommandError`."""

    def __init__(
        self, runner: CommandRunner, executable: str = "git", cwd: Path | None = None
    ) -> None:
        self.runner = runner
        self.executable = executable
        self.cwd = cwd

    def run(self, argv: "Sequence[str | Path]") -> int:
        return self.runner.run([self.executable, *argv], cwd=self.cwd).returncode

    def add(self, *paths: Path) -> int:
        return self.run(["add", "--", *paths])

    def commit(self, message: str) -> int:
        return self.run(["commit", "-m", message])

    def tag(self, name: str, message: str | None = None) -> int:
        if message is None:
            return self.run(["tag", name])

        return self.run(["tag", "-a", name, "-m", message])
