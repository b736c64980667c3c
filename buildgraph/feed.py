from pathlib import Path

from .exceptions import MissingParameterError
from .process import CommandRunner


class NuGetFeed:
    def __init__(self, runner: CommandRunner, executable: str = "dotnet") -> None:
        self.runner = runner
        self.executable = executable

    def push(self, package: Path, source: str, api_key: str) -> None:
        if not source.strip():
            raise MissingParameterError("source", "nuget push")
        elif not api_key.strip():
            raise MissingParameterError("api_key", "nuget push")

        self.runner.run(
            [
                self.executable,
                "nuget",
                "push",
                package,
                "--source",
                source,
                "--api-key",
                api_key,
            ]
        )
