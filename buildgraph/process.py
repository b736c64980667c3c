"""
Blocking execution of external commands (the .NET CLI, git).

Each command runs to completion before `CommandRunner.run` returns. There is no
timeout unless one is configured.
"""

import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from .exceptions import CommandError
from .logging import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Mapping, Sequence

logger = get_logger(__name__)

#: exit status reported when the executable cannot be started
COMMAND_NOT_FOUND = 127

#: exit status reported when a command exceeds its timeout
COMMAND_TIMED_OUT = 124

#: argument values that are masked in logs and errors
_SENSITIVE_FLAGS = frozenset({"--api-key", "-k", "--password", "-p"})


@dataclass(frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return self.returncode == 0


def redact(argv: "Sequence[str]") -> tuple[str, ...]:
    redacted: list[str] = []
    mask_next = False
    for arg in argv:
        redacted.append("****" if mask_next else arg)
        mask_next = arg in _SENSITIVE_FLAGS
    return tuple(redacted)


class CommandRunner:
    def __init__(
        self,
        cwd: Path | None = None,
        timeout: float | None = None,
        env: "Mapping[str, str] | None" = None,
    ) -> None:
        self.cwd = cwd
        self.timeout = timeout
        self.env = dict(env) if env is not None else None

    def run(
        self, argv: "Sequence[str]", cwd: Path | None = None, check: bool = True
    ) -> CommandResult:
        argv = tuple(str(arg) for arg in argv)
        cwd = cwd or self.cwd
        log = logger.bind(command=" ".join(redact(argv)))

        log.info("command_started", cwd=str(cwd) if cwd else None)
        started = time.perf_counter()

        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                env=self.env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise CommandError(redact(argv), COMMAND_NOT_FOUND, str(e)) from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(
                redact(argv), COMMAND_TIMED_OUT, f"timed out after {self.timeout}s"
            ) from e

        result = CommandResult(
            argv=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration=time.perf_counter() - started,
        )
        log.info(
            "command_finished",
            returncode=result.returncode,
            duration=round(result.duration, 3),
        )

        if check and not result.success:
            raise CommandError(redact(argv), result.returncode, result.stderr)

        return result
