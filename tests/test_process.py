import sys

import pytest

from buildgraph.exceptions import CommandError
from buildgraph.process import (
    COMMAND_NOT_FOUND,
    COMMAND_TIMED_OUT,
    CommandRunner,
    redact,
)


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_run_captures_output(tmp_path):
    result = CommandRunner(cwd=tmp_path).run(
        _python("import os; print(os.getcwd())")
    )

    assert result.success
    assert result.returncode == 0
    assert result.stdout.strip() == str(tmp_path.resolve())
    assert result.duration >= 0


def test_run_failure_raises():
    with pytest.raises(CommandError) as exc_info:
        CommandRunner().run(
            _python("import sys; sys.stderr.write('bad things\\n'); sys.exit(3)")
        )

    assert exc_info.value.returncode == 3
    assert "bad things" in str(exc_info.value)


def test_run_failure_unchecked():
    result = CommandRunner().run(_python("raise SystemExit(2)"), check=False)

    assert not result.success
    assert result.returncode == 2


def test_run_missing_executable():
    with pytest.raises(CommandError) as exc_info:
        CommandRunner().run(["buildgraph-no-such-tool", "--version"])

    assert exc_info.value.returncode == COMMAND_NOT_FOUND


def test_run_timeout():
    with pytest.raises(CommandError) as exc_info:
        CommandRunner(timeout=0.5).run(_python("import time; time.sleep(5)"))

    assert exc_info.value.returncode == COMMAND_TIMED_OUT


def test_run_failure_hides_secrets():
    with pytest.raises(CommandError) as exc_info:
        CommandRunner().run(
            _python("raise SystemExit(1)") + ["--api-key", "hunter2"]
        )

    assert "hunter2" not in str(exc_info.value)


@pytest.mark.parametrize(
    ("argv", "expected"),
    (
        (
            ("dotnet", "nuget", "push", "a.nupkg", "--api-key", "s3cr3t"),
            ("dotnet", "nuget", "push", "a.nupkg", "--api-key", "****"),
        ),
        (("tool", "-p", "pw", "-v"), ("tool", "-p", "****", "-v")),
        (("git", "tag", "v1.0.0"), ("git", "tag", "v1.0.0")),
    ),
)
def test_redact(argv, expected):
    assert redact(argv) == expected
