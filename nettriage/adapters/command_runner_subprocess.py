from __future__ import annotations

import subprocess
from typing import Sequence

from nettriage.core.models import CommandResult


class SubprocessCommandRunner:
    """Run OS commands and normalize every failure into a CommandResult.

    Launch errors and timeouts are reported through CommandResult.error rather
    than raised, so callers decide whether a failure is a probe or an action
    failure.
    """
    def __init__(self, timeout_ms: int = 120000) -> None:
        self.timeout_ms = timeout_ms

    def run(self, argv: Sequence[str], timeout_ms: int | None = None) -> CommandResult:
        argv = tuple(argv)
        timeout = (timeout_ms if timeout_ms and timeout_ms > 0 else self.timeout_ms) / 1000
        try:
            proc = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            return CommandResult(
                argv=argv,
                returncode=-1,
                stdout=_text(exc.stdout),
                stderr=_text(exc.stderr),
                error=f"timed out after {timeout:g}s",
            )
        except OSError as exc:
            return CommandResult(argv=argv, returncode=-1, error=f"could not start {argv[0]}: {exc}")

        return CommandResult(
            argv=argv,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )


def _text(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
