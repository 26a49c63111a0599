from __future__ import annotations

from typing import Protocol, Sequence

from nettriage.core.models import CommandResult


class CommandRunner(Protocol):
    """Abstract process runner shared by the probe adapter and remediation."""
    def run(self, argv: Sequence[str], timeout_ms: int | None = None) -> CommandResult:
        """Execute a command and return a normalized result.

        Args:
            argv (Sequence[str]): Program and arguments.
            timeout_ms (int | None): Optional override of the runner timeout.

        Returns:
            CommandResult: Exit code, captured output and any launch error.
        """
        ...
