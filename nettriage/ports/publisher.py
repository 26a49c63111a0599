from __future__ import annotations

from typing import Protocol


class Publisher(Protocol):
    """Publishing boundary for session summaries."""
    def publish(self, run_summary: dict) -> None:
        """Publish a session summary for the operator or downstream systems.

        Args:
            run_summary (dict): Summary payload produced by orchestration.
        """
        ...
