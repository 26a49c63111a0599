from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ConsolePublisher:
    quiet: bool = False

    def publish(self, run_summary: dict) -> None:
        """Print the session headline for the operator."""
        if self.quiet:
            return None
        print(f"Session: {run_summary['session_dir']}")
        if run_summary.get("verdict"):
            print(f"Verdict: {run_summary['verdict']}")
        for issue in run_summary.get("issues", []):
            print(f"  - {issue}")
        for item in run_summary.get("outcomes", []):
            print(f"  {item['step']}: {item['outcome']}")
        return None
