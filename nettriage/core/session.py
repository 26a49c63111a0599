from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from nettriage.core.redaction import redact_text


SUMMARY_LOG = "summary.txt"
COLLECT_LOG = "collect.txt"
REACHABILITY_LOG = "reachability.txt"
FIX_LOG = "fix.txt"
RAW_DIR = "raw"


@dataclass
class SessionLog:
    """Append-only text log with `[HH:MM:SS] message` lines.

    The file is opened per write so nothing holds a handle between lines.
    """
    path: Path
    clock: Callable[[], datetime] = datetime.now
    echo: bool = False

    def write(self, message: str) -> str:
        line = f"[{self.clock().strftime('%H:%M:%S')}] {message}"
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
        if self.echo:
            print(line)
        return line

    def exists(self) -> bool:
        return self.path.exists()

    def lines(self) -> list[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()


@dataclass
class SessionContext:
    """Per-run session directory shared by collector, classifier and pipeline."""
    root: Path
    clock: Callable[[], datetime] = datetime.now
    echo: bool = False
    run_id: str = ""
    _logs: dict[str, SessionLog] = field(default_factory=dict, init=False, repr=False)

    @staticmethod
    def create(
        base_dir: str | Path,
        run_id: str | None = None,
        clock: Callable[[], datetime] = datetime.now,
        echo: bool = False,
    ) -> "SessionContext":
        """Create a fresh timestamped session directory under base_dir."""
        run_id = run_id or new_run_id()
        root = Path(base_dir) / run_id
        (root / RAW_DIR).mkdir(parents=True, exist_ok=True)
        return SessionContext(root=root, clock=clock, echo=echo, run_id=run_id)

    @property
    def raw_dir(self) -> Path:
        return self.root / RAW_DIR

    @property
    def summary(self) -> SessionLog:
        return self._log(SUMMARY_LOG)

    @property
    def collect(self) -> SessionLog:
        return self._log(COLLECT_LOG)

    @property
    def reachability(self) -> SessionLog:
        return self._log(REACHABILITY_LOG)

    @property
    def fix(self) -> SessionLog:
        return self._log(FIX_LOG)

    def write_raw(self, name: str, content: str) -> Path:
        """Archive one raw capture as raw/<name>.txt (redacted)."""
        self.raw_dir.mkdir(parents=True, exist_ok=True)
        path = self.raw_dir / f"{_safe_name(name)}.txt"
        path.write_text(redact_text(content), encoding="utf-8")
        return path

    def raw_files(self) -> list[Path]:
        if not self.raw_dir.exists():
            return []
        return sorted(self.raw_dir.glob("*.txt"))

    def _log(self, filename: str) -> SessionLog:
        log = self._logs.get(filename)
        if log is None:
            log = SessionLog(self.root / filename, clock=self.clock, echo=self.echo)
            self._logs[filename] = log
        return log


def new_run_id() -> str:
    now = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"{now}-{uuid.uuid4().hex[:8]}"


def _safe_name(name: str) -> str:
    cleaned = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in name)
    return cleaned or "capture"
