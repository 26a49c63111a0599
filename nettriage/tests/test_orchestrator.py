from datetime import datetime
from pathlib import Path

from nettriage.core.config import TriageConfig
from nettriage.core.errors import ProbeFailure
from nettriage.core.models import CommandResult
from nettriage.core.orchestrator import Orchestrator
from nettriage.core.remediation import DEFAULT_STEPS


class StaticProbe:
    def __init__(self, external_ok: bool = True) -> None:
        self.external_ok = external_ok

    def capture(self, name: str) -> str:
        if name == "firewall":
            raise ProbeFailure("netsh not available")
        return f"{name} capture"

    def default_gateway(self):
        return "192.168.1.1"

    def dns_servers(self):
        return ["192.168.1.1"]

    def internal_domain(self):
        return None

    def ping(self, address: str, timeout_ms: int) -> bool:
        return address == "192.168.1.1" or self.external_ok

    def resolve(self, hostname: str) -> bool:
        return self.external_ok


class OkRunner:
    def __init__(self) -> None:
        self.calls = []

    def run(self, argv, timeout_ms=None) -> CommandResult:
        self.calls.append(tuple(argv))
        return CommandResult(argv=tuple(argv), returncode=0, stdout="ok")


class ListPublisher:
    def __init__(self) -> None:
        self.published: list[dict] = []

    def publish(self, run_summary: dict) -> None:
        self.published.append(run_summary)


def _config(tmp_path, formats=("markdown",)) -> TriageConfig:
    return TriageConfig(output_dir=str(tmp_path / "runs"), report_formats=list(formats))


def _clock() -> datetime:
    return datetime(2026, 1, 27, 14, 5, 13)


def test_diagnostic_run_writes_session_layout(tmp_path) -> None:
    publisher = ListPublisher()
    runner = OkRunner()
    orchestrator = Orchestrator(StaticProbe(external_ok=False), runner, publisher, config=_config(tmp_path), clock=_clock)

    summary = orchestrator.run()

    root = Path(summary["session_dir"])
    assert root.parent == tmp_path / "runs"
    for name in ("summary.txt", "collect.txt", "reachability.txt"):
        assert (root / name).exists()
    assert not (root / "fix.txt").exists()
    assert (root / "raw" / "baseline_ipconfig.txt").exists()
    assert summary["verdict"] == "Upstream or outbound block"
    assert "possible upstream/outbound block" in summary["issues"]
    assert summary["outcomes"] == []
    assert runner.calls == []

    summary_lines = (root / "summary.txt").read_text(encoding="utf-8").splitlines()
    assert "[14:05:13] Verdict: Upstream or outbound block" in summary_lines
    report = Path(summary["report_path"]).read_text(encoding="utf-8")
    assert "## Verdict" in report
    assert "**Upstream or outbound block**" in report
    assert report.index("## Issues") < report.index("## Evidence")
    assert "raw/baseline_ipconfig.txt" in report
    assert summary["pdf_path"] is None
    assert publisher.published == [summary]


def test_run_with_remediation_auto_confirm(tmp_path) -> None:
    runner = OkRunner()
    orchestrator = Orchestrator(StaticProbe(), runner, ListPublisher(), config=_config(tmp_path), clock=_clock)

    summary = orchestrator.run(remediate=True, auto_confirm=True, should_abort=lambda: False)

    assert summary["verdict"] == "OK"
    assert [item["step"] for item in summary["outcomes"]] == [step.name for step in DEFAULT_STEPS]
    assert all(item["outcome"] == "Executed-Success" for item in summary["outcomes"])
    assert runner.calls[0] == ("ipconfig", "/flushdns")
    root = Path(summary["session_dir"])
    assert (root / "fix.txt").exists()
    assert (root / "raw" / "fix_clear_proxy.txt").exists()
    report = Path(summary["report_path"]).read_text(encoding="utf-8")
    assert "## Remediation" in report


def test_standalone_remediation_declined(tmp_path) -> None:
    runner = OkRunner()
    orchestrator = Orchestrator(StaticProbe(), runner, ListPublisher(), config=_config(tmp_path, ("markdown", "pdf")))

    summary = orchestrator.remediate(confirm=lambda prompt: False, should_abort=lambda: False)

    root = Path(summary["session_dir"])
    assert summary["verdict"] is None
    assert runner.calls == []
    assert all(item["outcome"] == "Skipped" for item in summary["outcomes"])
    assert not (root / "collect.txt").exists()
    assert Path(summary["pdf_path"]).stat().st_size > 0
