from pathlib import Path

from nettriage.core.config import TriageConfig
from nettriage.core.models import (
    EvidenceRecord,
    RemediationAction,
    RemediationStep,
    StepOutcome,
    StepResult,
    Verdict,
)
from nettriage.core.pdf_report import generate_pdf_report
from nettriage.core.report import render_report


def _outcomes() -> list[StepResult]:
    step = RemediationStep(
        name="flush_dns",
        prompt="Flush DNS cache",
        actions=(RemediationAction("ipconfig /flushdns", ("ipconfig", "/flushdns")),),
        raw_output_key="fix_flush_dns",
    )
    return [
        StepResult(step, StepOutcome.EXECUTED_FAILURE, "failed: exit code 1"),
        StepResult(step, StepOutcome.SKIPPED, "declined"),
    ]


def _evidence() -> EvidenceRecord:
    return EvidenceRecord(
        gateway="10.0.0.1",
        gateway_reachable=True,
        dns_servers=["10.0.0.53"],
        dns_server_reachable=True,
        external_ip_reachable=True,
        external_dns_resolvable=False,
        ncsi_dns_resolvable=False,
    )


def test_render_report_sections() -> None:
    report = render_report(
        "run-1",
        TriageConfig(),
        _evidence(),
        ["external DNS resolution failed", "likely DNS issue"],
        Verdict.DNS_RESOLUTION_ISSUE,
        _outcomes(),
        ["summary.txt", "raw/fix_flush_dns.txt"],
    )
    assert "Session: run-1" in report
    assert "**DNS resolution issue**" in report
    assert "- likely DNS issue" in report
    assert "External DNS | www.microsoft.com | failed" in report
    assert "Internal DNS | none | not tested" in report
    assert "Failed: 1" in report
    assert "Skipped: 1" in report
    assert "Flush DNS cache | Executed-Failure | failed: exit code 1" in report
    assert report.index("## Evidence") < report.index("## Remediation") < report.index("## Artifacts")


def test_render_report_remediation_only() -> None:
    report = render_report("run-2", TriageConfig(), None, [], None, _outcomes(), [])
    assert "## Verdict" not in report
    assert "## Evidence" not in report
    assert "## Remediation" in report


def test_generate_pdf_report_creates_file(tmp_path: Path) -> None:
    pdf_path = generate_pdf_report(
        tmp_path,
        "run-1",
        TriageConfig(),
        _evidence(),
        ["external DNS resolution failed", "likely DNS <issue> & more"],
        Verdict.DNS_RESOLUTION_ISSUE,
        _outcomes(),
    )
    assert pdf_path == tmp_path / "report.pdf"
    assert pdf_path.read_bytes().startswith(b"%PDF")
