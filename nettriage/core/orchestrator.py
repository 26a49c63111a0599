from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

from nettriage.core.classifier import classify, write_reachability_log
from nettriage.core.collector import collect_evidence
from nettriage.core.config import TriageConfig
from nettriage.core.models import EvidenceRecord, RemediationStep, StepResult, Verdict
from nettriage.core.pdf_report import generate_pdf_report
from nettriage.core.remediation import DEFAULT_STEPS, run_pipeline
from nettriage.core.report import render_report
from nettriage.core.session import SessionContext
from nettriage.core.version import get_version
from nettriage.ports.command_runner import CommandRunner
from nettriage.ports.network_probe import NetworkProbe
from nettriage.ports.publisher import Publisher


class Orchestrator:
    def __init__(
        self,
        probe: NetworkProbe,
        runner: CommandRunner,
        publisher: Publisher,
        config: TriageConfig | None = None,
        steps: Sequence[RemediationStep] = DEFAULT_STEPS,
        clock: Callable[[], datetime] = datetime.now,
        echo: bool = False,
    ) -> None:
        self.probe = probe
        self.runner = runner
        self.publisher = publisher
        self.config = config or TriageConfig()
        self.steps = steps
        self.clock = clock
        self.echo = echo

    def run(
        self,
        remediate: bool = False,
        auto_confirm: bool = False,
        confirm: Callable[[str], bool] | None = None,
        should_abort: Callable[[], bool] | None = None,
    ) -> dict:
        """Run one diagnostic pass and, when asked, the remediation pipeline.

        Args:
            remediate (bool): Offer the remediation steps after classification.
            auto_confirm (bool): Run remediation steps without prompting.
            confirm (Callable[[str], bool] | None): Per-step confirmation.
            should_abort (Callable[[], bool] | None): Cancellation signal
                checked between remediation steps.

        Returns:
            dict: Summary with verdict, issues, outcomes and artifact paths.
        """
        session = self._open_session()
        session.summary.write(f"Diagnostic session started (nettriage {get_version()})")

        session.summary.write("Collecting evidence")
        evidence = collect_evidence(self.probe, self.config, session)

        session.summary.write("Classifying reachability")
        issues, verdict = classify(evidence)
        write_reachability_log(session, evidence, issues, verdict)
        session.summary.write(f"Issues found: {len(issues)}")

        outcomes: list[StepResult] = []
        if remediate:
            session.summary.write("Starting remediation")
            outcomes = run_pipeline(
                self.steps,
                auto_confirm,
                session,
                self.runner,
                confirm=confirm,
                should_abort=should_abort,
            )
        return self._finish(session, evidence, issues, verdict, outcomes)

    def remediate(
        self,
        auto_confirm: bool = False,
        confirm: Callable[[str], bool] | None = None,
        should_abort: Callable[[], bool] | None = None,
    ) -> dict:
        """Run the remediation pipeline alone in a fresh session."""
        session = self._open_session()
        session.summary.write(f"Remediation session started (nettriage {get_version()})")
        outcomes = run_pipeline(
            self.steps,
            auto_confirm,
            session,
            self.runner,
            confirm=confirm,
            should_abort=should_abort,
        )
        return self._finish(session, None, [], None, outcomes)

    def _open_session(self) -> SessionContext:
        return SessionContext.create(self.config.output_dir, clock=self.clock, echo=self.echo)

    def _finish(
        self,
        session: SessionContext,
        evidence: EvidenceRecord | None,
        issues: list[str],
        verdict: Verdict | None,
        outcomes: list[StepResult],
    ) -> dict:
        artifacts = [path.name for path in sorted(session.root.glob("*.txt"))]
        artifacts.extend(f"raw/{path.name}" for path in session.raw_files())

        report_path = None
        pdf_path = None
        if "markdown" in self.config.report_formats:
            report_md = render_report(session.run_id, self.config, evidence, issues, verdict, outcomes, artifacts)
            report_path = session.root / "report.md"
            report_path.write_text(report_md, encoding="utf-8")
        if "pdf" in self.config.report_formats:
            pdf_path = generate_pdf_report(
                session.root, session.run_id, self.config, evidence, issues, verdict, outcomes
            )

        session.summary.write("Session finished")
        run_summary = {
            "run_id": session.run_id,
            "session_dir": str(session.root),
            "verdict": verdict.label if verdict else None,
            "issues": list(issues),
            "outcomes": [
                {"step": item.step.name, "outcome": item.outcome.value, "detail": item.detail}
                for item in outcomes
            ],
            "report_path": str(report_path) if report_path else None,
            "pdf_path": str(pdf_path) if pdf_path else None,
            "config": self.config.snapshot(),
        }
        self.publisher.publish(run_summary)
        return run_summary
