from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.flowables import Flowable

from nettriage.core.config import TriageConfig
from nettriage.core.models import EvidenceRecord, StepOutcome, StepResult, Verdict
from nettriage.core.pdf_styles import NEUTRAL_BG, PRIMARY, SECONDARY, get_report_styles, verdict_color
from nettriage.core.report import evidence_rows
from nettriage.core.version import get_version


def generate_pdf_report(
    output_dir: Path,
    run_id: str,
    config: TriageConfig,
    evidence: EvidenceRecord | None,
    issues: Sequence[str],
    verdict: Verdict | None,
    outcomes: Sequence[StepResult],
) -> Path:
    """Render report.pdf for a session directory.

    Args:
        output_dir (Path): Session directory; the PDF is written inside it.
        run_id (str): Session identifier shown in header and footer.
        config (TriageConfig): Probe targets for the evidence table.
        evidence (EvidenceRecord | None): Collected evidence, if any.
        issues (Sequence[str]): Classifier issues.
        verdict (Verdict | None): Classifier verdict, if classified.
        outcomes (Sequence[StepResult]): Remediation results, possibly empty.

    Returns:
        Path: Path to the generated PDF report.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    pdf_path = output_dir / "report.pdf"
    styles = get_report_styles()
    report_date = datetime.now().strftime("%Y-%m-%d %H:%M")

    doc = SimpleDocTemplate(
        str(pdf_path),
        pagesize=letter,
        leftMargin=inch,
        rightMargin=inch,
        topMargin=inch,
        bottomMargin=inch,
        title=f"Network Triage {run_id}",
    )

    story: list[Flowable] = [
        Paragraph("Network Triage Report", styles["Title"]),
        Paragraph(escape(f"Session {run_id} - {report_date} - nettriage {get_version()}"), styles["BodyText"]),
        Spacer(1, 0.2 * inch),
    ]
    if verdict is not None:
        story.extend(create_verdict_section(verdict, issues, styles))
    if evidence is not None:
        story.extend(create_evidence_section(evidence, config, styles))
    if outcomes:
        story.extend(create_remediation_section(outcomes, styles))

    doc.build(story, onFirstPage=_footer(run_id), onLaterPages=_footer(run_id))
    return pdf_path


def create_verdict_section(verdict: Verdict, issues: Sequence[str], styles: dict) -> list[Flowable]:
    banner = Table([[Paragraph(escape(verdict.label), styles["Verdict"])]], colWidths=[6.5 * inch])
    banner.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), verdict_color(verdict)),
                ("TOPPADDING", (0, 0), (-1, -1), 10),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 10),
            ]
        )
    )
    story: list[Flowable] = [Paragraph("Verdict", styles["Heading2"]), banner, Spacer(1, 0.15 * inch)]
    story.append(Paragraph("Issues", styles["Heading2"]))
    if not issues:
        story.append(Paragraph("No issues detected.", styles["BodyText"]))
    for issue in issues:
        story.append(Paragraph(escape(f"- {issue}"), styles["BodyText"]))
    story.append(Spacer(1, 0.15 * inch))
    return story


def create_evidence_section(evidence: EvidenceRecord, config: TriageConfig, styles: dict) -> list[Flowable]:
    rows = [["Check", "Target", "Result"]]
    for check, target, result in evidence_rows(evidence, config):
        rows.append([check, Paragraph(escape(target), styles["TableBody"]), result])
    table = Table(rows, hAlign="LEFT", colWidths=[1.6 * inch, 3.4 * inch, 1.5 * inch])
    table.setStyle(_table_style())
    return [Paragraph("Evidence", styles["Heading2"]), table, Spacer(1, 0.15 * inch)]


def create_remediation_section(outcomes: Sequence[StepResult], styles: dict) -> list[Flowable]:
    rows = [["Step", "Outcome", "Detail"]]
    commands = []
    for index, item in enumerate(outcomes, start=1):
        rows.append(
            [
                Paragraph(escape(item.step.prompt), styles["TableBody"]),
                item.outcome.value,
                Paragraph(escape(item.detail or "-"), styles["TableBody"]),
            ]
        )
        if item.outcome is StepOutcome.EXECUTED_FAILURE:
            commands.append(("TEXTCOLOR", (1, index), (1, index), colors.red))
    table = Table(rows, hAlign="LEFT", colWidths=[2.6 * inch, 1.3 * inch, 2.6 * inch])
    table.setStyle(_table_style(commands))
    return [Paragraph("Remediation", styles["Heading2"]), table]


def _table_style(extra: list | None = None) -> TableStyle:
    commands = [
        ("BACKGROUND", (0, 0), (-1, 0), SECONDARY),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ("BACKGROUND", (0, 1), (-1, -1), NEUTRAL_BG),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
    commands.extend(extra or [])
    return TableStyle(commands)


def _footer(run_id: str):
    def handler(canvas, doc):
        canvas.saveState()
        canvas.setStrokeColor(colors.lightgrey)
        canvas.setLineWidth(1)
        canvas.line(inch, inch - 12, letter[0] - inch, inch - 12)
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(PRIMARY)
        canvas.drawString(inch, inch - 24, f"Session: {run_id}")
        canvas.drawRightString(letter[0] - inch, inch - 24, f"Page {doc.page}")
        canvas.restoreState()

    return handler
