from __future__ import annotations

from collections import Counter
from typing import Sequence

from nettriage.core.config import TriageConfig
from nettriage.core.models import EvidenceRecord, StepOutcome, StepResult, Verdict
from nettriage.core.version import get_version


_RECOMMENDATIONS = {
    Verdict.NO_DEFAULT_GATEWAY: "Check cabling/Wi-Fi association and DHCP; no default route is configured.",
    Verdict.GATEWAY_UNREACHABLE: "Local link problem: check the adapter, switch port or access point.",
    Verdict.UPSTREAM_OR_OUTBOUND_BLOCK: "LAN is fine; escalate to the network team (ISP, firewall or proxy).",
    Verdict.DNS_RESOLUTION_ISSUE: "Connectivity works but names do not resolve; check DNS servers.",
    Verdict.INTERNAL_DNS_RESOLUTION_ISSUE: "Check VPN state and internal DNS servers for the domain.",
    Verdict.SEE_ISSUES: "Review the individual issues below.",
    Verdict.OK: "No action needed.",
}


def render_report(
    run_id: str,
    config: TriageConfig,
    evidence: EvidenceRecord | None,
    issues: Sequence[str],
    verdict: Verdict | None,
    outcomes: Sequence[StepResult],
    artifacts: Sequence[str],
) -> str:
    """Render a session report suitable for pasting into a ticket.

    Args:
        run_id (str): Session identifier.
        config (TriageConfig): Probe targets used in the session.
        evidence (EvidenceRecord | None): Collected evidence, None for a
            remediation-only session.
        issues (Sequence[str]): Classifier issues in rule order.
        verdict (Verdict | None): Classifier verdict, None when not classified.
        outcomes (Sequence[StepResult]): Remediation results, possibly empty.
        artifacts (Sequence[str]): Session file names to list.

    Returns:
        str: Markdown report content.
    """
    lines = [
        "# Network Triage Report",
        "",
        f"nettriage version: {get_version()}",
        f"Session: {run_id}",
    ]

    if verdict is not None:
        lines.extend(
            [
                "",
                "## Verdict",
                f"**{verdict.label}**",
                "",
                f"Recommendation: {_RECOMMENDATIONS[verdict]}",
            ]
        )

        lines.extend(["", "## Issues"])
        if issues:
            for issue in issues:
                lines.append(f"- {issue}")
        else:
            lines.append("No issues.")

    if evidence is not None:
        lines.extend(["", "## Evidence", "Check | Target | Result", "---|---|---"])
        for check, target, result in evidence_rows(evidence, config):
            lines.append(f"{check} | {target} | {result}")

    if outcomes:
        counts = Counter(item.outcome for item in outcomes)
        lines.extend(
            [
                "",
                "## Remediation",
                f"Executed: {counts[StepOutcome.EXECUTED_SUCCESS] + counts[StepOutcome.EXECUTED_FAILURE]}",
                f"Failed: {counts[StepOutcome.EXECUTED_FAILURE]}",
                f"Skipped: {counts[StepOutcome.SKIPPED]}",
                "",
                "Step | Outcome | Detail",
                "---|---|---",
            ]
        )
        for item in outcomes:
            lines.append(f"{item.step.prompt} | {item.outcome.value} | {item.detail or '-'}")

    if artifacts:
        lines.extend(["", "## Artifacts"])
        for name in artifacts:
            lines.append(f"- {name}")

    return "\n".join(lines) + "\n"


def evidence_rows(evidence: EvidenceRecord, config: TriageConfig) -> list[tuple[str, str, str]]:
    """Tabulate the evidence record as (check, target, result) rows."""
    first_dns = evidence.dns_servers[0] if evidence.dns_servers else "-"
    return [
        ("Default gateway", evidence.gateway or "none", _result(evidence.gateway_reachable)),
        ("DNS server", first_dns, _result(evidence.dns_server_reachable)),
        ("External IP", config.external_ip, _result(evidence.external_ip_reachable)),
        ("External DNS", config.external_host, _result(evidence.external_dns_resolvable)),
        ("NCSI DNS", config.ncsi_host, _result(evidence.ncsi_dns_resolvable)),
        ("Internal DNS", evidence.internal_domain or "none", _result(evidence.internal_dns_resolvable)),
    ]


def _result(value: bool | None) -> str:
    if value is None:
        return "not tested"
    return "ok" if value else "failed"
