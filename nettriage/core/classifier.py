from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from nettriage.core.models import EvidenceRecord, Verdict
from nettriage.core.session import SessionContext


ISSUE_NO_GATEWAY = "no default gateway"
ISSUE_GATEWAY_UNREACHABLE = "default gateway unreachable"
ISSUE_EXTERNAL_IP_UNREACHABLE = "cannot reach external IP"
ISSUE_EXTERNAL_DNS_FAILED = "external DNS resolution failed"
ISSUE_INTERNAL_DNS_FAILED = "internal DNS resolution failed"
ISSUE_UPSTREAM_BLOCK = "possible upstream/outbound block"
ISSUE_LIKELY_DNS = "likely DNS issue"


@dataclass(frozen=True)
class IssueRule:
    issue: str
    applies: Callable[[EvidenceRecord], bool]


@dataclass(frozen=True)
class VerdictRule:
    verdict: Verdict
    applies: Callable[[EvidenceRecord, Sequence[str]], bool]


def _no_gateway(ev: EvidenceRecord) -> bool:
    return not ev.gateway


def _gateway_unreachable(ev: EvidenceRecord) -> bool:
    return bool(ev.gateway) and ev.gateway_reachable is False


def _external_ip_unreachable(ev: EvidenceRecord) -> bool:
    return ev.external_ip_reachable is False


def _external_dns_failed(ev: EvidenceRecord) -> bool:
    # A successful NCSI lookup vetoes the primary probe's failure.
    return ev.external_dns_resolvable is False and ev.ncsi_dns_resolvable is not True


def _internal_dns_failed(ev: EvidenceRecord) -> bool:
    return bool(ev.internal_domain) and ev.internal_dns_resolvable is False


def _upstream_block(ev: EvidenceRecord) -> bool:
    return ev.gateway_reachable is True and ev.external_ip_reachable is False


def _likely_dns(ev: EvidenceRecord) -> bool:
    return ev.external_ip_reachable is True and ev.external_dns_resolvable is False


ISSUE_RULES: tuple[IssueRule, ...] = (
    IssueRule(ISSUE_NO_GATEWAY, _no_gateway),
    IssueRule(ISSUE_GATEWAY_UNREACHABLE, _gateway_unreachable),
    IssueRule(ISSUE_EXTERNAL_IP_UNREACHABLE, _external_ip_unreachable),
    IssueRule(ISSUE_EXTERNAL_DNS_FAILED, _external_dns_failed),
    IssueRule(ISSUE_INTERNAL_DNS_FAILED, _internal_dns_failed),
    IssueRule(ISSUE_UPSTREAM_BLOCK, _upstream_block),
    IssueRule(ISSUE_LIKELY_DNS, _likely_dns),
)

VERDICT_RULES: tuple[VerdictRule, ...] = (
    VerdictRule(Verdict.NO_DEFAULT_GATEWAY, lambda ev, issues: _no_gateway(ev)),
    VerdictRule(Verdict.GATEWAY_UNREACHABLE, lambda ev, issues: _gateway_unreachable(ev)),
    VerdictRule(Verdict.UPSTREAM_OR_OUTBOUND_BLOCK, lambda ev, issues: _upstream_block(ev)),
    VerdictRule(
        Verdict.DNS_RESOLUTION_ISSUE,
        lambda ev, issues: ev.external_ip_reachable is True and _external_dns_failed(ev),
    ),
    VerdictRule(Verdict.INTERNAL_DNS_RESOLUTION_ISSUE, lambda ev, issues: _internal_dns_failed(ev)),
    VerdictRule(Verdict.SEE_ISSUES, lambda ev, issues: bool(issues)),
    VerdictRule(Verdict.OK, lambda ev, issues: True),
)


def classify(
    evidence: EvidenceRecord,
    issue_rules: Sequence[IssueRule] = ISSUE_RULES,
    verdict_rules: Sequence[VerdictRule] = VERDICT_RULES,
) -> tuple[list[str], Verdict]:
    """Turn an evidence snapshot into an issue list and a single verdict.

    Args:
        evidence (EvidenceRecord): Snapshot from the collector. None fields are
            treated as "not tested", never as failures.
        issue_rules (Sequence[IssueRule]): Independent rules; every match adds
            its issue, in table order.
        verdict_rules (Sequence[VerdictRule]): Priority ladder; the first match
            wins.

    Returns:
        tuple[list[str], Verdict]: Ordered issues and the headline verdict.

    Notes:
        A non-empty issue list never produces OK. If a rule table lets that
        happen, or nothing matches, the verdict falls back to SEE_ISSUES (or OK
        when there are no issues).
    """
    issues = [rule.issue for rule in issue_rules if rule.applies(evidence)]

    verdict = None
    for rule in verdict_rules:
        if rule.applies(evidence, issues):
            verdict = rule.verdict
            break

    if verdict is None or (verdict is Verdict.OK and issues):
        verdict = Verdict.SEE_ISSUES if issues else Verdict.OK
    return issues, verdict


def verdict_line(verdict: Verdict) -> str:
    return f"Verdict: {verdict.label}"


def write_reachability_log(
    session: SessionContext,
    evidence: EvidenceRecord,
    issues: Sequence[str],
    verdict: Verdict,
) -> None:
    """Record the classification in reachability.txt and the session summary.

    The verdict line is only appended to summary.txt when the orchestrator has
    already created it.
    """
    log = session.reachability
    log.write(f"Default gateway: {evidence.gateway or 'none'} (reachable: {_fmt(evidence.gateway_reachable)})")
    servers = ", ".join(evidence.dns_servers) if evidence.dns_servers else "none"
    log.write(f"DNS servers: {servers} (first reachable: {_fmt(evidence.dns_server_reachable)})")
    log.write(f"External IP reachable: {_fmt(evidence.external_ip_reachable)}")
    log.write(f"External DNS resolvable: {_fmt(evidence.external_dns_resolvable)}")
    log.write(f"NCSI DNS resolvable: {_fmt(evidence.ncsi_dns_resolvable)}")
    log.write(
        f"Internal domain: {evidence.internal_domain or 'none'} "
        f"(resolvable: {_fmt(evidence.internal_dns_resolvable)})"
    )
    if issues:
        for issue in issues:
            log.write(f"Issue: {issue}")
    else:
        log.write("No issues detected")

    line = verdict_line(verdict)
    log.write(line)
    if session.summary.exists():
        session.summary.write(line)


def _fmt(value: bool | None) -> str:
    if value is None:
        return "n/a"
    return "yes" if value else "no"
