from __future__ import annotations

from typing import Callable, TypeVar

from nettriage.core.config import TriageConfig
from nettriage.core.errors import ProbeFailure
from nettriage.core.models import EvidenceRecord
from nettriage.core.session import SessionContext, SessionLog
from nettriage.ports.network_probe import NetworkProbe


BASELINE_CAPTURES = ("ipconfig", "routes", "adapters", "dns_servers", "firewall", "proxy")

T = TypeVar("T")


def collect_evidence(probe: NetworkProbe, config: TriageConfig, session: SessionContext) -> EvidenceRecord:
    """Gather baseline captures and reachability probes into one record.

    Args:
        probe (NetworkProbe): OS access boundary.
        config (TriageConfig): Probe targets and timeouts.
        session (SessionContext): Receives collect.txt notes and raw captures.

    Returns:
        EvidenceRecord: Complete record; failed probes are False, fields whose
            precondition is missing are None.

    Notes:
        Every probe runs exactly once and no probe error escapes: the
        field degrades and a one-line note is logged.
    """
    log = session.collect
    log.write("Collecting baseline")
    for name in BASELINE_CAPTURES:
        text = _attempt(log, f"baseline capture {name}", lambda: probe.capture(name), None)
        if text is not None:
            path = session.write_raw(f"baseline_{name}", text)
            log.write(f"Captured {name} -> {path.name}")

    gateway = _attempt(log, "default gateway read", probe.default_gateway, None) or None
    dns_servers = list(_attempt(log, "DNS server read", probe.dns_servers, []) or [])
    internal_domain = _attempt(log, "domain read", probe.internal_domain, None) or None
    log.write(f"Default gateway: {gateway or 'none'}")
    log.write(f"DNS servers: {', '.join(dns_servers) if dns_servers else 'none'}")
    log.write(f"Internal domain: {internal_domain or 'none'}")

    timeout = config.ping_timeout_ms
    evidence = EvidenceRecord(gateway=gateway, dns_servers=dns_servers, internal_domain=internal_domain)
    if gateway:
        evidence.gateway_reachable = _ping(log, probe, gateway, timeout, "gateway")
    if dns_servers:
        evidence.dns_server_reachable = _ping(log, probe, dns_servers[0], timeout, "DNS server")
    evidence.external_ip_reachable = _ping(log, probe, config.external_ip, timeout, "external IP")
    evidence.external_dns_resolvable = _resolve(log, probe, config.external_host)
    evidence.ncsi_dns_resolvable = _resolve(log, probe, config.ncsi_host)
    if internal_domain:
        evidence.internal_dns_resolvable = _resolve(log, probe, internal_domain)

    log.write("Collection complete")
    return evidence


def _ping(log: SessionLog, probe: NetworkProbe, address: str, timeout_ms: int, role: str) -> bool:
    ok = bool(_attempt(log, f"ping {address}", lambda: probe.ping(address, timeout_ms), False))
    log.write(f"Ping {role} {address}: {'ok' if ok else 'failed'}")
    return ok


def _resolve(log: SessionLog, probe: NetworkProbe, hostname: str) -> bool:
    ok = bool(_attempt(log, f"resolve {hostname}", lambda: probe.resolve(hostname), False))
    log.write(f"Resolve {hostname}: {'ok' if ok else 'failed'}")
    return ok


def _attempt(log: SessionLog, what: str, call: Callable[[], T], fallback: T) -> T:
    try:
        return call()
    except ProbeFailure as exc:
        log.write(f"Note: {what} failed: {exc}")
        return fallback
    except Exception as exc:
        # Adapter bugs and OS errors degrade the field like a ProbeFailure.
        log.write(f"Note: {what} failed: {type(exc).__name__}: {exc}")
        return fallback
