from nettriage.core.collector import BASELINE_CAPTURES, collect_evidence
from nettriage.core.config import TriageConfig
from nettriage.core.errors import ProbeFailure
from nettriage.core.session import SessionContext


class FakeProbe:
    def __init__(
        self,
        gateway="192.168.1.1",
        dns_servers=("192.168.1.1", "8.8.4.4"),
        domain=None,
        unreachable=(),
        unresolvable=(),
        broken=(),
    ) -> None:
        self.gateway = gateway
        self.servers = list(dns_servers)
        self.domain = domain
        self.unreachable = set(unreachable)
        self.unresolvable = set(unresolvable)
        self.broken = set(broken)
        self.pinged: list[str] = []
        self.resolved: list[str] = []

    def capture(self, name: str) -> str:
        if name in self.broken:
            raise ProbeFailure(f"{name} unavailable")
        return f"{name} output password=hunter2"

    def default_gateway(self):
        if "gateway" in self.broken:
            raise ProbeFailure("route table unreadable")
        return self.gateway

    def dns_servers(self):
        return list(self.servers)

    def internal_domain(self):
        return self.domain

    def ping(self, address: str, timeout_ms: int) -> bool:
        self.pinged.append(address)
        if "ping" in self.broken:
            raise ProbeFailure("ping missing")
        return address not in self.unreachable

    def resolve(self, hostname: str) -> bool:
        self.resolved.append(hostname)
        return hostname not in self.unresolvable


def test_collect_healthy_network(tmp_path) -> None:
    session = SessionContext.create(tmp_path, run_id="run-1")
    config = TriageConfig()
    probe = FakeProbe(domain="corp.example")

    evidence = collect_evidence(probe, config, session)

    assert evidence.gateway == "192.168.1.1"
    assert evidence.gateway_reachable is True
    assert evidence.dns_servers == ["192.168.1.1", "8.8.4.4"]
    assert evidence.dns_server_reachable is True
    assert evidence.external_ip_reachable is True
    assert evidence.external_dns_resolvable is True
    assert evidence.ncsi_dns_resolvable is True
    assert evidence.internal_dns_resolvable is True
    assert probe.pinged == ["192.168.1.1", "192.168.1.1", config.external_ip]
    assert probe.resolved == [config.external_host, config.ncsi_host, "corp.example"]
    raw_names = {path.name for path in session.raw_files()}
    assert raw_names == {f"baseline_{name}.txt" for name in BASELINE_CAPTURES}
    ipconfig = (session.raw_dir / "baseline_ipconfig.txt").read_text(encoding="utf-8")
    assert "hunter2" not in ipconfig


def test_missing_preconditions_leave_fields_null(tmp_path) -> None:
    session = SessionContext.create(tmp_path, run_id="run-1")
    probe = FakeProbe(gateway=None, dns_servers=(), domain=None)

    evidence = collect_evidence(probe, TriageConfig(), session)

    assert evidence.gateway is None
    assert evidence.gateway_reachable is None
    assert evidence.dns_server_reachable is None
    assert evidence.internal_dns_resolvable is None
    assert evidence.external_ip_reachable is True


def test_probe_failures_degrade_to_false(tmp_path) -> None:
    session = SessionContext.create(tmp_path, run_id="run-1")
    config = TriageConfig()
    probe = FakeProbe(broken={"ping", "firewall"}, unresolvable={config.ncsi_host})

    evidence = collect_evidence(probe, config, session)

    assert evidence.gateway_reachable is False
    assert evidence.dns_server_reachable is False
    assert evidence.external_ip_reachable is False
    assert evidence.ncsi_dns_resolvable is False
    assert evidence.external_dns_resolvable is True
    notes = [line for line in session.collect.lines() if "Note:" in line]
    assert any("firewall" in line for line in notes)
    assert any("ping" in line for line in notes)
    assert not (session.raw_dir / "baseline_firewall.txt").exists()


def test_unreadable_gateway_counts_as_absent(tmp_path) -> None:
    session = SessionContext.create(tmp_path, run_id="run-1")
    probe = FakeProbe(broken={"gateway"})

    evidence = collect_evidence(probe, TriageConfig(), session)

    assert evidence.gateway is None
    assert evidence.gateway_reachable is None
    assert "192.168.1.1" in probe.pinged


def test_unexpected_adapter_errors_degrade_fields(tmp_path) -> None:
    class FlakyNetwork:
        def capture(self, name: str) -> str:
            return f"{name} output"

        def default_gateway(self):
            return "192.168.1.1"

        def dns_servers(self):
            raise OSError("registry key missing")

        def internal_domain(self):
            return None

        def ping(self, address: str, timeout_ms: int) -> bool:
            if address == "8.8.8.8":
                raise TimeoutError("ping timed out")
            return True

        def resolve(self, hostname: str) -> bool:
            if hostname == "www.microsoft.com":
                raise UnicodeError("label too long")
            return True

    session = SessionContext.create(tmp_path, run_id="run-1")

    evidence = collect_evidence(FlakyNetwork(), TriageConfig(), session)

    assert evidence.dns_servers == []
    assert evidence.dns_server_reachable is None
    assert evidence.gateway_reachable is True
    assert evidence.external_ip_reachable is False
    assert evidence.external_dns_resolvable is False
    assert evidence.ncsi_dns_resolvable is True
    lines = session.collect.lines()
    assert any("Note: ping 8.8.8.8 failed: TimeoutError: ping timed out" in line for line in lines)
    assert any("Note: resolve www.microsoft.com failed: UnicodeError" in line for line in lines)
    assert any("Note: DNS server read failed: OSError" in line for line in lines)
    assert lines[-1].endswith("Collection complete")
