import socket

import pytest

from nettriage.adapters import system_probe
from nettriage.adapters.system_probe import SystemNetworkProbe
from nettriage.core.errors import ProbeFailure
from nettriage.core.models import CommandResult


class ScriptedRunner:
    def __init__(self, responses: dict[str, CommandResult]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, ...]] = []

    def run(self, argv, timeout_ms=None) -> CommandResult:
        argv = tuple(argv)
        self.calls.append(argv)
        joined = " ".join(argv)
        for needle, result in self.responses.items():
            if needle in joined:
                return result
        return CommandResult(argv=argv, returncode=0, stdout="")


def _ok(stdout: str) -> CommandResult:
    return CommandResult(argv=(), returncode=0, stdout=stdout)


def test_default_gateway_skips_on_link_routes() -> None:
    runner = ScriptedRunner({"Get-NetRoute": _ok("0.0.0.0\r\n10.0.0.1\r\n10.0.0.254\r\n")})
    assert SystemNetworkProbe(runner).default_gateway() == "10.0.0.1"


def test_default_gateway_none_when_no_route() -> None:
    runner = ScriptedRunner({"Get-NetRoute": _ok("")})
    assert SystemNetworkProbe(runner).default_gateway() is None


def test_dns_servers_are_unique_in_order() -> None:
    runner = ScriptedRunner({"ServerAddresses": _ok("10.0.0.53\n10.0.0.54\n10.0.0.53\n")})
    assert SystemNetworkProbe(runner).dns_servers() == ["10.0.0.53", "10.0.0.54"]


@pytest.mark.parametrize(
    "payload,expected",
    [
        ('{"PartOfDomain": true, "Domain": "corp.example"}', "corp.example"),
        ('{"PartOfDomain": false, "Domain": "WORKGROUP"}', None),
    ],
)
def test_internal_domain(payload, expected) -> None:
    runner = ScriptedRunner({"Win32_ComputerSystem": _ok(payload)})
    assert SystemNetworkProbe(runner).internal_domain() == expected


def test_internal_domain_bad_json_is_probe_failure() -> None:
    runner = ScriptedRunner({"Win32_ComputerSystem": _ok("not json")})
    with pytest.raises(ProbeFailure):
        SystemNetworkProbe(runner).internal_domain()


def test_failed_command_is_probe_failure() -> None:
    runner = ScriptedRunner({"route": CommandResult(argv=("route",), returncode=1, stderr="denied")})
    with pytest.raises(ProbeFailure):
        SystemNetworkProbe(runner).capture("routes")


def test_unknown_capture_is_probe_failure() -> None:
    with pytest.raises(ProbeFailure):
        SystemNetworkProbe(ScriptedRunner({})).capture("nope")


def test_ping_windows_unreachable_reply_is_failure(monkeypatch) -> None:
    monkeypatch.setattr(system_probe.platform, "system", lambda: "Windows")
    runner = ScriptedRunner(
        {"ping": _ok("Reply from 10.0.0.5: Destination host unreachable.")}
    )
    probe = SystemNetworkProbe(runner)
    assert probe.ping("10.0.0.1", 1000) is False
    assert runner.calls[0] == ("ping", "-n", "1", "-w", "1000", "10.0.0.1")


def test_ping_success_and_launch_error(monkeypatch) -> None:
    monkeypatch.setattr(system_probe.platform, "system", lambda: "Linux")
    probe = SystemNetworkProbe(ScriptedRunner({"ping": _ok("1 received")}))
    assert probe.ping("8.8.8.8", 1000) is True

    missing = CommandResult(argv=("ping",), returncode=-1, error="could not start ping")
    with pytest.raises(ProbeFailure):
        SystemNetworkProbe(ScriptedRunner({"ping": missing})).ping("8.8.8.8", 1000)


def test_resolve_uses_system_resolver(monkeypatch) -> None:
    def fake_getaddrinfo(host, port):
        if host == "bad.example":
            raise socket.gaierror("not found")
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("1.2.3.4", 0))]

    monkeypatch.setattr(system_probe.socket, "getaddrinfo", fake_getaddrinfo)
    probe = SystemNetworkProbe(ScriptedRunner({}))
    assert probe.resolve("good.example") is True
    assert probe.resolve("bad.example") is False
