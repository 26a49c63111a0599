from __future__ import annotations

import json
import platform
import socket

from nettriage.core.errors import ProbeFailure
from nettriage.core.models import CommandResult
from nettriage.ports.command_runner import CommandRunner


def _powershell(script: str) -> tuple[str, ...]:
    return ("powershell.exe", "-NoProfile", "-NonInteractive", "-Command", script)


CAPTURE_COMMANDS: dict[str, tuple[str, ...]] = {
    "ipconfig": ("ipconfig", "/all"),
    "routes": ("route", "print"),
    "adapters": _powershell("Get-NetAdapter | Format-Table -AutoSize Name,InterfaceDescription,Status,LinkSpeed"),
    "dns_servers": _powershell("Get-DnsClientServerAddress | Format-Table -AutoSize"),
    "firewall": ("netsh", "advfirewall", "show", "allprofiles"),
    "proxy": ("netsh", "winhttp", "show", "proxy"),
}

_GATEWAY_SCRIPT = (
    "Get-NetRoute -DestinationPrefix '0.0.0.0/0' -ErrorAction SilentlyContinue | "
    "Sort-Object RouteMetric | Select-Object -ExpandProperty NextHop"
)
_DNS_SCRIPT = "Get-DnsClientServerAddress -AddressFamily IPv4 | Select-Object -ExpandProperty ServerAddresses"
_DOMAIN_SCRIPT = "Get-CimInstance Win32_ComputerSystem | Select-Object PartOfDomain,Domain | ConvertTo-Json"


class SystemNetworkProbe:
    """Read Windows network state through PowerShell and built-in tools.

    Name resolution goes through the OS resolver (socket.getaddrinfo), which
    honours the same DNS client configuration the operator's apps use.
    """
    def __init__(self, runner: CommandRunner, timeout_ms: int = 30000) -> None:
        self.runner = runner
        self.timeout_ms = timeout_ms

    def capture(self, name: str) -> str:
        argv = CAPTURE_COMMANDS.get(name)
        if argv is None:
            raise ProbeFailure(f"unknown capture: {name}")
        result = self._run(argv)
        return result.stdout

    def default_gateway(self) -> str | None:
        for line in self._run(_powershell(_GATEWAY_SCRIPT)).stdout.splitlines():
            hop = line.strip()
            # On-link routes report 0.0.0.0 as next hop.
            if hop and hop != "0.0.0.0":
                return hop
        return None

    def dns_servers(self) -> list[str]:
        servers: list[str] = []
        for line in self._run(_powershell(_DNS_SCRIPT)).stdout.splitlines():
            value = line.strip()
            if value and value not in servers:
                servers.append(value)
        return servers

    def internal_domain(self) -> str | None:
        output = self._run(_powershell(_DOMAIN_SCRIPT)).stdout.strip()
        if not output:
            return None
        try:
            data = json.loads(output)
        except json.JSONDecodeError as exc:
            raise ProbeFailure(f"unreadable domain information: {exc}") from exc
        if not data.get("PartOfDomain"):
            return None
        return str(data.get("Domain") or "").strip() or None

    def ping(self, address: str, timeout_ms: int) -> bool:
        if platform.system().lower() == "windows":
            argv = ("ping", "-n", "1", "-w", str(timeout_ms), address)
        else:
            argv = ("ping", "-c", "1", "-W", str(max(1, timeout_ms // 1000)), address)
        result = self.runner.run(argv, timeout_ms=timeout_ms + 5000)
        if result.error:
            raise ProbeFailure(result.error)
        # Windows ping exits 0 on "Destination host unreachable" replies.
        return result.returncode == 0 and "unreachable" not in result.stdout.lower()

    def resolve(self, hostname: str) -> bool:
        try:
            return bool(socket.getaddrinfo(hostname, None))
        except socket.gaierror:
            return False
        except (OSError, UnicodeError) as exc:
            raise ProbeFailure(f"resolver error for {hostname}: {exc}") from exc

    def _run(self, argv: tuple[str, ...]) -> CommandResult:
        result = self.runner.run(argv, timeout_ms=self.timeout_ms)
        if not result.ok:
            raise ProbeFailure(f"{argv[0]}: {result.describe_failure()}")
        return result
