from __future__ import annotations

from typing import Protocol


class NetworkProbe(Protocol):
    """OS-facing boundary for reading network state and running probes.

    Every method may raise ProbeFailure; the collector degrades the affected
    evidence field instead of aborting.
    """
    def capture(self, name: str) -> str:
        """Return the raw text of a named baseline capture (e.g. "ipconfig")."""
        ...

    def default_gateway(self) -> str | None:
        ...

    def dns_servers(self) -> list[str]:
        ...

    def internal_domain(self) -> str | None:
        """Return the joined DNS domain, or None for workgroup machines."""
        ...

    def ping(self, address: str, timeout_ms: int) -> bool:
        ...

    def resolve(self, hostname: str) -> bool:
        ...
