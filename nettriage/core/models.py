from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class EvidenceRecord:
    """Flat network state snapshot produced once per session.

    Optional booleans are None only when the evidence they depend on is
    absent (no gateway, no DNS servers, no domain). A failed probe is False.
    """
    gateway: str | None = None
    gateway_reachable: bool | None = None
    dns_servers: list[str] = field(default_factory=list)
    dns_server_reachable: bool | None = None
    external_ip_reachable: bool | None = None
    external_dns_resolvable: bool | None = None
    ncsi_dns_resolvable: bool | None = None
    internal_domain: str | None = None
    internal_dns_resolvable: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "EvidenceRecord":
        """Rebuild a saved record. Raises ValueError on a non-boolean probe field."""
        return EvidenceRecord(
            gateway=data.get("gateway") or None,
            gateway_reachable=_optional_bool(data, "gateway_reachable"),
            dns_servers=[str(item) for item in data.get("dns_servers") or []],
            dns_server_reachable=_optional_bool(data, "dns_server_reachable"),
            external_ip_reachable=_optional_bool(data, "external_ip_reachable"),
            external_dns_resolvable=_optional_bool(data, "external_dns_resolvable"),
            ncsi_dns_resolvable=_optional_bool(data, "ncsi_dns_resolvable"),
            internal_domain=data.get("internal_domain") or None,
            internal_dns_resolvable=_optional_bool(data, "internal_dns_resolvable"),
        )


def _optional_bool(data: dict[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    raise ValueError(f"{key}: expected true, false or null, got {value!r}")


class Verdict(enum.Enum):
    """Single headline outcome of a classification pass."""
    OK = "OK"
    NO_DEFAULT_GATEWAY = "No default gateway"
    GATEWAY_UNREACHABLE = "Gateway unreachable"
    UPSTREAM_OR_OUTBOUND_BLOCK = "Upstream or outbound block"
    DNS_RESOLUTION_ISSUE = "DNS resolution issue"
    INTERNAL_DNS_RESOLUTION_ISSUE = "Internal DNS resolution issue"
    SEE_ISSUES = "See issues"

    @property
    def label(self) -> str:
        return self.value


class StepOutcome(enum.Enum):
    SKIPPED = "Skipped"
    EXECUTED_SUCCESS = "Executed-Success"
    EXECUTED_FAILURE = "Executed-Failure"


@dataclass(frozen=True)
class RemediationAction:
    """One command of a remediation step.

    settle_seconds is a pause taken after the command before the next one.
    """
    label: str
    argv: tuple[str, ...]
    settle_seconds: float = 0.0


@dataclass(frozen=True)
class RemediationStep:
    name: str
    prompt: str
    actions: tuple[RemediationAction, ...]
    raw_output_key: str


@dataclass
class StepResult:
    step: RemediationStep
    outcome: StepOutcome
    detail: str = ""
    raw_path: str | None = None


@dataclass
class CommandResult:
    """Normalized process result returned by command runners."""
    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0

    def describe_failure(self) -> str:
        if self.error:
            return self.error
        message = (self.stderr or self.stdout).strip()
        if message:
            return f"exit code {self.returncode}: {message.splitlines()[-1]}"
        return f"exit code {self.returncode}"
