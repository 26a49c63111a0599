from __future__ import annotations

import os
import time
from typing import Callable, Sequence

from nettriage.core.errors import ActionFailure
from nettriage.core.models import (
    CommandResult,
    RemediationAction,
    RemediationStep,
    StepOutcome,
    StepResult,
)
from nettriage.core.session import SessionContext
from nettriage.ports.command_runner import CommandRunner


ADAPTER_SETTLE_SECONDS = 5.0

_INTERNET_SETTINGS = r"HKCU:\Software\Microsoft\Windows\CurrentVersion\Internet Settings"


def _powershell(script: str) -> tuple[str, ...]:
    return ("powershell.exe", "-NoProfile", "-NonInteractive", "-Command", script)


def _single(name: str, prompt: str, label: str, argv: tuple[str, ...]) -> RemediationStep:
    return RemediationStep(
        name=name,
        prompt=prompt,
        actions=(RemediationAction(label, argv),),
        raw_output_key=f"fix_{name}",
    )


# Cheap, low-risk steps first; the later ones drop connectivity or need a reboot.
DEFAULT_STEPS: tuple[RemediationStep, ...] = (
    _single("flush_dns", "Flush DNS cache", "ipconfig /flushdns", ("ipconfig", "/flushdns")),
    _single("register_dns", "Register DNS", "ipconfig /registerdns", ("ipconfig", "/registerdns")),
    RemediationStep(
        name="release_renew",
        prompt="Release and renew IP (will drop connection briefly)",
        actions=(
            RemediationAction("ipconfig /release", ("ipconfig", "/release")),
            RemediationAction("ipconfig /renew", ("ipconfig", "/renew")),
        ),
        raw_output_key="fix_release_renew",
    ),
    _single(
        "winsock_reset",
        "Reset Winsock (reboot recommended after)",
        "netsh winsock reset",
        ("netsh", "winsock", "reset"),
    ),
    _single(
        "ip_reset",
        "Reset IP stack (reboot recommended after)",
        "netsh int ip reset",
        ("netsh", "int", "ip", "reset"),
    ),
    _single(
        "restart_adapters",
        "Restart all network adapters",
        "Restart-NetAdapter *",
        _powershell("Get-NetAdapter | Restart-NetAdapter -Confirm:$false"),
    ),
    RemediationStep(
        name="toggle_adapters",
        prompt="Disable then enable all network adapters",
        actions=(
            RemediationAction(
                "Disable-NetAdapter *",
                _powershell("Get-NetAdapter | Disable-NetAdapter -Confirm:$false"),
                settle_seconds=ADAPTER_SETTLE_SECONDS,
            ),
            RemediationAction(
                "Enable-NetAdapter *",
                _powershell("Get-NetAdapter | Enable-NetAdapter -Confirm:$false"),
            ),
        ),
        raw_output_key="fix_toggle_adapters",
    ),
    _single(
        "restart_dnscache",
        "Restart DNS Client service (Dnscache)",
        "Restart-Service Dnscache",
        _powershell("Restart-Service -Name Dnscache -Force"),
    ),
    RemediationStep(
        name="clear_proxy",
        prompt="Clear WinHTTP and user proxy settings",
        actions=(
            RemediationAction("netsh winhttp reset proxy", ("netsh", "winhttp", "reset", "proxy")),
            RemediationAction(
                "reset user proxy registry values",
                _powershell(
                    f"Set-ItemProperty -Path '{_INTERNET_SETTINGS}' -Name ProxyEnable -Value 0; "
                    f"Remove-ItemProperty -Path '{_INTERNET_SETTINGS}' "
                    "-Name ProxyServer,ProxyOverride,AutoConfigURL -ErrorAction SilentlyContinue"
                ),
            ),
        ),
        raw_output_key="fix_clear_proxy",
    ),
)


def abort_requested() -> bool:
    """Default cancellation signal, set by exporting ABORT_RUN=true."""
    return os.environ.get("ABORT_RUN", "false").lower() == "true"


def run_pipeline(
    steps: Sequence[RemediationStep],
    auto_confirm: bool,
    session: SessionContext,
    runner: CommandRunner,
    confirm: Callable[[str], bool] | None = None,
    should_abort: Callable[[], bool] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[StepResult]:
    """Walk the remediation steps in order, gating each one separately.

    Args:
        steps (Sequence[RemediationStep]): Steps in execution order.
        auto_confirm (bool): Run every step without asking.
        session (SessionContext): Receives fix.txt lines and raw artifacts.
        runner (CommandRunner): Executes the underlying commands.
        confirm (Callable[[str], bool] | None): Asked with the step prompt when
            auto_confirm is off. Missing callback means every step is declined.
        should_abort (Callable[[], bool] | None): Checked before every step.
        sleep (Callable[[float], None]): Used for settle pauses between actions.

    Returns:
        list[StepResult]: One result per step, in step order.

    Notes:
        A failing step never stops the pipeline. Declined and cancelled steps
        write no raw artifact.
    """
    log = session.fix
    should_abort = should_abort or abort_requested
    log.write(f"Remediation started ({len(steps)} steps, auto-confirm: {'yes' if auto_confirm else 'no'})")

    results: list[StepResult] = []
    cancelled = False
    for step in steps:
        if not cancelled and should_abort():
            cancelled = True
            log.write("Cancellation requested; remaining steps will not run")
        if cancelled:
            log.write(f"Cancelled: {step.name}")
            results.append(StepResult(step, StepOutcome.SKIPPED, "cancelled"))
            continue

        if not auto_confirm and not _confirmed(confirm, step.prompt):
            log.write(f"Skipped: {step.name} ({step.prompt})")
            results.append(StepResult(step, StepOutcome.SKIPPED, "declined"))
            continue

        results.append(_execute_step(step, session, runner, sleep))

    executed = sum(1 for item in results if item.outcome is not StepOutcome.SKIPPED)
    failed = sum(1 for item in results if item.outcome is StepOutcome.EXECUTED_FAILURE)
    log.write(f"Remediation finished: {executed} executed, {failed} failed, {len(results) - executed} skipped")
    return results


def _confirmed(confirm: Callable[[str], bool] | None, prompt: str) -> bool:
    if confirm is None:
        return False
    return confirm(prompt) is True


def _execute_step(
    step: RemediationStep,
    session: SessionContext,
    runner: CommandRunner,
    sleep: Callable[[float], None],
) -> StepResult:
    sections: list[str] = []
    ran: list[str] = []
    outcome = StepOutcome.EXECUTED_SUCCESS
    detail = "success"
    try:
        for action in step.actions:
            ran.append(action.label)
            result = runner.run(action.argv)
            sections.append(_format_section(action, result))
            if not result.ok:
                raise ActionFailure(f"{action.label}: {result.describe_failure()}")
            if action.settle_seconds:
                sleep(action.settle_seconds)
    except ActionFailure as exc:
        outcome = StepOutcome.EXECUTED_FAILURE
        detail = f"failed: {exc}"
        sections.append(f"ERROR: {exc}")
    except Exception as exc:
        # Any runner error is recorded against this step only.
        outcome = StepOutcome.EXECUTED_FAILURE
        detail = f"failed: {type(exc).__name__}: {exc}"
        sections.append(f"ERROR: {type(exc).__name__}: {exc}")

    raw_path = session.write_raw(step.raw_output_key, "\n\n".join(sections) + "\n")
    session.fix.write(f"{step.name}: ran {'; '.join(ran)} -> {detail}")
    return StepResult(step, outcome, detail, str(raw_path))


def _format_section(action: RemediationAction, result: CommandResult) -> str:
    lines = [f"> {' '.join(action.argv)}", f"exit code: {result.returncode}"]
    if result.error:
        lines.append(f"error: {result.error}")
    if result.stdout:
        lines.extend(["stdout:", result.stdout.rstrip()])
    if result.stderr:
        lines.extend(["stderr:", result.stderr.rstrip()])
    return "\n".join(lines)
