from __future__ import annotations

"""nettriage command-line interface entrypoint."""

import argparse
import ctypes
import json
import os
import sys

from nettriage.adapters.command_runner_subprocess import SubprocessCommandRunner
from nettriage.adapters.publisher_console import ConsolePublisher
from nettriage.adapters.system_probe import SystemNetworkProbe
from nettriage.core.classifier import classify, verdict_line
from nettriage.core.config import REPORT_FORMATS, TriageConfig
from nettriage.core.errors import ConfigError
from nettriage.core.models import EvidenceRecord
from nettriage.core.orchestrator import Orchestrator
from nettriage.core.remediation import DEFAULT_STEPS, abort_requested


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean from the environment with a safe default.

    Notes:
        CLI flags can still override this; env values only provide a baseline
        for convenience in automation.
    """
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes"}


def _parse_bool(value: str | None) -> bool:
    """Parse optional boolean flags that allow an implicit True value."""
    if value is None:
        return True
    return value.lower() in {"1", "true", "yes"}


def _parse_formats(value: str | None) -> list[str] | None:
    """Parse report formats from a comma-separated string.

    Supported values: markdown, pdf, all, none. Returns None when the value
    is not given so the config file decides.
    """
    if value is None:
        return None
    if value == "all":
        return sorted(REPORT_FORMATS)
    if value == "none":
        return []
    formats = [item.strip().lower() for item in value.split(",") if item.strip()]
    invalid = set(formats) - REPORT_FORMATS
    if invalid:
        raise ValueError(f"Unsupported format(s): {', '.join(sorted(invalid))}")
    return formats


class ConsolePrompt:
    """Interactive step gate that also lets the operator stop the pipeline.

    Anything but yes declines the current step. Answering q, pressing Ctrl-C
    or closing stdin declines it and cancels every step after it.
    """

    def __init__(self) -> None:
        self.cancelled = False

    def confirm(self, prompt: str) -> bool:
        if self.cancelled:
            return False
        try:
            answer = input(f"{prompt}? [y/N/q] ")
        except (EOFError, KeyboardInterrupt):
            print()
            self.cancelled = True
            return False
        answer = answer.strip().lower()
        if answer in {"q", "quit"}:
            self.cancelled = True
            return False
        return answer in {"y", "yes"}

    def should_abort(self) -> bool:
        return self.cancelled or abort_requested()


def _is_elevated() -> bool:
    if os.name == "nt":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False
    return os.geteuid() == 0


def _load_config(args: argparse.Namespace) -> TriageConfig:
    config = TriageConfig.from_file(args.config) if args.config else TriageConfig()
    if getattr(args, "out", None):
        config.output_dir = args.out
    formats = _parse_formats(getattr(args, "format", None))
    if formats is not None:
        config.report_formats = formats
    return config


def _build_orchestrator(config: TriageConfig) -> Orchestrator:
    runner = SubprocessCommandRunner(timeout_ms=config.command_timeout_ms)
    probe = SystemNetworkProbe(runner)
    return Orchestrator(probe, runner, ConsolePublisher(), config=config, echo=True)


def _pause(args: argparse.Namespace) -> None:
    if args.pause:
        try:
            input("Press Enter to exit...")
        except EOFError:
            pass


def _warn_if_not_elevated() -> None:
    if not _is_elevated():
        print(
            "Warning: not running elevated; remediation steps and some captures will fail.",
            file=sys.stderr,
        )


def run_command(args: argparse.Namespace) -> int:
    """Run a diagnostic pass, with remediation when --fix is given."""
    try:
        config = _load_config(args)
    except (ConfigError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2
    _warn_if_not_elevated()
    orchestrator = _build_orchestrator(config)
    prompt = ConsolePrompt()
    summary = orchestrator.run(
        remediate=args.fix,
        auto_confirm=args.auto_confirm,
        confirm=prompt.confirm,
        should_abort=prompt.should_abort,
    )
    print(f"Diagnostic run complete: report={summary['report_path']} pdf={summary['pdf_path']}")
    _pause(args)
    return 0


def fix_command(args: argparse.Namespace) -> int:
    """Run the remediation pipeline on its own."""
    try:
        config = _load_config(args)
    except (ConfigError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return 2
    _warn_if_not_elevated()
    orchestrator = _build_orchestrator(config)
    prompt = ConsolePrompt()
    summary = orchestrator.remediate(
        auto_confirm=args.auto_confirm,
        confirm=prompt.confirm,
        should_abort=prompt.should_abort,
    )
    print(f"Remediation complete: session={summary['session_dir']}")
    _pause(args)
    return 0


def classify_command(args: argparse.Namespace) -> int:
    """Classify a saved evidence JSON file without touching the system."""
    try:
        with open(args.evidence, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        print(str(exc), file=sys.stderr)
        return 2
    if not isinstance(data, dict):
        print("Evidence file must contain a JSON object", file=sys.stderr)
        return 2
    try:
        evidence = EvidenceRecord.from_dict(data)
    except ValueError as exc:
        print(f"Invalid evidence file: {exc}", file=sys.stderr)
        return 2
    issues, verdict = classify(evidence)
    for issue in issues:
        print(f"Issue: {issue}")
    print(verdict_line(verdict))
    return 0


def steps_command(args: argparse.Namespace) -> int:
    """List the remediation steps in execution order."""
    del args
    for index, step in enumerate(DEFAULT_STEPS, start=1):
        commands = "; ".join(action.label for action in step.actions)
        print(f"{index}. {step.prompt} [{commands}]")
    return 0


def main() -> int:
    """CLI entrypoint and command registration."""
    parser = argparse.ArgumentParser(prog="nettriage")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Collect, classify and optionally remediate")
    run_parser.add_argument("--config", default=None, help="Path to config.yaml")
    run_parser.add_argument("--out", default=None, help="Directory for session folders")
    run_parser.add_argument("--fix", action="store_true", help="Offer remediation after classification")
    run_parser.add_argument(
        "--auto-confirm",
        nargs="?",
        const=True,
        default=_env_bool("AUTO_CONFIRM", False),
        type=_parse_bool,
        help="Run remediation steps without prompting (true/false)",
    )
    run_parser.add_argument("--format", default=None, help="Report formats: markdown,pdf, all or none")
    run_parser.add_argument("--pause", action="store_true", help="Wait for Enter before exiting")
    run_parser.set_defaults(func=run_command)

    fix_parser = subparsers.add_parser("fix", help="Run the remediation pipeline only")
    fix_parser.add_argument("--config", default=None, help="Path to config.yaml")
    fix_parser.add_argument("--out", default=None, help="Directory for session folders")
    fix_parser.add_argument(
        "--auto-confirm",
        nargs="?",
        const=True,
        default=_env_bool("AUTO_CONFIRM", False),
        type=_parse_bool,
        help="Run remediation steps without prompting (true/false)",
    )
    fix_parser.add_argument("--format", default=None, help="Report formats: markdown,pdf, all or none")
    fix_parser.add_argument("--pause", action="store_true", help="Wait for Enter before exiting")
    fix_parser.set_defaults(func=fix_command)

    classify_parser = subparsers.add_parser("classify", help="Classify a saved evidence JSON file")
    classify_parser.add_argument("--evidence", required=True, help="Path to evidence JSON")
    classify_parser.set_defaults(func=classify_command)

    steps_parser = subparsers.add_parser("steps", help="List remediation steps")
    steps_parser.set_defaults(func=steps_command)

    args = parser.parse_args()
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
