from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from nettriage.core.errors import ConfigError


REPORT_FORMATS = {"markdown", "pdf"}


@dataclass
class TriageConfig:
    output_dir: str = "runs"
    external_ip: str = "8.8.8.8"
    external_host: str = "www.microsoft.com"
    ncsi_host: str = "dns.msftncsi.com"
    ping_timeout_ms: int = 1000
    command_timeout_ms: int = 120000
    report_formats: list[str] = field(default_factory=lambda: ["markdown", "pdf"])

    @staticmethod
    def from_file(path: str) -> "TriageConfig":
        """Load settings from a YAML or JSON file; missing keys keep defaults."""
        ext = Path(path).suffix.lower()
        try:
            with open(path, "r", encoding="utf-8") as handle:
                if ext in {".yaml", ".yml"}:
                    data = yaml.safe_load(handle)
                elif ext == ".json":
                    data = json.load(handle)
                else:
                    raise ConfigError(f"Unsupported config file extension: {ext}")
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Unable to load config {path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must contain a mapping")

        defaults = TriageConfig()
        try:
            formats = [str(item).lower() for item in data.get("report_formats", defaults.report_formats)]
            config = TriageConfig(
                output_dir=str(data.get("output_dir", defaults.output_dir)),
                external_ip=str(data.get("external_ip", defaults.external_ip)),
                external_host=str(data.get("external_host", defaults.external_host)),
                ncsi_host=str(data.get("ncsi_host", defaults.ncsi_host)),
                ping_timeout_ms=int(data.get("ping_timeout_ms", defaults.ping_timeout_ms)),
                command_timeout_ms=int(data.get("command_timeout_ms", defaults.command_timeout_ms)),
                report_formats=formats,
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid value in config {path}: {exc}") from exc

        invalid = set(config.report_formats) - REPORT_FORMATS
        if invalid:
            raise ConfigError(f"Unsupported report format(s): {', '.join(sorted(invalid))}")
        return config

    def snapshot(self) -> dict:
        return {
            "output_dir": self.output_dir,
            "external_ip": self.external_ip,
            "external_host": self.external_host,
            "ncsi_host": self.ncsi_host,
            "ping_timeout_ms": self.ping_timeout_ms,
            "command_timeout_ms": self.command_timeout_ms,
            "report_formats": list(self.report_formats),
        }
