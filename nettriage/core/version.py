from __future__ import annotations

import subprocess
from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    try:
        return version("nettriage")
    except PackageNotFoundError:
        return _version_from_git() or "dev"


def _version_from_git() -> str | None:
    try:
        value = subprocess.check_output(
            ["git", "describe", "--tags", "--dirty", "--always"],
            text=True,
            stderr=subprocess.DEVNULL,
        ).strip()
    except (OSError, subprocess.SubprocessError):
        return None
    if not value:
        return None
    return value[1:] if value.startswith("v") else value
