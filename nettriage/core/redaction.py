from __future__ import annotations

import re


_PATTERNS = [
    (re.compile(r"(Authorization\s*:\s*Bearer\s+)[^\s]+", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"\b([a-z][a-z0-9+.-]*://)[^/\s:@]+:[^/\s@]+@", re.IGNORECASE), r"\1[REDACTED]@"),
    (re.compile(r"(password\s*[:=])\s*[^\s]+", re.IGNORECASE), r"\1 [REDACTED]"),
    (re.compile(r"(api_key\s*[:=])\s*[^\s]+", re.IGNORECASE), r"\1 [REDACTED]"),
    (re.compile(r"(token\s*[:=])\s*[^\s]+", re.IGNORECASE), r"\1 [REDACTED]"),
    (re.compile(r"(secret\s*[:=])\s*[^\s]+", re.IGNORECASE), r"\1 [REDACTED]"),
]


def redact_text(value: str) -> str:
    """Redact credentials from captured command output.

    Notes:
        Proxy settings commonly embed `user:password@` in the proxy URL, and
        raw captures end up attached to tickets.
    """
    redacted = value
    for pattern, repl in _PATTERNS:
        redacted = pattern.sub(repl, redacted)
    return redacted

