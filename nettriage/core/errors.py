from __future__ import annotations


class TriageError(Exception):
    """Base class for errors raised inside nettriage."""


class ProbeFailure(TriageError):
    """A single reachability probe or state read failed.

    Always recovered by the collector; the evidence field degrades instead.
    """


class ActionFailure(TriageError):
    """A remediation action failed; recorded as an Executed-Failure outcome."""


class ConfigError(TriageError):
    """The configuration file could not be loaded."""
