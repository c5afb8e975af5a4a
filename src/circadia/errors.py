"""Exceptions raised for caller-protocol misuse.

Sparse or degenerate sensor data never raises: the analytics fall back to
neutral values instead.  These errors are reserved for calls that cannot be
answered without hiding a bug in the caller.
"""

from __future__ import annotations


class SleepError(Exception):
    """Base class for all circadia errors."""


class NoActiveSession(SleepError):
    """A session was ended or analyzed without having been started."""


class NoAnalysisAvailable(SleepError):
    """Recommendations were requested before any analysis was produced."""


class InvalidInput(SleepError, ValueError):
    """A sample, stage or session is malformed (NaN, negative duration, ...)."""
