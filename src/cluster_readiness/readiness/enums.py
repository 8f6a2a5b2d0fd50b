"""Enums for the readiness engine.

This module contains basic enums to avoid circular dependencies.
"""

from enum import StrEnum


class OutcomeStatus(StrEnum):
    """Result of a single probe attempt."""

    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


class CombinationPolicy(StrEnum):
    """How a composite check combines its sub-checks."""

    ALL = "all"
    ANY = "any"


class GateState(StrEnum):
    """Lifecycle of a readiness gate."""

    PENDING = "pending"
    WAITING = "waiting"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"
