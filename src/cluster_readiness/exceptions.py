"""Exceptions raised by the readiness engine.

All errors derive from ``ReadinessError`` so callers can catch the whole family
in one place. Errors raised by a guarded action are never wrapped.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cluster_readiness.readiness.models import Outcome


class ReadinessError(Exception):
    """Base class for readiness errors."""


class ConfigurationError(ReadinessError):
    """Raised when waits, checks or declarations are misconfigured.

    Always raised before any polling starts and never retried.
    """


class ProbeError(ReadinessError):
    """Raised by a health check that faulted rather than reporting a failure.

    ``HealthCheck.evaluate`` turns it into an error outcome, so the poll loop
    retries it like any other non-success.
    """


class TargetNotFoundError(ReadinessError):
    """Raised when the cluster has no service with the requested name."""

    def __init__(self, name: str, known: list[str] | None = None):
        self.name = name
        self.known = sorted(known or [])
        message = f"Service not found in cluster: {name}"
        if self.known:
            message += f" (known services: {', '.join(self.known)})"
        super().__init__(message)


class ReadinessTimeoutError(ReadinessError):
    """Raised when a wait never saw a successful outcome within its timeout.

    Carries the wait description and the most recent outcome, which is the only
    attempt kept for diagnostics.
    """

    def __init__(self, description: str, outcome: Outcome, timeout: float, attempts: int):
        self.description = description
        self.outcome = outcome
        self.timeout = timeout
        self.attempts = attempts
        super().__init__(
            f"'{description}' was not ready after {timeout:g}s ({attempts} attempt{'s' if attempts != 1 else ''}): "
            f"{outcome.describe()}"
        )
