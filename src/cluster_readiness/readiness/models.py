"""Data models for the readiness engine.

This module contains the Pydantic models shared by checks, the poller, waits
and the gate, kept apart from the behaviour to avoid circular dependencies.
"""

import re
from collections.abc import Callable
from typing import Any

import arrow
from pydantic import BaseModel, Field, ValidationError

from cluster_readiness.exceptions import ConfigurationError, ProbeError

from .enums import GateState, OutcomeStatus

_PLACEHOLDER = re.compile(r"\$([A-Z_]+)")


class Outcome(BaseModel):
    """Result of one probe attempt: success, failure with a reason, or error with a cause.

    Outcomes are frozen. Every attempt produces a fresh one.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    status: OutcomeStatus
    reason: str | None = None
    cause: BaseException | None = Field(default=None, exclude=True)
    check_name: str | None = None

    @classmethod
    def success(cls, reason: str | None = None, check_name: str | None = None) -> "Outcome":
        """Return a successful outcome."""
        return cls(status=OutcomeStatus.SUCCESS, reason=reason, check_name=check_name)

    @classmethod
    def failure(cls, reason: str, check_name: str | None = None) -> "Outcome":
        """Return a failed outcome carrying a human-readable reason."""
        return cls(status=OutcomeStatus.FAILURE, reason=reason, check_name=check_name)

    @classmethod
    def error(cls, cause: BaseException, check_name: str | None = None) -> "Outcome":
        """Return an error outcome; the cause is kept verbatim."""
        return cls(
            status=OutcomeStatus.ERROR,
            reason=f"{type(cause).__name__}: {cause}",
            cause=cause,
            check_name=check_name,
        )

    @classmethod
    def on_result_of(cls, attempt: Callable[[], Any]) -> "Outcome":
        """Run ``attempt`` and map its result onto an outcome.

        A truthy return value is a success, a falsy one a failure and a raised
        exception an error.
        """
        try:
            result = attempt()
        except Exception as e:
            return cls.error(e)
        if result:
            return cls.success()
        return cls.failure("Attempt to complete health check failed")

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    def attributed_to(self, check_name: str) -> "Outcome":
        """Return this outcome tagged with the producing check, unless it already is."""
        if self.check_name is not None:
            return self
        return self.model_copy(update={"check_name": check_name})

    def describe(self) -> str:
        """One-line diagnostic naming the producing check and the reason."""
        if self.reason:
            text = self.reason
        elif self.is_success:
            text = "ready"
        else:
            text = "not ready"
        return f"[{self.check_name}] {text}" if self.check_name else text

    def __str__(self) -> str:
        return f"{self.status.value}: {self.describe()}"


class Target(BaseModel):
    """A named, running service instance reachable at host:port.

    Targets are owned by a cluster provider; the engine only receives them.
    """

    model_config = {"frozen": True}

    name: str
    host: str
    port: int = Field(ge=0, le=65535)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def in_format(self, template: str) -> str:
        """Substitute ``$HOST`` and ``$EXTERNAL_PORT`` in ``template``.

        Example:
            >>> Target(name="selenium", host="localhost", port=4444).in_format("http://$HOST:$EXTERNAL_PORT/wd/hub")
            'http://localhost:4444/wd/hub'

        Raises:
            ProbeError: If the template uses an unknown placeholder
        """
        values = {"HOST": self.host, "EXTERNAL_PORT": str(self.port)}

        def _substitute(match: re.Match) -> str:
            key = match.group(1)
            if key not in values:
                raise ProbeError(f"Unknown placeholder ${key} in '{template}' for service '{self.name}'")
            return values[key]

        return _PLACEHOLDER.sub(_substitute, template)

    @classmethod
    def parse(cls, name: str, address: str) -> "Target":
        """Build a target from a ``host:port`` string.

        Raises:
            ConfigurationError: If the address is malformed
        """
        host, sep, port = address.strip().rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ConfigurationError(f"Malformed address for service '{name}': {address!r} (expected 'host:port')")
        try:
            return cls(name=name, host=host, port=int(port))
        except ValidationError as e:
            raise ConfigurationError(f"Malformed address for service '{name}': {address!r}") from e

    def __str__(self) -> str:
        return f"{self.name}@{self.address}"


class PollResult(BaseModel):
    """Successful end of a poll loop."""

    outcome: Outcome
    attempts: int
    execution_time_ms: float


class WaitResult(BaseModel):
    """Result of a single cluster wait."""

    model_config = {"use_enum_values": True}

    description: str
    status: OutcomeStatus
    message: str
    attempts: int = 0
    executed_at: str | None = None  # ISO 8601 UTC timestamp
    execution_time_ms: float | None = None


class GateResult(BaseModel):
    """Complete result of a readiness gate execution."""

    model_config = {"use_enum_values": True}

    state: GateState
    message: str
    wait_results: list[WaitResult] = Field(default_factory=list)
    action_invoked: bool = False
    executed_at: str = Field(default_factory=lambda: arrow.utcnow().isoformat())
    total_execution_time_ms: float | None = None
    total_waits: int = 0
    completed_waits: int = 0
