"""Base abstractions for health checks."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from loguru import logger

from cluster_readiness.exceptions import ProbeError

from .models import Outcome

T = TypeVar("T")


class HealthCheck(ABC, Generic[T]):
    """Abstract base class for health checks.

    A health check produces one ``Outcome`` per attempt against a target. It keeps
    no memory of previous attempts, so the same instance can be polled repeatedly
    and shared between waits.
    """

    def __init__(self, name: str):
        """Initialize the health check.

        Args:
            name: The name of this check (used in outcome.check_name)
        """
        self.name = name

    @abstractmethod
    def _evaluate(self, target: T) -> Outcome:
        """Run one attempt against the target.

        This method should be implemented by subclasses. It may raise; the
        exception is turned into an error outcome by ``evaluate``.

        Returns:
            Outcome: The outcome of this attempt
        """

    def evaluate(self, target: T) -> Outcome:
        """Run one attempt, converting any raised exception into an error outcome.

        Args:
            target: What to probe (a service target, or a cluster for service-bound checks)

        Returns:
            Outcome: The outcome of this attempt, attributed to the check that produced it
        """
        try:
            outcome = self._evaluate(target)
        except Exception as e:
            logger.debug("Check {} raised {}: {}", self.name, type(e).__name__, e)
            return self.error(e)
        return outcome.attributed_to(self.name)

    @property
    def services(self) -> frozenset[str]:
        """Names of the cluster services this check needs resolved."""
        return frozenset()

    def resolve_services(self, cluster) -> None:
        """Check that ``cluster`` knows the services this check needs.

        Checks that need no service accept any cluster.

        Raises:
            TargetNotFoundError: If a required service is unknown
        """

    def success(self, reason: str | None = None) -> Outcome:
        """Return a successful outcome."""
        return Outcome.success(reason, check_name=self.name)

    def failed(self, reason: str) -> Outcome:
        """Return a failed outcome."""
        return Outcome.failure(reason, check_name=self.name)

    def error(self, cause: BaseException) -> Outcome:
        """Return an error outcome."""
        return Outcome.error(cause, check_name=self.name)

    def __call__(self, target: T) -> Outcome:
        return self.evaluate(target)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}')"


class FunctionHealthCheck(HealthCheck[T]):
    """Health check backed by a plain callable.

    The callable receives the target and returns either an ``Outcome`` or a
    bool (``True`` is a success).
    """

    def __init__(self, name: str, fn: Callable[[T], Any]):
        super().__init__(name)
        self.fn = fn

    def _evaluate(self, target: T) -> Outcome:
        result = self.fn(target)
        if isinstance(result, Outcome):
            return result
        if isinstance(result, bool):
            return self.success() if result else self.failed(f"Check '{self.name}' reported not ready")
        raise ProbeError(f"Check '{self.name}' returned {type(result).__name__}, expected Outcome or bool")


def health_check(fn: Callable[[T], Any] | HealthCheck[T], name: str | None = None) -> HealthCheck[T]:
    """Wrap a callable as a health check; health checks are returned unchanged."""
    if isinstance(fn, HealthCheck):
        return fn
    return FunctionHealthCheck(name or getattr(fn, "__name__", "check"), fn)
