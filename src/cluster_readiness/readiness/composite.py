"""Composite health checks.

``AllOf`` passes only when every sub-check passes and stops at the first
sub-check that does not. ``AnyOf`` passes on the first sub-check that does and
otherwise reports the last non-success it saw.

Both evaluate their sub-checks in the order given and return the sub-outcome
unchanged apart from attribution, so a timeout message still names the
sub-check that was not ready.
"""

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from loguru import logger

from cluster_readiness.exceptions import ConfigurationError, TargetNotFoundError

from .base import HealthCheck, health_check
from .enums import CombinationPolicy
from .models import Outcome

T = TypeVar("T")


class CompositeHealthCheck(HealthCheck[T]):
    """A health check made of sub-checks and a combination policy."""

    policy: CombinationPolicy

    def __init__(self, checks: Iterable[HealthCheck[T] | Callable[[T], Any]], name: str | None = None):
        """Initialize the composite.

        Args:
            checks: Sub-checks in evaluation order; plain callables are wrapped
            name: Optional name, defaults to the policy and sub-check names

        Raises:
            ConfigurationError: If no sub-checks are given
        """
        self.checks: tuple[HealthCheck[T], ...] = tuple(health_check(check) for check in checks)
        if not self.checks:
            raise ConfigurationError(f"{type(self).__name__} requires at least one health check")
        super().__init__(name or f"{self.policy.value}_of({', '.join(check.name for check in self.checks)})")

    @property
    def services(self) -> frozenset[str]:
        return frozenset().union(*(check.services for check in self.checks))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(checks={[check.name for check in self.checks]})"


class AllOf(CompositeHealthCheck[T]):
    """Passes when every sub-check passes; short-circuits on the first that does not."""

    policy = CombinationPolicy.ALL

    def _evaluate(self, target: T) -> Outcome:
        for check in self.checks:
            outcome = check.evaluate(target)
            if not outcome.is_success:
                logger.trace("{}: sub-check {} not ready", self.name, check.name)
                return outcome
        return self.success(f"All {len(self.checks)} checks passed")

    def resolve_services(self, cluster) -> None:
        for check in self.checks:
            check.resolve_services(cluster)


class AnyOf(CompositeHealthCheck[T]):
    """Passes on the first passing sub-check; otherwise returns the last non-success."""

    policy = CombinationPolicy.ANY

    def _evaluate(self, target: T) -> Outcome:
        last: Outcome | None = None
        for check in self.checks:
            outcome = check.evaluate(target)
            if outcome.is_success:
                return outcome
            last = outcome
        # The most recent diagnostic wins
        return last  # type: ignore[return-value]

    def resolve_services(self, cluster) -> None:
        """Passes when at least one alternative can be resolved."""
        error: TargetNotFoundError | None = None
        for check in self.checks:
            try:
                check.resolve_services(cluster)
            except TargetNotFoundError as e:
                error = e
            else:
                return
        raise error  # type: ignore[misc]


def all_of(*checks: HealthCheck[T] | Callable[[T], Any], name: str | None = None) -> AllOf[T]:
    """Combine checks so that all of them must pass."""
    return AllOf(checks, name=name)


def any_of(*checks: HealthCheck[T] | Callable[[T], Any], name: str | None = None) -> AnyOf[T]:
    """Combine checks so that at least one of them must pass."""
    return AnyOf(checks, name=name)
