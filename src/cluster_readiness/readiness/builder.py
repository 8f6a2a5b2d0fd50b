"""Gate builder for declaring waits with a fluent interface."""

from collections.abc import Callable, Iterable
from typing import Any

from cluster_readiness.exceptions import ConfigurationError

from .base import HealthCheck
from .cluster import ClusterProvider, service_health_check
from .composite import AnyOf
from .gate import ReadinessGate
from .models import Target
from .poller import Duration, to_seconds
from .wait import ClusterWait

TargetCheck = HealthCheck[Target] | Callable[[Target], Any]


class ReadinessGateBuilder:
    """Builder for constructing readiness gates with method chaining."""

    def __init__(self):
        """Initialize the builder."""
        self.waits: list[ClusterWait] = []
        self.cluster: ClusterProvider | None = None
        self.cleanup: Callable[[], None] | None = None

    def add_wait(self, wait: ClusterWait) -> "ReadinessGateBuilder":
        """Append a wait; waits run in the order they are added.

        Args:
            wait: The wait to add

        Returns:
            This builder for method chaining

        Raises:
            ConfigurationError: If ``wait`` is not a ClusterWait
        """
        if not isinstance(wait, ClusterWait):
            raise ConfigurationError(f"Expected a ClusterWait, got {type(wait).__name__}")
        self.waits.append(wait)
        return self

    def add_waits(self, waits: Iterable[ClusterWait]) -> "ReadinessGateBuilder":
        """Append several waits, keeping their order."""
        for wait in waits:
            self.add_wait(wait)
        return self

    def with_cluster(self, cluster: ClusterProvider) -> "ReadinessGateBuilder":
        """Set the cluster the waits are resolved against."""
        self.cluster = cluster
        return self

    def with_cleanup(self, cleanup: Callable[[], None]) -> "ReadinessGateBuilder":
        """Set a callable run exactly once when the gate finishes."""
        self.cleanup = cleanup
        return self

    def apply(self, extension: Callable[..., Any], *args, **kwargs) -> "ReadinessGateBuilder":
        """Run ``extension(self, *args, **kwargs)`` and keep chaining.

        Example:
            builder.apply(wait_for_service, "db", accepts_connections, timeout=60)
        """
        extension(self, *args, **kwargs)
        return self

    def build(self) -> ReadinessGate:
        """Build the gate.

        Returns:
            Configured ReadinessGate

        Raises:
            ConfigurationError: If no waits were added or no cluster was set
        """
        return ReadinessGate(self.waits, self.cluster, cleanup=self.cleanup)

    def __str__(self) -> str:
        """String representation of the builder."""
        return f"ReadinessGateBuilder(waits={len(self.waits)}, cluster={self.cluster!r})"


def wait_for_service(
    builder: ReadinessGateBuilder,
    service: str,
    check: TargetCheck,
    timeout: Duration | None = None,
    poll_interval: Duration | None = None,
    description: str | None = None,
) -> ReadinessGateBuilder:
    """Add a wait for one named service.

    Args:
        builder: The builder to extend
        service: Name of the service in the cluster
        check: Target-level check evaluated against the service
        timeout: Defaults to the ``default_timeout`` setting
        poll_interval: Defaults to the ``default_poll_interval`` setting
        description: Defaults to ``service '<name>'``

    Returns:
        The builder, for chaining
    """
    return builder.add_wait(
        ClusterWait.for_service(service, check, timeout=timeout, poll_interval=poll_interval, description=description)
    )


def wait_for_any_service(
    builder: ReadinessGateBuilder,
    services: Iterable[str],
    check: TargetCheck,
    timeout: Duration | None = None,
    poll_interval: Duration | None = None,
    description: str | None = None,
) -> ReadinessGateBuilder:
    """Add a wait that passes as soon as any one of ``services`` passes ``check``."""
    from cluster_readiness.settings import get_settings

    services = list(services)
    if not services:
        raise ConfigurationError("wait_for_any_service requires at least one service")

    settings = get_settings()
    timeout_s = to_seconds(timeout) if timeout is not None else settings.default_timeout
    if poll_interval is None:
        poll_interval = min(settings.default_poll_interval, timeout_s)

    any_check = AnyOf(
        [service_health_check(service, check) for service in services],
        name=f"any_of({', '.join(services)})",
    )
    return builder.add_wait(
        ClusterWait(
            description or f"any of services {', '.join(services)}",
            any_check,
            timeout_s,
            poll_interval,
        )
    )
