"""Cluster waits: a health check bound to a description and a timeout.

A ``ClusterWait`` is what callers declare. It is immutable once built and can
be reused by any number of gates; every ``wait_until_ready`` call polls afresh.

Typical Usage:
    wait = ClusterWait.for_service("db", postgres_accepts_connections, timeout=60)
    wait.wait_until_ready(cluster)
"""

import arrow
from loguru import logger

from cluster_readiness.exceptions import ConfigurationError

from .base import HealthCheck, health_check
from .cluster import ClusterProvider, service_health_check
from .enums import OutcomeStatus
from .models import WaitResult
from .poller import Duration, Poller, to_seconds


class ClusterWait:
    """A named, timed binding of a cluster-level health check.

    Attributes:
        description: Human-readable name of what is awaited, used in every failure message
        check: Health check evaluated against the cluster
        timeout: Seconds to keep polling
        poll_interval: Seconds between two attempts
    """

    def __init__(
        self,
        description: str,
        check: HealthCheck[ClusterProvider],
        timeout: Duration,
        poll_interval: Duration,
        poller: Poller | None = None,
    ):
        """Initialize and validate the wait.

        Raises:
            ConfigurationError: If the timeout is not positive or the poll interval
                is not within (0, timeout]
        """
        timeout_s = to_seconds(timeout)
        interval_s = to_seconds(poll_interval)
        if not description:
            raise ConfigurationError("ClusterWait requires a description")
        if timeout_s <= 0:
            raise ConfigurationError(f"Timeout for '{description}' must be greater than zero, got {timeout_s}")
        if interval_s <= 0 or interval_s > timeout_s:
            raise ConfigurationError(
                f"Poll interval for '{description}' must be greater than zero and at most the timeout "
                f"({timeout_s}s), got {interval_s}"
            )
        self._description = description
        self._check = health_check(check)
        self._timeout = timeout_s
        self._poll_interval = interval_s
        self._poller = poller or Poller()

    @classmethod
    def for_service(
        cls,
        service: str,
        check,
        timeout: Duration | None = None,
        poll_interval: Duration | None = None,
        description: str | None = None,
    ) -> "ClusterWait":
        """Build a wait for a single named service.

        Args:
            service: Name of the service in the cluster
            check: Target-level health check (or callable) evaluated against the service
            timeout: Defaults to the ``default_timeout`` setting
            poll_interval: Defaults to the ``default_poll_interval`` setting, capped at the timeout
            description: Defaults to ``service '<name>'``

        Returns:
            The configured wait
        """
        from cluster_readiness.settings import get_settings

        settings = get_settings()
        timeout_s = to_seconds(timeout) if timeout is not None else settings.default_timeout
        if poll_interval is None:
            poll_interval = min(settings.default_poll_interval, timeout_s)
        return cls(
            description or f"service '{service}'",
            service_health_check(service, check),
            timeout_s,
            poll_interval,
        )

    @property
    def description(self) -> str:
        return self._description

    @property
    def check(self) -> HealthCheck[ClusterProvider]:
        return self._check

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    def wait_until_ready(self, cluster: ClusterProvider) -> WaitResult:
        """Block until the check passes against the cluster or the timeout elapses.

        The services the check needs are resolved before polling starts, so an
        unknown name fails immediately instead of timing out. For any-of checks
        one known alternative is enough.

        Args:
            cluster: Provider used to resolve service names

        Returns:
            WaitResult: Attempt count and timing of the successful poll

        Raises:
            TargetNotFoundError: If the check cannot be satisfied by the known services
            ReadinessTimeoutError: If the check never passed within the timeout
        """
        self._check.resolve_services(cluster)

        logger.info("Waiting for {} (timeout {:g}s)", self._description, self._timeout)
        executed_at = arrow.utcnow().isoformat()

        result = self._poller.poll_until_ready(
            self._check,
            cluster,
            timeout=self._timeout,
            interval=self._poll_interval,
            description=self._description,
        )

        logger.info("{} is ready after {} attempt(s)", self._description, result.attempts)
        return WaitResult(
            description=self._description,
            status=OutcomeStatus.SUCCESS,
            message=result.outcome.describe(),
            attempts=result.attempts,
            executed_at=executed_at,
            execution_time_ms=result.execution_time_ms,
        )

    def __str__(self) -> str:
        return f"ClusterWait('{self._description}')"

    def __repr__(self) -> str:
        return (
            f"ClusterWait(description='{self._description}', check={self._check!r}, "
            f"timeout={self._timeout:g}, poll_interval={self._poll_interval:g})"
        )
