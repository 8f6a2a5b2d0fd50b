"""Cluster provider interface and service-bound health checks.

The engine never starts or configures services. It only asks a
``ClusterProvider`` to resolve a service name into a ``Target``.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from cluster_readiness.exceptions import TargetNotFoundError

from .base import HealthCheck, health_check
from .models import Outcome, Target


class ClusterProvider(ABC):
    """Resolves named services to connectable targets."""

    @abstractmethod
    def resolve(self, name: str) -> Target:
        """Return the target for ``name``.

        Raises:
            TargetNotFoundError: If no such service is known
        """


class StaticCluster(ClusterProvider):
    """Cluster provider backed by a fixed table of targets."""

    def __init__(self, targets: Iterable[Target] = ()):
        self._targets: dict[str, Target] = {target.name: target for target in targets}

    @classmethod
    def from_addresses(cls, addresses: Mapping[str, str]) -> "StaticCluster":
        """Build a cluster from a ``{name: "host:port"}`` mapping.

        Raises:
            ConfigurationError: If an address is malformed
        """
        return cls(Target.parse(name, address) for name, address in addresses.items())

    @classmethod
    def from_settings(cls) -> "StaticCluster":
        """Build a cluster from the ``services`` setting."""
        from cluster_readiness.settings import get_settings

        return cls.from_addresses(get_settings().services)

    def resolve(self, name: str) -> Target:
        try:
            return self._targets[name]
        except KeyError:
            raise TargetNotFoundError(name, list(self._targets)) from None

    @property
    def names(self) -> list[str]:
        return list(self._targets)

    def __repr__(self) -> str:
        return f"StaticCluster(services={self.names})"


class ServiceHealthCheck(HealthCheck[ClusterProvider]):
    """Binds a target-level check to one named service of the cluster.

    The service is resolved on every attempt, so a provider whose address table
    changes while services come up is picked up by the next attempt.
    """

    def __init__(self, service: str, check: HealthCheck[Target] | Callable[[Target], Any], name: str | None = None):
        self.service = service
        self.check = health_check(check)
        super().__init__(name or service)

    @property
    def services(self) -> frozenset[str]:
        return frozenset({self.service})

    def resolve_services(self, cluster: ClusterProvider) -> None:
        cluster.resolve(self.service)

    def _evaluate(self, target: ClusterProvider) -> Outcome:
        outcome = self.check.evaluate(target.resolve(self.service))
        # Qualify with the service so any_of over several services stays unambiguous
        return outcome.model_copy(update={"check_name": f"{self.service}:{outcome.check_name}"})

    def __repr__(self) -> str:
        return f"ServiceHealthCheck(service='{self.service}', check={self.check!r})"


def service_health_check(
    service: str, check: HealthCheck[Target] | Callable[[Target], Any], name: str | None = None
) -> ServiceHealthCheck:
    """Bind ``check`` to the named service."""
    return ServiceHealthCheck(service, check, name=name)
