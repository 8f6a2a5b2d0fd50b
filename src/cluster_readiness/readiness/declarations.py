"""Declarative wait binding.

Callers declare their waits as keyword arguments, one keyword per declaration:

    declaration = declare(cluster, services=[DATABASE, SELENIUM])
    gate = ReadinessGate.from_declaration(declaration)

Exactly one declaration is allowed. It holds either a single ``ClusterWait`` or
a list of them, which keeps the execution order explicit.
"""

from typing import NamedTuple

from cluster_readiness.exceptions import ConfigurationError

from .cluster import ClusterProvider
from .wait import ClusterWait


class Declaration(NamedTuple):
    """Validated waits plus the cluster they are resolved against."""

    waits: tuple[ClusterWait, ...]
    cluster: ClusterProvider


def collect_waits(**declared) -> tuple[ClusterWait, ...]:
    """Validate keyword declarations and return the waits in order.

    Raises:
        ConfigurationError: If nothing is declared, more than one keyword is
            declared, or a declared value is not a ClusterWait or a non-empty
            list of them
    """
    if not declared:
        raise ConfigurationError("A readiness gate requires at least one declared wait")
    if len(declared) > 1:
        raise ConfigurationError(
            f"Only one wait declaration allowed, got {', '.join(sorted(declared))} - "
            "pass a list of ClusterWaits if you want multiple"
        )

    field, value = next(iter(declared.items()))
    if isinstance(value, ClusterWait):
        return (value,)
    if isinstance(value, (list, tuple)) and value and all(isinstance(wait, ClusterWait) for wait in value):
        return tuple(value)
    raise ConfigurationError(f"Field {field} must be a ClusterWait or a list of ClusterWaits")


def declare(cluster: ClusterProvider, **declared) -> Declaration:
    """Collect the declared waits and bind them to ``cluster``."""
    if cluster is None:
        raise ConfigurationError("A readiness gate requires a cluster to resolve services against")
    return Declaration(collect_waits(**declared), cluster)
