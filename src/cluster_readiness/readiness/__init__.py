"""Cluster readiness module.

This module blocks the caller until every declared service of a cluster is
ready, then runs a guarded action:
- Health checks probe one target per attempt and never remember earlier attempts
- Composite checks combine sub-checks with all-of / any-of policies
- The poller retries a check until it succeeds or its timeout elapses
- Cluster waits bind a check to a description and a timeout
- The readiness gate runs waits in order, fail-fast, and then the guarded action

The engine never starts, stops or configures services; it only observes them
through a cluster provider.
"""

# Core models
from .base import FunctionHealthCheck, HealthCheck, health_check
from .builder import ReadinessGateBuilder, wait_for_any_service, wait_for_service
from .cluster import ClusterProvider, ServiceHealthCheck, StaticCluster, service_health_check
from .composite import AllOf, AnyOf, CompositeHealthCheck, all_of, any_of
from .declarations import Declaration, collect_waits, declare
from .enums import CombinationPolicy, GateState, OutcomeStatus
from .gate import ReadinessGate, requires_ready, run_guarded
from .models import GateResult, Outcome, PollResult, Target, WaitResult
from .poller import Poller
from .reporter import render_failure, render_gate_result
from .wait import ClusterWait

__all__ = [
    # Core models
    "Outcome",
    "OutcomeStatus",
    "Target",
    "PollResult",
    "WaitResult",
    "GateResult",
    "GateState",
    "CombinationPolicy",
    # Health checks
    "HealthCheck",
    "FunctionHealthCheck",
    "health_check",
    "CompositeHealthCheck",
    "AllOf",
    "AnyOf",
    "all_of",
    "any_of",
    "ServiceHealthCheck",
    "service_health_check",
    # Cluster
    "ClusterProvider",
    "StaticCluster",
    # Polling and gating
    "Poller",
    "ClusterWait",
    "ReadinessGate",
    "run_guarded",
    "requires_ready",
    # Declaration binding
    "ReadinessGateBuilder",
    "wait_for_service",
    "wait_for_any_service",
    "Declaration",
    "collect_waits",
    "declare",
    # Reporting
    "render_gate_result",
    "render_failure",
]
