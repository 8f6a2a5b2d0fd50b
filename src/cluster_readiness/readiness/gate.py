"""Readiness gate: ordered waits guarding an action.

This module provides the ReadinessGate, which drives a fixed sequence of
cluster waits on the calling thread and runs a guarded action only once every
wait has succeeded.

Key Features:
- Waits run strictly in declaration order
- Fail-fast: the first failing wait aborts the gate, later waits never run
- The guarded action runs exactly once, and only after all waits succeed
- Errors from waits and from the action propagate unchanged
- An optional cleanup runs exactly once on every exit path

State Machine:
    PENDING -> WAITING -> ... -> WAITING -> RUNNING -> DONE
    PENDING -> WAITING -> FAILED (first wait that fails)
    RUNNING -> FAILED (guarded action raised)
    DONE -> FAILED (cleanup raised after the action completed)

Typical Usage:
    gate = ReadinessGate([DATABASE, SELENIUM], cluster)
    gate.run_guarded(run_end_to_end_suite)

A gate is single-use. Waits are immutable, so the same wait declarations can
be handed to a fresh gate for every invocation.
"""

import functools
from collections.abc import Callable, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, TypeVar

import arrow
from loguru import logger

from cluster_readiness.exceptions import ConfigurationError, ReadinessTimeoutError

from .cluster import ClusterProvider
from .enums import GateState, OutcomeStatus
from .models import GateResult, WaitResult
from .wait import ClusterWait

if TYPE_CHECKING:
    from .declarations import Declaration

R = TypeVar("R")


class ReadinessGate:
    """An ordered collection of cluster waits gating one action.

    Attributes:
        waits: The waits, in execution order (never mutated)
        cluster: Provider used to resolve service names
        state: Current GateState
        last_result: GateResult of the run, once started
    """

    def __init__(
        self,
        waits: Sequence[ClusterWait],
        cluster: ClusterProvider | None,
        cleanup: Callable[[], None] | None = None,
    ):
        """Initialize and validate the gate.

        Args:
            waits: Cluster waits in the order they must pass
            cluster: Provider used to resolve service names
            cleanup: Called exactly once when the gate finishes, whatever the outcome

        Raises:
            ConfigurationError: If no waits are given, an item is not a ClusterWait,
                or no cluster is given
        """
        waits = tuple(waits)
        if not waits:
            raise ConfigurationError("ReadinessGate requires at least one ClusterWait")
        for index, wait in enumerate(waits):
            if not isinstance(wait, ClusterWait):
                raise ConfigurationError(f"Wait #{index} must be a ClusterWait, got {type(wait).__name__}")
        if cluster is None:
            raise ConfigurationError("ReadinessGate requires a cluster to resolve services against")

        self._waits: tuple[ClusterWait, ...] = waits
        self._cluster = cluster
        self._cleanup = cleanup
        self._state = GateState.PENDING
        self._current_index: int | None = None
        self.last_result: GateResult | None = None

    @classmethod
    def from_declaration(cls, declaration: "Declaration", cleanup: Callable[[], None] | None = None) -> "ReadinessGate":
        """Build a gate from collected declarations."""
        return cls(declaration.waits, declaration.cluster, cleanup=cleanup)

    @property
    def waits(self) -> tuple[ClusterWait, ...]:
        return self._waits

    @property
    def cluster(self) -> ClusterProvider:
        return self._cluster

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def current_wait(self) -> ClusterWait | None:
        """The wait being polled, or the one that failed."""
        if self._current_index is None:
            return None
        return self._waits[self._current_index]

    def run_guarded(self, action: Callable[[], R]) -> R:
        """Run every wait in order, then the action.

        Args:
            action: Zero-argument callable invoked once after all waits succeed

        Returns:
            Whatever the action returns

        Raises:
            ReadinessTimeoutError: If a wait timed out (remaining waits are skipped)
            TargetNotFoundError: If a wait needs a service the cluster does not know
            RuntimeError: If the gate has already been run
            Exception: Anything the action raises, unchanged
        """
        if self._state != GateState.PENDING:
            raise RuntimeError("ReadinessGate has already run; build a new gate for each guarded action")

        result = GateResult(
            state=GateState.PENDING,
            message="Readiness gate in progress",
            total_waits=len(self._waits),
        )
        self.last_result = result

        with self._lifecycle(result):
            self._await_all(result)

            self._state = GateState.RUNNING
            result.action_invoked = True
            logger.debug("All {} waits ready, running guarded action", len(self._waits))
            value = action()

            self._state = GateState.DONE
            result.message = f"All {len(self._waits)} waits ready; guarded action completed"

        return value

    def _await_all(self, result: GateResult) -> None:
        """Run the waits in order, stopping at the first failure."""
        total = len(self._waits)
        for index, wait in enumerate(self._waits):
            self._state = GateState.WAITING
            self._current_index = index
            logger.info("Wait {}/{}: {}", index + 1, total, wait.description)

            try:
                wait_result = wait.wait_until_ready(self._cluster)
            except Exception as e:
                is_timeout = isinstance(e, ReadinessTimeoutError)
                result.wait_results.append(
                    WaitResult(
                        description=wait.description,
                        status=OutcomeStatus.FAILURE if is_timeout else OutcomeStatus.ERROR,
                        message=str(e),
                        attempts=e.attempts if is_timeout else 0,
                        executed_at=arrow.utcnow().isoformat(),
                    )
                )
                result.message = f"Wait {index + 1}/{total} failed: {e}"
                logger.error("Wait {}/{} failed, skipping {} remaining: {}", index + 1, total, total - index - 1, e)
                raise

            result.wait_results.append(wait_result)
            result.completed_waits += 1

    @contextmanager
    def _lifecycle(self, result: GateResult):
        """Scope of one gate run; releases it exactly once on every exit path."""
        start_time = arrow.utcnow().float_timestamp
        logger.debug("Readiness gate started with {} waits", len(self._waits))
        try:
            yield
        except BaseException as e:
            if self._state == GateState.RUNNING:
                result.message = f"Guarded action raised {type(e).__name__}: {e}"
            self._state = GateState.FAILED
            self._finish(result, start_time)
            self._release(primary=e)
            raise
        else:
            try:
                self._release()
            except Exception as e:
                self._state = GateState.FAILED
                result.message = f"Cleanup failed after the guarded action completed: {type(e).__name__}: {e}"
                self._finish(result, start_time)
                raise
            self._finish(result, start_time)

    def _finish(self, result: GateResult, start_time: float) -> None:
        result.state = self._state
        result.total_execution_time_ms = (arrow.utcnow().float_timestamp - start_time) * 1000
        logger.info("Readiness gate finished in state {} after {:.1f}ms", self._state.value, result.total_execution_time_ms)

    def _release(self, primary: BaseException | None = None) -> None:
        """Run the cleanup, if any.

        A cleanup failure is raised only when nothing else failed. Otherwise the
        primary error keeps propagating and carries a note about the cleanup.
        """
        if self._cleanup is None:
            return
        try:
            self._cleanup()
        except Exception as cleanup_error:
            if primary is None:
                raise
            logger.opt(exception=cleanup_error).error("Cleanup failed after {}: {}", type(primary).__name__, cleanup_error)
            primary.add_note(f"Readiness gate cleanup also failed: {cleanup_error!r}")

    def __str__(self) -> str:
        return f"ReadinessGate(waits={len(self._waits)}, state={self._state.value})"

    def __repr__(self) -> str:
        return f"ReadinessGate(waits={[wait.description for wait in self._waits]}, state={self._state.value})"


def run_guarded(
    waits: Sequence[ClusterWait],
    cluster: ClusterProvider,
    action: Callable[[], R],
    cleanup: Callable[[], None] | None = None,
) -> R:
    """Build a fresh gate and run ``action`` behind it."""
    return ReadinessGate(waits, cluster, cleanup=cleanup).run_guarded(action)


def requires_ready(
    waits: Sequence[ClusterWait],
    cluster: ClusterProvider,
    cleanup: Callable[[], None] | None = None,
) -> Callable[[Callable[..., R]], Callable[..., R]]:
    """Decorator that gates every call of the wrapped function behind the waits.

    The declarations are validated when the decorator is applied. Each call gets
    its own gate, so no state leaks between calls.

    Example:
        @requires_ready([DATABASE], cluster)
        def test_orders_are_persisted():
            ...
    """
    waits = tuple(waits)
    ReadinessGate(waits, cluster)

    def decorator(func: Callable[..., R]) -> Callable[..., R]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> R:
            return ReadinessGate(waits, cluster, cleanup=cleanup).run_guarded(lambda: func(*args, **kwargs))

        return wrapper

    return decorator
