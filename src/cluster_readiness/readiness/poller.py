"""Bounded polling of a health check.

This module provides the Poller, which repeatedly evaluates one health check
against one target until it succeeds or the timeout elapses. The retry loop is
a ``tenacity.Retrying`` configured as:

- stop once the elapsed time since the first attempt reaches the timeout
- sleep a fixed interval between attempts, skipped once the timeout is reached
- retry on any non-success outcome (failures and errors alike)

A timeout is reported as ``ReadinessTimeoutError`` carrying the most recent
outcome only; earlier attempts are discarded.

Typical Usage:
    poller = Poller()
    result = poller.poll_until_ready(check, target, timeout=30, interval=0.5, description="postgres")
    print(f"Ready after {result.attempts} attempts")
"""

import time
from collections.abc import Callable
from datetime import timedelta
from functools import partial

import arrow
from loguru import logger
from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_delay, wait_fixed

from cluster_readiness.exceptions import ConfigurationError, ReadinessTimeoutError

from .base import HealthCheck
from .models import Outcome, PollResult

Duration = float | int | timedelta


def to_seconds(value: Duration) -> float:
    """Normalize a duration given in seconds or as a timedelta."""
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def _not_ready(outcome: Outcome) -> bool:
    return not outcome.is_success


def _last_outcome(retry_state: RetryCallState) -> Outcome:
    return retry_state.outcome.result()


def _log_retry(description: str, retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome.result()
    logger.debug(
        "'{}' not ready on attempt {}: {} - retrying in {:.2f}s",
        description,
        retry_state.attempt_number,
        outcome.describe(),
        retry_state.next_action.sleep,
    )


class Poller:
    """Runs a health check until it succeeds or a timeout elapses.

    Polling is sleep-based: nothing assumes the target can push readiness
    notifications. The poll always runs to completion on the calling thread.

    Attributes:
        None (stateless apart from the injected sleep function)
    """

    def __init__(self, sleep: Callable[[float], None] = time.sleep):
        """Initialize the poller.

        Args:
            sleep: Function used to sleep between attempts
        """
        self._sleep = sleep

    def poll_until_ready(
        self,
        check: HealthCheck,
        target,
        timeout: Duration,
        interval: Duration,
        description: str = "",
    ) -> PollResult:
        """Evaluate ``check`` against ``target`` until it succeeds.

        At least one attempt is always made, even with a zero timeout.

        Args:
            check: The health check to evaluate
            target: What to pass to the check on every attempt
            timeout: How long to keep trying
            interval: Sleep between two attempts
            description: Human-readable name used in logs and the timeout error

        Returns:
            PollResult: The successful outcome, attempt count and elapsed time

        Raises:
            ReadinessTimeoutError: If no attempt succeeded within the timeout
            ConfigurationError: If timeout or interval is negative
        """
        timeout_s = to_seconds(timeout)
        interval_s = to_seconds(interval)
        if timeout_s < 0:
            raise ConfigurationError(f"Poll timeout must not be negative, got {timeout_s}")
        if interval_s < 0:
            raise ConfigurationError(f"Poll interval must not be negative, got {interval_s}")
        description = description or check.name

        attempts = 0

        def attempt() -> Outcome:
            nonlocal attempts
            attempts += 1
            return check.evaluate(target)

        retrying = Retrying(
            stop=stop_after_delay(timeout_s),
            wait=wait_fixed(interval_s),
            retry=retry_if_result(_not_ready),
            retry_error_callback=_last_outcome,
            before_sleep=partial(_log_retry, description),
            sleep=self._sleep,
        )

        start_time = arrow.utcnow().float_timestamp
        outcome = retrying(attempt)
        execution_time_ms = (arrow.utcnow().float_timestamp - start_time) * 1000

        if not outcome.is_success:
            logger.warning("'{}' timed out after {} attempts: {}", description, attempts, outcome.describe())
            raise ReadinessTimeoutError(description, outcome, timeout_s, attempts) from outcome.cause

        logger.debug("'{}' ready after {} attempts in {:.1f}ms", description, attempts, execution_time_ms)
        return PollResult(outcome=outcome, attempts=attempts, execution_time_ms=execution_time_ms)
