"""Console rendering of gate results."""

from rich.console import Console
from rich.markup import escape

from cluster_readiness.exceptions import ConfigurationError, ReadinessTimeoutError, TargetNotFoundError

from .enums import GateState, OutcomeStatus
from .models import GateResult

_STATUS_STYLE = {
    OutcomeStatus.SUCCESS.value: "green",
    OutcomeStatus.FAILURE.value: "red",
    OutcomeStatus.ERROR.value: "bold red",
}


def render_gate_result(result: GateResult, console: Console | None = None) -> None:
    """Print one line per wait with its status and timing.

    Args:
        result: The gate result to render
        console: Console to print to, defaults to a new stdout console
    """
    console = console or Console()

    for wait_result in result.wait_results:
        style = _STATUS_STYLE.get(wait_result.status, "yellow")
        timing = f" in {wait_result.execution_time_ms:.0f}ms" if wait_result.execution_time_ms is not None else ""
        console.print(
            f"  [{style}]{wait_result.status:<7}[/{style}] {escape(wait_result.description)}"
            f" ({wait_result.attempts} attempt(s){timing})"
        )

    skipped = result.total_waits - len(result.wait_results)
    if skipped > 0:
        console.print(f"  [dim]{skipped} wait(s) skipped[/dim]")

    if result.state == GateState.DONE:
        console.print(f"[green]All {result.total_waits} waits ready![/green]")
    else:
        console.print(f"[red]Readiness gate {result.state}:[/red] {escape(result.message)}")


def render_failure(error: BaseException, console: Console | None = None) -> None:
    """Print the diagnostic of a readiness failure."""
    console = console or Console()

    if isinstance(error, ReadinessTimeoutError):
        console.print(f"[red]Timed out waiting for {escape(error.description)}[/red] after {error.timeout:g}s")
        console.print(f"  Last outcome: {escape(error.outcome.describe())}")
        console.print(f"  Attempts: {error.attempts}")
    elif isinstance(error, TargetNotFoundError):
        console.print(f"[red]Unknown service:[/red] {escape(error.name)}")
        if error.known:
            console.print(f"  Known services: {escape(', '.join(error.known))}")
    elif isinstance(error, ConfigurationError):
        console.print(f"[red]Invalid readiness configuration:[/red] {escape(str(error))}")
    else:
        console.print(f"[red]{type(error).__name__}:[/red] {escape(str(error))}")
