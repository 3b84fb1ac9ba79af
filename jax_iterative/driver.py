"""Pull loop that drains a cursor chain and records its history."""

from dataclasses import dataclass, field
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from jax_iterative.core.cursor import IterationCursor
from jax_iterative.diagnostics.report import ResidualReporter

log = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of draining a cursor chain.

    Attributes:
        history: Per-step 'iteration' and 'rs' (plus 'elapsed' when timed)
        final: Snapshot of the last surfaced state, or None if none surfaced
        n_steps: Number of surfaced steps
        wall_time: Wall-clock seconds for the whole loop, reporting included
    """

    history: Dict[str, List[Any]] = field(default_factory=dict)
    final: Optional[Any] = None
    n_steps: int = 0
    wall_time: float = 0.0


def run(
    cursor: IterationCursor,
    reporter: Optional[ResidualReporter] = None,
    callback: Optional[Callable[[Any], None]] = None,
) -> RunResult:
    """Call `cursor.step()` until it returns None.

    The cursor must be finite, e.g. wrapped in StopCondition or Take.

    Args:
        cursor: Cursor chain to drain
        reporter: Optional reporter fed every surfaced state
        callback: Optional function called with every surfaced state

    Returns:
        RunResult with history and final snapshot
    """
    history = {"iteration": [], "rs": []}
    result = RunResult(history=history)
    start = time.perf_counter()
    log.info("Starting iteration")

    for state in cursor:
        history["iteration"].append(int(state.iteration))
        history["rs"].append(float(state.rs))
        elapsed = getattr(state, "total", None)
        if isinstance(elapsed, float):
            history.setdefault("elapsed", []).append(elapsed)

        if reporter is not None:
            reporter.report(state)
        if callback is not None:
            callback(state)

        result.final = state.snapshot()
        result.n_steps += 1

    result.wall_time = time.perf_counter() - start
    log.info(f"Finished after {result.n_steps} steps in {result.wall_time:.3e}s")
    return result
