"""Console reporting of solver progress."""

import sys
from dataclasses import dataclass, field
from typing import Any, TextIO


def format_report(state: Any) -> str:
    """Format one line for a solver state.

    Produces output like:
        ||Ax - b||_2 = 1.00000, for x = [0.0000, 1.0000, 0.0000]

    The printed value is the cached squared residual r.r.
    """
    x = ", ".join(f"{float(v):.4f}" for v in state.x)
    return f"||Ax - b||_2 = {float(state.rs):.5f}, for x = [{x}]"


@dataclass
class ResidualReporter:
    """Writes one report line per surfaced step.

    Attributes:
        output_interval: Only report every N calls (default 1 = every call)
        enabled: If False, report() does nothing
        stream: Output stream (default stdout)
    """

    output_interval: int = 1
    enabled: bool = True
    stream: TextIO = field(default_factory=lambda: sys.stdout)

    _call_count: int = field(default=0, init=False, repr=False)

    def report(self, state: Any) -> None:
        """Report a surfaced state."""
        if not self.enabled:
            return

        self._call_count += 1
        if self._call_count % self.output_interval != 0:
            return

        line = format_report(state)
        elapsed = getattr(state, "total", None)
        if isinstance(elapsed, float):
            line += f" | t={elapsed:.3e}s"

        self.stream.write(line + "\n")
        self.stream.flush()
