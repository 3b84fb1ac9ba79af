#!/usr/bin/env python
# scripts/run_solve.py
"""CLI entry point for driving a CG solve from a YAML config."""
import argparse
import logging
import sys
from pathlib import Path

import jax

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from jax_iterative.config import SolveConfig, load_config
from jax_iterative.diagnostics import (
    ResidualReporter,
    load_checkpoint,
    plot_convergence,
    save_history,
)
from jax_iterative.driver import run
from jax_iterative.methods.cg import ConjugateGradientState
from jax_iterative.problems import system_from_config
from jax_iterative.utils import (
    Checkpointed,
    StopCondition,
    Stride,
    Take,
    Timed,
    any_of,
    residual_below,
    terminal,
)


def build_cursor(problem, solver: SolveConfig, resume: bool = False):
    """Assemble the wrapper chain for a solve.

    Order, innermost first: CG -> Timed -> Checkpointed -> Stride -> Take -> StopCondition.
    Timed sits directly on CG so checkpoint writes are not counted as solve time.
    Returns the outer cursor and the CG state it drives.
    """
    metadata = {}
    if resume:
        if solver.checkpoint is None:
            raise ValueError("--resume needs a checkpoint path")
        snapshot, metadata = load_checkpoint(solver.checkpoint)
        logging.info(f"Resuming from {solver.checkpoint} at iteration {snapshot.iteration}")
        cg = ConjugateGradientState.from_snapshot(snapshot, breakdown_tol=solver.breakdown_tol)
    else:
        cg = ConjugateGradientState(problem, breakdown_tol=solver.breakdown_tol)

    cursor = Timed(cg)
    if solver.checkpoint is not None:
        cursor = Checkpointed(cursor, solver.checkpoint, every=solver.checkpoint_every,
                              metadata=metadata)
    if solver.stride > 1:
        cursor = Stride(cursor, solver.stride)
    cursor = Take(cursor, solver.max_iter)
    return StopCondition(cursor, any_of(residual_below(solver.tol), terminal())), cg


def main():
    parser = argparse.ArgumentParser(
        description="Run a Conjugate Gradient solve",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s examples/cases/reference.yaml
  %(prog)s examples/cases/laplacian_1d.yaml --stride 5 --history outputs/h.csv
  %(prog)s examples/cases/laplacian_1d.yaml --checkpoint outputs/cg.h5 --resume
        """
    )
    parser.add_argument('config', type=Path, help="YAML run configuration")
    parser.add_argument('--tol', type=float, help="Override solver.tol")
    parser.add_argument('--max-iter', type=int, help="Override solver.max_iter")
    parser.add_argument('--stride', type=int, help="Override solver.stride")
    parser.add_argument('--checkpoint', help="Override solver.checkpoint")
    parser.add_argument('--resume', action='store_true',
                        help="Resume from the checkpoint instead of x0 = 0")
    parser.add_argument('--history', type=Path,
                        help="Write per-step history (.csv or .json)")
    parser.add_argument('--plot', type=Path, help="Directory for convergence plot")
    parser.add_argument('--no-report', dest='report', action='store_false', default=True,
                        help="Do not print a line per step")
    parser.add_argument('--single-precision', action='store_true',
                        help="Keep JAX's default float32")
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if not args.single_precision:
        jax.config.update("jax_enable_x64", True)

    try:
        config = load_config(args.config)
        overrides = {
            'tol': args.tol,
            'max_iter': args.max_iter,
            'stride': args.stride,
            'checkpoint': args.checkpoint,
        }
        solver_config = dict(config.get('solver') or {})
        solver_config.update({k: v for k, v in overrides.items() if v is not None})
        solver = SolveConfig.from_dict(solver_config)
        problem = None if args.resume else system_from_config(config['problem'])
        cursor, cg = build_cursor(problem, solver, resume=args.resume)
    except (FileNotFoundError, KeyError, ValueError) as e:
        logging.error(str(e))
        return 2

    reporter = ResidualReporter(output_interval=solver.report_interval,
                                enabled=args.report)
    result = run(cursor, reporter=reporter)

    # The step that met the tolerance is not surfaced; read it from the CG state
    print(f"\nSurfaced steps: {result.n_steps}  iteration: {cg.iteration}  "
          f"rs: {float(cg.rs):.3e}  wall: {result.wall_time:.3e}s")
    if cg.breakdown:
        logging.error(f"Numerical breakdown at iteration {cg.iteration}")

    if args.history is not None and result.n_steps > 0:
        fmt = 'json' if args.history.suffix == '.json' else 'csv'
        save_history(result.history, args.history, format=fmt)
        logging.info(f"History written to {args.history}")

    if args.plot is not None and result.n_steps > 0:
        plot_convergence(result.history, save_dir=str(args.plot),
                         title=config.get('name', 'Conjugate Gradient'))
        logging.info(f"Plot written to {args.plot}")

    return 1 if cg.breakdown else 0


if __name__ == '__main__':
    sys.exit(main())
