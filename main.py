import argparse
import logging
import sys

import matplotlib.pyplot as plt
import numpy as np

from core.exceptions import ClothSolverError
from parameters.global_parameters import GlobalParameters
from parameters.parameter_io import load_parameters
from runtime.logging_config import setup_logging
from runtime.simulation import Simulation

logger = logging.getLogger("cloth_solver")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cloth Solver Simulation Driver")
    parser.add_argument(
        "-c", "--config", help="Optional JSON/YAML file with simulation parameters"
    )
    parser.add_argument("--width", type=int, default=None, help="Grid width in vertices")
    parser.add_argument(
        "--height", type=int, default=None, help="Grid height in vertices"
    )
    parser.add_argument(
        "-n", "--steps", type=int, default=100, help="Number of update() calls to run"
    )
    parser.add_argument(
        "--integrator",
        choices=["semi_implicit", "implicit"],
        default=None,
        help="Override the integrator (semi_implicit = explicit symplectic Euler).",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for the initial perturbation"
    )
    parser.add_argument(
        "--no-lock",
        action="store_true",
        help="Do not pin the top row of the cloth.",
    )
    parser.add_argument(
        "--rest",
        action="store_true",
        help="Start from the unperturbed rest configuration instead of reset().",
    )
    parser.add_argument(
        "--viz",
        action="store_true",
        help="Show the final cloth state with Matplotlib.",
    )
    parser.add_argument(
        "--viz-save",
        default=None,
        help="Save the final-state visualization to PATH instead of showing it.",
    )
    parser.add_argument(
        "--viz-transparent",
        action="store_true",
        help="Render triangles semi-transparent.",
    )
    parser.add_argument(
        "--viz-no-axes",
        action="store_true",
        help="Remove axes from the plot.",
    )
    parser.add_argument("--log", default=None, help="Optional log file")
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress console output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable verbose debug logging"
    )
    return parser


def main():
    args = build_parser().parse_args()

    global logger
    logger = setup_logging(args.log, quiet=args.quiet, debug=args.debug)

    width, height = 20, 20
    try:
        if args.config:
            global_params, grid = load_parameters(args.config)
            width = int(grid.get("width", width))
            height = int(grid.get("height", height))
        else:
            global_params = GlobalParameters()
    except (OSError, ValueError, ClothSolverError) as exc:
        logger.error(f"Could not load configuration '{args.config}': {exc}")
        sys.exit(1)

    if args.width is not None:
        width = args.width
    if args.height is not None:
        height = args.height
    if args.integrator:
        global_params.set("integrator", args.integrator)
    if args.seed is not None:
        global_params.set("seed", args.seed)
    if args.no_lock:
        global_params.set("lock_top_row", False)
    if args.steps < 0:
        logger.error(f"--steps must be non-negative; got {args.steps}")
        sys.exit(1)

    try:
        sim = Simulation(width, height, global_params)
    except ClothSolverError as exc:
        logger.error(str(exc))
        sys.exit(1)

    if not args.rest:
        sim.reset()

    try:
        for _ in range(args.steps):
            sim.update()
    except FloatingPointError as exc:
        logger.error(f"Simulation diverged at step {sim.step_count + 1}: {exc}")
        sys.exit(1)

    assembly = sim.compute_forces()
    speeds = np.linalg.norm(sim.mesh.velocities, axis=1)
    if not args.quiet:
        print("=== Cloth State ===")
        print(f"Grid:           {sim.width} x {sim.height}")
        print(f"Steps:          {sim.step_count}")
        print(f"Elastic energy: {assembly.energy:.6e}")
        print(f"Surface area:   {sim.mesh.surface_area():.6e}")
        print(f"Max speed:      {float(speeds.max()):.6e}")
        print(f"Jacobian pairs: {len(assembly.dfdx)}")
    logger.info(
        "Simulation complete after %d steps (energy=%.6e)",
        sim.step_count,
        assembly.energy,
    )

    if args.viz or args.viz_save:
        from visualization.plotting import plot_cloth

        show = args.viz_save is None
        plot_cloth(
            sim.triangle_vertices,
            transparent=args.viz_transparent,
            no_axes=args.viz_no_axes,
            title=f"step {sim.step_count}",
            show=show,
        )
        if args.viz_save:
            fig = plt.gcf()
            fig.savefig(args.viz_save, bbox_inches="tight")
            logger.info("Saved visualization to %s", args.viz_save)


if __name__ == "__main__":
    main()
