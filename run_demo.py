from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from assembly_line.config import Config
from assembly_line.scheduler import SCHEDULERS
from assembly_line.sim import AssemblyLine


def format_statistics(line: AssemblyLine) -> str:
    lines: List[str] = [" Belt statistics"]
    for kind in line.registry:
        if kind.empty:
            label = "Empty slot was counted off"
        elif line.registry.is_finished(kind.kind_id):
            label = f"Finished component {kind.kind_id} was counted off"
        else:
            label = f"Component {kind.kind_id} was untouched"
        lines.append(f"\t{label:<40}{kind.collected} times")
    if line.registry.empty_kind is None:
        lines.append(f"\t{'Empty slot was counted off':<40}{line.registry.empty_exits} times")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", type=str, default="example_config.yaml")
    ap.add_argument(
        "--reference",
        action="store_true",
        help="Ignore --config and run the built-in reference line (A/B -> P, six workers).",
    )
    ap.add_argument("--steps", type=int, default=None, help="Override simulation.steps from the config.")
    ap.add_argument("--seed", type=int, default=None, help="Override simulation.seed from the config.")
    ap.add_argument(
        "--scheduler",
        type=str,
        default=None,
        choices=sorted(SCHEDULERS),
        help="Worker activation order (overrides simulation.scheduler).",
    )
    ap.add_argument(
        "--viz",
        type=str,
        default="pygame",
        choices=["pygame", "mpl"],
        help="Visualization backend: pygame (recommended) or mpl (matplotlib).",
    )
    ap.add_argument("--subframes", type=int, default=8)
    ap.add_argument("--interval-ms", type=int, default=60)
    ap.add_argument(
        "--step-ms",
        type=int,
        default=None,
        help="(pygame only) Real-time ms per simulation step. Default: interval_ms * subframes.",
    )
    ap.add_argument(
        "--fps",
        type=int,
        default=60,
        help="(pygame only) Target FPS for rendering.",
    )
    ap.add_argument("--no-viz", action="store_true")
    ap.add_argument("--log-level", type=str, default="WARNING")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = Config.reference() if args.reference else Config.from_yaml(args.config)
    if args.steps is not None:
        cfg.sim.steps = args.steps
    if args.seed is not None:
        cfg.sim.seed = args.seed
    if args.scheduler is not None:
        cfg.sim.scheduler = args.scheduler

    line = AssemblyLine.from_config(cfg)

    if args.no_viz:
        line.run(cfg.sim.steps)
        print(format_statistics(line))
        print(f"\nsteps={line.tick}")
    else:
        if args.viz == "mpl":
            # Import lazily so pygame users don't need matplotlib installed.
            from assembly_line.viz import run_visualization

            run_visualization(
                line,
                max_steps=cfg.sim.steps,
                subframes=args.subframes,
                interval_ms=args.interval_ms,
            )
        else:
            from assembly_line.viz_pygame import run_visualization_pygame

            step_ms = args.step_ms if args.step_ms is not None else args.interval_ms * args.subframes
            run_visualization_pygame(
                line,
                max_steps=cfg.sim.steps,
                step_ms=step_ms,
                fps=args.fps,
                window_title=f"Assembly Line (pygame) | scheduler={cfg.sim.scheduler}",
            )
        print(format_statistics(line))


if __name__ == "__main__":
    main()
