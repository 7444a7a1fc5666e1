# ecochase/main.py
from __future__ import annotations
import argparse
import logging
import sys
from dataclasses import replace

from .sim.config import RUN, SIM, LOOP, PREDATOR_ALGOS, RunConfig
from .sim.errors import ConfigurationError
from .sim.live import LiveSim
from .sim.engine import run_headless
from .sim.metrics import summarize_tick, summarize_run, capture_ticks, append_csv
from .sim.collaborators import path_query


def build_config(args) -> RunConfig:
    cfg = RunConfig.from_yaml(args.config) if args.config else replace(RUN)
    if args.grid is not None: cfg.grid_size = args.grid
    if args.prey is not None: cfg.num_prey = args.prey
    if args.density is not None: cfg.obstacle_density = args.density
    if args.algo is not None: cfg.predator_algo = args.algo
    if args.seed is not None: cfg.seed = args.seed
    return cfg.validate()


def run():
    parser = argparse.ArgumentParser(description="EcoChase: one predator hunting prey on an obstacle grid (BFS / A*)")
    parser.add_argument("--config", type=str, default=None, help="YAML file with run settings")
    parser.add_argument("--grid", type=int, default=None)
    parser.add_argument("--prey", type=int, default=None)
    parser.add_argument("--density", type=float, default=None)
    parser.add_argument("--algo", choices=PREDATOR_ALGOS, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--ticks", type=int, default=SIM.max_ticks)
    parser.add_argument("--csv", type=str, default=SIM.track_csv)
    parser.add_argument("--plot", action="store_true", default=SIM.enable_plot)
    parser.add_argument("--prompt", type=str, default=None, help="build the layout from a text prompt")
    parser.add_argument("--explain", action="store_true", help="narrate the predator's last search")
    parser.add_argument("--finish-on-capture", action="store_true",
                        help="end the run on the tick that catches the last prey")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--ui", action="store_true", help="launch real-time UI")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        cfg = build_config(args)
    except ConfigurationError as e:
        print(f"[error] {e}", file=sys.stderr)
        sys.exit(2)

    if args.ui:
        from .ui.app import run_ui  # pygame only needed here
        run_ui(cfg)
        return

    loop = replace(LOOP, finish_on_capture=args.finish_on_capture)
    try:
        live = LiveSim(cfg, loop=loop)
    except ConfigurationError as e:
        print(f"[error] {e}", file=sys.stderr)
        sys.exit(2)

    try:
        if args.prompt:
            live.request_layout(args.prompt)
            live.wait_pending()
            for w in live.warnings:
                print(f"[warn] {w}", file=sys.stderr)
            print(f"[prompt] {live.config}")

        history = run_headless(live.state, live.rng, args.ticks, live.rewards, live.loop)
        live.state = history[-1]
        for st in history[1:]:
            row = summarize_tick(st)
            print(
                f"Tick {row['tick']:4d} | prey={row['prey_left']:2d} reward={row['reward']:5d} "
                f"predator=({row['predator_x']:2d},{row['predator_y']:2d}) "
                f"target={row['target_id']:2d} path={row['path_len']:3d} {row['phase']}"
            )
            if args.csv:
                append_csv(args.csv, dict(seed=cfg.seed, algorithm=cfg.predator_algo, **row))

        summary = summarize_run(history)
        print(
            f"\nDone: ticks={summary['ticks']} captures={summary['captures']} "
            f"reward={summary['final_reward']} unreachable_ticks={summary['unreachable_ticks']} "
            f"finished={summary['finished']} capture_ticks={capture_ticks(history)}"
        )

        if args.plot:
            from .sim.visualize import snapshot
            snapshot(live.state)

        if args.explain:
            # the last search that actually had a target
            query = next((q for q in map(path_query, reversed(history)) if q is not None), None)
            text = live.explainer.explain(query) if query is not None else "no search to explain"
            print(f"\n[explain] {text}")
    finally:
        live.close()

if __name__ == "__main__":
    run()
