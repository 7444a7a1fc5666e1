#!/usr/bin/env python3
"""
Analyze run CSVs produced by RunCsvLogger (UI) or `ecochase.main --csv` (headless).

Features:
  - --session latest|<id> filters to a single UI session (so you never need to delete runs/)
  - Saves timestamped CSV exports and PNG plots under --outdir
  - Tick plot:
      (1) Reward per tick (one line per run)
      (2) Prey remaining per tick
      (3) Path length per tick (0 = no move / unreachable)
  - Runs plot: final reward and ticks-to-finish per algorithm
  - --launch opens the EcoChase UI first (optionally with --algo/--grid/--prey/--density/--config)
    and then analyzes the session it just wrote
Usage examples:
  python analyze_runs.py --ticks runs/ui_ticks.csv \
                         --runs runs/ui_runs.csv \
                         --outdir reports \
                         --tag demo \
                         --session latest
  python analyze_runs.py --launch --algo BFS --grid 30 --tag bfs30
"""
import argparse
import os
import subprocess
import sys
import time
import pandas as pd

# Use non-interactive backend for headless operation
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

TICK_NUMERIC = ("run_index", "seed", "grid_size", "tick", "prey_left", "captured", "reward",
                "predator_x", "predator_y", "target_id", "path_len")
RUN_NUMERIC = ("run_index", "seed", "grid_size", "obstacles", "ticks", "captures",
               "unreachable_ticks", "final_reward", "finished")


# ------------------------- utilities -------------------------
def ensure_dir(p: str) -> None:
    os.makedirs(p, exist_ok=True)

def timestamp(tag: str | None = None) -> str:
    t = time.strftime("%Y%m%d_%H%M%S")
    return f"{t}__{tag}" if tag else t

def exists(path: str | None) -> bool:
    return bool(path and os.path.exists(path))

def coerce(df: pd.DataFrame, cols) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


# ------------------------- loading ---------------------------
def load_csvs(ticks_path: str, runs_path: str | None):
    if not exists(ticks_path):
        print(
            "\n[ERROR] Tick CSV not found.\n"
            f"  Expected: {ticks_path}\n"
            "Hints:\n"
            "  • Start a run in the UI (Space) and let at least one tick pass.\n"
            "  • Or run headless: python -m ecochase.main --csv runs/headless_ticks.csv\n",
            file=sys.stderr
        )
        sys.exit(1)

    df_ticks = coerce(pd.read_csv(ticks_path), TICK_NUMERIC)
    df_runs = coerce(pd.read_csv(runs_path), RUN_NUMERIC) if exists(runs_path) else None
    return df_ticks, df_runs


def latest_session_id(df: pd.DataFrame) -> str | None:
    """Return the last session_id in file order (used by --session latest)."""
    if "session_id" not in df.columns or len(df) == 0:
        return None
    s = df["session_id"].dropna()
    return s.iloc[-1] if len(s) else None


def run_keys(df: pd.DataFrame) -> list[str]:
    """Columns that identify one run inside a tick CSV."""
    keys = [k for k in ("session_id", "run_index") if k in df.columns]
    if not keys and "seed" in df.columns:
        keys = ["seed"]
    return keys


# ------------------------- summaries -------------------------
def summarize_ticks(df_ticks: pd.DataFrame) -> pd.DataFrame:
    """One row per run rebuilt from tick rows (works for headless CSVs too)."""
    keys = run_keys(df_ticks)
    if not keys:
        df_ticks = df_ticks.assign(run=0)
        keys = ["run"]
    agg = dict(ticks=("tick", "max"), final_reward=("reward", "last"),
               captures=("captured", "max"), prey_left=("prey_left", "last"))
    if "algorithm" in df_ticks.columns:
        agg["algorithm"] = ("algorithm", "first")
    if "phase" in df_ticks.columns:
        agg["phase"] = ("phase", "last")
    d = (df_ticks.sort_values("tick")
                 .groupby(keys, as_index=False)
                 .agg(**agg))
    return d


# ------------------------- plotting --------------------------
def plot_ticks(df_ticks: pd.DataFrame, outdir: str, tag: str | None):
    ensure_dir(outdir)
    fig, ax = plt.subplots(3, 1, figsize=(10, 11), sharex=True)
    keys = run_keys(df_ticks)
    groups = df_ticks.groupby(keys) if keys else [("all", df_ticks)]

    for key, sub in groups:
        sub = sub.sort_values("tick")
        label = "run " + "/".join(str(k) for k in (key if isinstance(key, tuple) else (key,)))
        if "algorithm" in sub.columns and len(sub):
            label += f" ({sub['algorithm'].iloc[0]})"
        ax[0].plot(sub["tick"], sub["reward"], linewidth=1.6, label=label)
        ax[1].step(sub["tick"], sub["prey_left"], where="post", linewidth=1.4, label=label)
        if "path_len" in sub.columns:
            ax[2].plot(sub["tick"], sub["path_len"], linewidth=1.0, alpha=0.8, label=label)

    ax[0].set_ylabel("Cumulative reward")
    ax[0].legend(loc="best", ncols=2, fontsize=8)
    ax[0].grid(alpha=0.25)
    ax[1].set_ylabel("Prey remaining")
    ax[1].grid(alpha=0.25)
    ax[2].set_ylabel("Path length")
    ax[2].set_xlabel("Tick")
    ax[2].grid(alpha=0.25)

    fig.tight_layout()
    png = os.path.join(outdir, f"tick_trends_{timestamp(tag)}.png")
    fig.savefig(png, dpi=160)
    plt.close(fig)
    print(f"[OK] Saved {png}")


def plot_runs(df_runs: pd.DataFrame, outdir: str, tag: str | None):
    if df_runs is None or len(df_runs) == 0:
        print("[INFO] No run rows; skipping run comparison plot.")
        return
    if "algorithm" not in df_runs.columns:
        print("[WARN] Run rows have no algorithm column; skipping run comparison plot.")
        return

    g = df_runs.groupby("algorithm", as_index=False).agg(
        final_reward=("final_reward", "mean"), ticks=("ticks", "mean"), n=("ticks", "size"))

    fig, ax = plt.subplots(1, 2, figsize=(10, 4))
    ax[0].bar(g["algorithm"], g["final_reward"], color="tab:orange")
    ax[0].set_title("Mean final reward")
    ax[1].bar(g["algorithm"], g["ticks"], color="tab:blue")
    ax[1].set_title("Mean ticks per run")
    for a in ax:
        a.grid(alpha=0.25, axis="y")
    fig.tight_layout()
    png = os.path.join(outdir, f"run_comparison_{timestamp(tag)}.png")
    fig.savefig(png, dpi=160)
    plt.close(fig)
    print(f"[OK] Saved {png}")


# ------------------------- exports ---------------------------
def export_csv(df: pd.DataFrame, outdir: str, base: str, tag: str | None) -> str:
    ensure_dir(outdir)
    fname = f"{base}_{timestamp(tag)}.csv"
    path = os.path.join(outdir, fname)
    df.to_csv(path, index=False)
    print(f"[OK] Wrote {path}")
    return path


# ------------------------- launching ------------------------
def ui_command(args) -> list[str]:
    """Command line for a UI session with the run settings given to this script."""
    cmd = [sys.executable, "-m", "ecochase.main", "--ui"]
    if args.config:
        cmd += ["--config", args.config]
    for flag, value in (("--algo", args.algo), ("--grid", args.grid),
                        ("--prey", args.prey), ("--density", args.density)):
        if value is not None:
            cmd += [flag, str(value)]
    return cmd

def default_tag(args) -> str:
    """bfs_g30_p5 style label built from whatever run settings were passed."""
    parts = []
    if args.algo:
        parts.append(args.algo.replace("*", "star").lower())
    if args.grid is not None:
        parts.append(f"g{args.grid}")
    if args.prey is not None:
        parts.append(f"p{args.prey}")
    if args.density is not None:
        parts.append(f"d{args.density:g}")
    return "_".join(parts)

def launch_ui(args) -> int:
    cmd = ui_command(args)
    print("[launcher] Starting UI:", " ".join(cmd))
    ret = subprocess.call(cmd)
    if ret != 0:
        print(f"[launcher] UI exited with code {ret}", file=sys.stderr)
    return ret


# ------------------------- main ------------------------------
def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--ticks", type=str, default="runs/ui_ticks.csv",
                    help="Path to the per-tick CSV")
    ap.add_argument("--runs", type=str, default="runs/ui_runs.csv",
                    help="Path to the per-run CSV written by the UI (pass '' to disable)")
    ap.add_argument("--outdir", type=str, default="reports",
                    help="Output directory for plots and exported CSVs")
    ap.add_argument("--tag", type=str, default="",
                    help="Optional label to append to filenames (e.g., 'bfs_dense')")
    ap.add_argument("--session", type=str, default="",
                    help="Session ID to analyze; use 'latest' to pick the most recent session automatically.")
    ap.add_argument("--launch", action="store_true",
                    help="Run the EcoChase UI first, then analyze the session it wrote")
    ap.add_argument("--config", type=str, default=None, help="YAML run settings for --launch")
    ap.add_argument("--algo", choices=("BFS", "A*"), default=None, help="Predator algorithm for --launch")
    ap.add_argument("--grid", type=int, default=None, help="Grid size for --launch")
    ap.add_argument("--prey", type=int, default=None, help="Prey count for --launch")
    ap.add_argument("--density", type=float, default=None, help="Obstacle density for --launch")
    args = ap.parse_args()

    if args.launch:
        launch_ui(args)
        args.session = args.session or "latest"
        args.tag = args.tag or default_tag(args)

    df_ticks_raw, df_runs_raw = load_csvs(args.ticks, args.runs or None)
    df_ticks = df_ticks_raw.copy()
    df_runs = df_runs_raw.copy() if df_runs_raw is not None else None

    if args.session:
        if "session_id" not in df_ticks.columns:
            print("[WARN] --session provided but tick CSV has no session_id; ignoring.")
        else:
            sid = args.session
            if sid == "latest":
                sid = latest_session_id(df_ticks_raw)
            if sid:
                df_ticks = df_ticks[df_ticks["session_id"] == sid].copy()
                if df_runs is not None and "session_id" in df_runs.columns:
                    df_runs = df_runs[df_runs["session_id"] == sid].copy()
                print(f"[OK] Filtering analysis to session_id={sid}")
            else:
                print("[WARN] Could not resolve latest session_id; analyzing all data.")

    print(f"[INFO] Tick rows after filter: {len(df_ticks)}")
    tag = args.tag or None

    summary = summarize_ticks(df_ticks)
    export_csv(summary, args.outdir, base="run_summary", tag=tag)
    plot_ticks(df_ticks, args.outdir, tag)
    plot_runs(df_runs if df_runs is not None and len(df_runs) else summary, args.outdir, tag)

    print(f"\nDone. Outputs are in: {args.outdir}")

if __name__ == "__main__":
    main()
