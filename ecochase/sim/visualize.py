# ecochase/sim/visualize.py
from __future__ import annotations
from typing import Optional
import matplotlib.pyplot as plt

from .models import SimulationState


def snapshot(state: SimulationState, title: str = "", out_path: Optional[str] = None):
    """Static picture of one state: obstacles, latest path, prey, predator."""
    n = state.grid_size
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.set_xlim(-0.5, n - 0.5)
    ax.set_ylim(n - 0.5, -0.5)   # row 0 at the top, like the live view
    ax.set_aspect("equal")
    ax.set_xticks(range(0, n, max(1, n // 10)))
    ax.set_yticks(range(0, n, max(1, n // 10)))
    ax.grid(alpha=0.15)
    # obstacles
    if state.obstacles:
        ox = [o.x for o in state.obstacles]
        oy = [o.y for o in state.obstacles]
        ax.scatter(ox, oy, c="dimgray", marker="s", s=max(4, 2400 // n), label="Obstacle")
    # path
    if state.last_path:
        px = [p.x for p in state.last_path]
        py = [p.y for p in state.last_path]
        if state.path_origin is not None:
            px.insert(0, state.path_origin.x)
            py.insert(0, state.path_origin.y)
        ax.plot(px, py, color="gold", linewidth=2, alpha=0.8, label=f"Path ({state.algorithm})")
    # prey
    if state.prey:
        ax.scatter([p.position.x for p in state.prey], [p.position.y for p in state.prey],
                   c="tab:green", s=60, label="Prey")
        for p in state.prey:
            ax.annotate(str(p.id), (p.position.x, p.position.y), xytext=(4, 4),
                        textcoords="offset points", fontsize=8)
    ax.scatter([state.predator.x], [state.predator.y], c="tab:red", s=90, marker="D", label="Predator")
    ax.set_title(title or f"Tick {state.tick} | reward {state.reward} | {state.phase}")
    ax.legend(loc="upper right", fontsize=8)
    plt.tight_layout()
    if out_path:
        fig.savefig(out_path, dpi=120)
        plt.close(fig)
        return out_path
    plt.show()
    return None
