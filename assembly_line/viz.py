from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

import matplotlib
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.figure import Figure

from .models import FrameData, Slot
from .sim import AssemblyLine


def kind_colors(line: AssemblyLine) -> Dict[str, Tuple[float, float, float, float]]:
    cmap = matplotlib.colormaps["tab10"]
    return {k.kind_id: cmap(i % 10) for i, k in enumerate(line.registry)}


def worker_offsets(line: AssemblyLine) -> Dict[str, Tuple[float, float]]:
    """Draw position per worker: alternate above/below its slot."""
    seen: Dict[int, int] = {}
    out: Dict[str, Tuple[float, float]] = {}
    for wid, w in line.workers.items():
        k = seen.get(w.pos, 0)
        seen[w.pos] = k + 1
        row = 1.1 + 0.7 * (k // 2)
        out[wid] = (float(w.pos), row if k % 2 == 0 else -row)
    return out


def _hands_label(hands: Tuple[Slot, ...]) -> str:
    return "|".join(h if h is not None else "-" for h in hands)


def build_view(
    line: AssemblyLine,
    max_steps: int = 100,
    subframes: int = 8,
) -> Tuple[Figure, Callable[[int], tuple]]:
    """Lay out the belt and return (figure, per-frame update function).

    The first subframe of every step runs `line.step()`; the first half of
    the step slides the pre-shift contents toward the exit, the second half
    shows the belt after every worker acted.
    """
    n = line.belt.length
    colors = kind_colors(line)
    w_xy = worker_offsets(line)

    fig, ax = plt.subplots(figsize=(max(6, n * 1.4), 5))
    ax.set_aspect("equal")
    ax.set_xlim(-1, n + 1)
    ax.set_ylim(-3, 3)
    ax.axis("off")

    # Belt slots
    for i in range(n):
        ax.add_patch(plt.Rectangle((i - 0.45, -0.45), 0.9, 0.9, fill=False, linewidth=1.5))
    ax.text(0, -0.7, "in", ha="center", va="top", fontsize=8)
    ax.text(n - 1, -0.7, "out", ha="center", va="top", fontsize=8)

    item_sc = ax.scatter([], [], s=500, marker="o")
    item_labels = [ax.text(0, 0, "", ha="center", va="center", fontsize=10) for _ in range(n)]

    worker_text: Dict[str, object] = {}
    for wid, (x, y) in w_xy.items():
        ax.plot([x, x], [y * 0.55, 0.45 if y > 0 else -0.45], linewidth=0.8, alpha=0.4)
        worker_text[wid] = ax.text(x, y, wid, ha="center", va="center", fontsize=8, family="monospace")

    tally_text = ax.text(0.01, 0.99, "", transform=ax.transAxes, ha="left", va="top", fontsize=9)
    alarm_text = ax.text(0.01, 0.01, "", transform=ax.transAxes, ha="left", va="bottom", fontsize=8)

    current: Dict[str, Optional[FrameData]] = {"frame": None}

    def _draw_items(items: List[Tuple[float, str]]) -> None:
        if items:
            item_sc.set_offsets([(x, 0.0) for x, _ in items])
            item_sc.set_facecolors([colors[k] for _, k in items])
        else:
            item_sc.set_offsets([(float("nan"), float("nan"))])
        for i, label in enumerate(item_labels):
            if i < len(items):
                label.set_position((items[i][0], 0.0))
                label.set_text(items[i][1])
            else:
                label.set_text("")

    def update(frame_idx: int):
        step_idx = frame_idx // subframes
        sub = frame_idx % subframes

        if sub == 0 and step_idx < max_steps:
            current["frame"] = line.step()
        frame = current["frame"]
        if frame is None:
            return (item_sc, tally_text, alarm_text)

        alpha = (sub + 1) / subframes
        if alpha <= 0.5:
            dx = min(1.0, alpha * 2.0) * line.shift_per_step
            items = [(i + dx, k) for i, k in enumerate(frame.belt_start) if k is not None and i + dx <= n - 0.5]
        else:
            items = [(float(i), k) for i, k in enumerate(frame.belt_end) if k is not None]
        _draw_items(items)

        for wid, w in line.workers.items():
            txt = f"{wid} [{_hands_label(tuple(w.hands))}]"
            if w.is_busy():
                txt += f" {w.assembling}:{w.remaining}"
            worker_text[wid].set_text(txt)  # type: ignore[attr-defined]

        counts = line.collected_counts()
        tally_text.set_text("  ".join(f"{k}={v}" for k, v in counts.items()))
        alarm_text.set_text("\n".join(frame.alarms[-4:]))
        ax.set_title(f"Assembly line  step={frame.tick}")
        return (item_sc, tally_text, alarm_text)

    return fig, update


def run_visualization(
    line: AssemblyLine,
    max_steps: int = 100,
    subframes: int = 8,
    interval_ms: int = 50,
) -> None:
    """Run a realtime matplotlib animation.

    - subframes: how many animation frames per simulation step.
    - interval_ms: milliseconds per animation frame.
    """
    fig, update = build_view(line, max_steps=max_steps, subframes=subframes)
    total_frames = max_steps * subframes
    anim = FuncAnimation(fig, update, frames=total_frames, interval=interval_ms, blit=False, repeat=False)
    plt.show()
