from __future__ import annotations

"""pygame based realtime visualization.

Same split as the matplotlib viewer:

- The *line* (`AssemblyLine`) owns all state and step progression.
- The *viewer* only renders frames and calls `line.step()`.

Dark background, the belt as a row of slots with its input on the left,
workers drawn above and below the slot they reach with their two hands and
assembly countdown, and the running exit tally underneath.
"""

from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Tuple
import time
from collections import deque

from .models import FrameData
from .sim import AssemblyLine

Color = Tuple[int, int, int]

PALETTE: List[Color] = [
    (0, 200, 255),
    (255, 200, 0),
    (120, 120, 120),
    (0, 255, 120),
    (255, 100, 180),
    (180, 120, 255),
    (255, 140, 60),
    (140, 220, 255),
]


@dataclass
class PygameVizConfig:
    slot_size: int = 64
    margin: int = 60
    worker_gap: int = 18
    log_height: int = 120


def run_visualization_pygame(
    line: AssemblyLine,
    *,
    max_steps: int = 100,
    step_ms: int = 400,
    fps: int = 60,
    cfg: Optional[PygameVizConfig] = None,
    window_title: str = "Assembly Line (pygame)",
) -> None:
    """Run a realtime pygame animation.

    Parameters
    ----------
    line:
        The simulator instance.
    max_steps:
        Max simulation steps to run (close window earlier to stop).
    step_ms:
        Real-time duration of one simulation step.
    fps:
        Target frames-per-second for rendering.
    cfg:
        Visual config (slot size, margins, ...).
    """

    try:
        import pygame  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError(
            "pygame is required for the pygame visualization. "
            "Install it with: pip install pygame"
        ) from e

    cfg = cfg or PygameVizConfig()
    size = cfg.slot_size
    margin = cfg.margin
    log_h = cfg.log_height
    n = line.belt.length

    # Worker rows: alternate above/below their slot.
    rows_at: Dict[int, int] = {}
    worker_row: Dict[str, int] = {}
    for wid, w in line.workers.items():
        k = rows_at.get(w.pos, 0)
        rows_at[w.pos] = k + 1
        worker_row[wid] = (k // 2 + 1) * (-1 if k % 2 == 0 else 1)
    rows_each_side = max([abs(r) for r in worker_row.values()] + [1])

    pygame.init()

    box_h = size // 2 + cfg.worker_gap
    belt_y = margin + rows_each_side * box_h
    screen_w = n * size + margin * 2
    screen_h = belt_y + size + rows_each_side * box_h + margin + log_h
    screen = pygame.display.set_mode((screen_w, screen_h))
    pygame.display.set_caption(window_title)

    clock = pygame.time.Clock()
    font = pygame.font.SysFont("Arial", 16)
    font_small = pygame.font.SysFont("Arial", 12)

    step_duration = max(1, step_ms) / 1000.0
    colors: Dict[str, Color] = {k.kind_id: PALETTE[i % len(PALETTE)] for i, k in enumerate(line.registry)}
    alarms_history: Deque[str] = deque(maxlen=8)

    frame: Optional[FrameData] = None
    step_start_time = time.time()
    paused = False

    def _slot_center_px(x_slot: float) -> Tuple[float, float]:
        return (margin + x_slot * size + size / 2.0, belt_y + size / 2.0)

    def _advance() -> FrameData:
        fr = line.step()
        if fr.alarms:
            alarms_history.extend(fr.alarms)
        return fr

    def _draw_item(kind_id: str, x_slot: float) -> None:
        px, py = _slot_center_px(x_slot)
        col = colors.get(kind_id, (200, 200, 200))
        pygame.draw.circle(screen, col, (int(px), int(py)), size // 3)
        surf = font.render(kind_id, True, (0, 0, 0))
        screen.blit(surf, surf.get_rect(center=(int(px), int(py))))

    running = True
    while running:
        now = time.time()

        # ---- events ----
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    paused = not paused
                elif event.key == pygame.K_n:
                    # single-step when paused
                    if paused and frame is not None and frame.tick < max_steps - 1:
                        frame = _advance()
                        step_start_time = now

        # ---- step update ----
        if frame is None:
            if max_steps <= 0:
                running = False
                continue
            frame = _advance()
            step_start_time = now

        if not paused:
            elapsed = now - step_start_time
            if elapsed >= step_duration:
                if frame.tick >= max_steps - 1:
                    # Stop automatically after max_steps
                    running = False
                    continue
                frame = _advance()
                step_start_time = now
                elapsed = 0.0
        else:
            elapsed = now - step_start_time

        progress = max(0.0, min(1.0, elapsed / step_duration))

        # ---- render ----
        screen.fill((30, 30, 30))

        for i in range(n):
            rect = pygame.Rect(margin + i * size, belt_y, size, size)
            pygame.draw.rect(screen, (90, 90, 90), rect, 2)
        in_surf = font_small.render("IN", True, (150, 150, 150))
        screen.blit(in_surf, (margin - 24, belt_y + size // 2 - 6))
        out_surf = font_small.render("OUT", True, (150, 150, 150))
        screen.blit(out_surf, (margin + n * size + 4, belt_y + size // 2 - 6))

        # First half of the step: slide pre-shift contents. Second half: result.
        if progress < 0.5:
            dx = progress * 2.0 * line.shift_per_step
            for i, kind_id in enumerate(frame.belt_start):
                if kind_id is not None and i + dx <= n - 0.5:
                    _draw_item(kind_id, i + dx)
        else:
            for i, kind_id in enumerate(frame.belt_end):
                if kind_id is not None:
                    _draw_item(kind_id, float(i))

        # workers
        for wid, w in line.workers.items():
            row = worker_row[wid]
            cx = margin + w.pos * size + size // 2
            if row < 0:
                top = belt_y + row * box_h
            else:
                top = belt_y + size + (row - 1) * box_h + cfg.worker_gap
            rect = pygame.Rect(cx - size // 2 + 4, top, size - 8, size // 2)
            color = (255, 80, 80) if w.blocked else ((255, 200, 100) if w.is_busy() else (80, 255, 80))
            pygame.draw.rect(screen, color, rect, 2)

            hands = "|".join(h if h is not None else "-" for h in w.hands)
            label = font_small.render(f"{wid} {hands}", True, (220, 220, 220))
            screen.blit(label, label.get_rect(center=(rect.centerx, rect.centery - 7)))
            if w.is_busy():
                busy = font_small.render(f"{w.assembling} {w.remaining}", True, color)
                screen.blit(busy, busy.get_rect(center=(rect.centerx, rect.centery + 8)))

        # UI text
        tally = "  ".join(f"{k}={v}" for k, v in line.collected_counts().items())
        info = f"Step: {frame.tick} | Out: {tally}"
        if paused:
            info += " | PAUSED (SPACE resume, N step)"
        screen.blit(font.render(info, True, (255, 255, 255)), (10, screen_h - log_h + 10))

        # alarms/logs
        y0 = screen_h - log_h + 32
        for i, msg in enumerate(list(alarms_history)[-5:]):
            surf = font_small.render(msg, True, (150, 150, 150))
            screen.blit(surf, (10, y0 + i * 16))

        pygame.display.flip()
        clock.tick(max(1, fps))

    pygame.quit()
