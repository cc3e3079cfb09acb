from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Protocol, Sequence, Type

from .errors import InvalidConfiguration, SelectionExhausted
from .models import RandomSource
from .worker import Worker

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    def decide(self, workers: Sequence[Worker], rng: RandomSource) -> List[str]: ...


@dataclass
class RoundRobinScheduler:
    """Every worker, every step, in registration order. Draws nothing."""

    def decide(self, workers: Sequence[Worker], rng: RandomSource) -> List[str]:
        return [w.worker_id for w in workers]


@dataclass
class WeightedScheduler:
    """Weighted sampling without replacement over a shrinking interval.

    Each worker owns a fixed share `weight / total` of [0, 1]. A round draws
    `p`, scales it into the space still unclaimed, and walks the workers not
    yet chosen (registration order) until their cumulative share reaches the
    scaled draw. The winner's share is removed from the space; shares are
    never renormalised.
    """

    def decide(self, workers: Sequence[Worker], rng: RandomSource) -> List[str]:
        total = sum(w.weight for w in workers)
        if workers and total <= 0:
            raise InvalidConfiguration("Total worker weight is zero")

        share: Dict[str, float] = {w.worker_id: w.weight / total for w in workers}
        remaining: List[Worker] = list(workers)
        space = 1.0
        order: List[str] = []

        while remaining:
            candidates = [w for w in remaining if share[w.worker_id] > 0.0]
            if not candidates:
                # Only zero-weight workers left; they still act, last.
                order.extend(w.worker_id for w in remaining)
                break

            p = rng()
            target = p * space
            chosen = None
            cumulative = 0.0
            for i, w in enumerate(candidates):
                cumulative += share[w.worker_id]
                if i == len(candidates) - 1:
                    # The last candidate's boundary is the whole remaining space.
                    cumulative = space
                if cumulative >= target:
                    chosen = w
                    break
            if chosen is None:
                raise SelectionExhausted(
                    f"Worker draw p={p!r} (scaled {target!r}) selected nothing; "
                    f"{len(candidates)} workers left, space={space!r}"
                )

            order.append(chosen.worker_id)
            remaining.remove(chosen)
            space -= share[chosen.worker_id]

        return order


SCHEDULERS: Dict[str, Type] = {
    "weighted": WeightedScheduler,
    "round_robin": RoundRobinScheduler,
}


def make_scheduler(name: str) -> Scheduler:
    try:
        return SCHEDULERS[name]()
    except KeyError:
        raise InvalidConfiguration(
            f"Unknown scheduler '{name}'; expected one of {sorted(SCHEDULERS)}"
        ) from None
