from __future__ import annotations

import logging
from typing import Dict

from .errors import SelectionExhausted
from .models import ItemKind, RandomSource
from .registry import ItemRegistry

logger = logging.getLogger(__name__)


class ItemGenerator:
    """Weighted choice of the next kind to put on the belt's entry slot.

    The probability space [0, 1] is split into consecutive intervals, one per
    kind with non-zero weight, in registration order:

        0.0 | A | B | NULL | 1.0

    A draw `p` selects the first kind whose cumulative probability is >= p.
    The last interval is closed at exactly 1.0 so accumulated rounding error
    can never leave a draw unassigned.
    """

    def __init__(self, registry: ItemRegistry, rng: RandomSource) -> None:
        self.registry = registry
        self.rng = rng
        self._generated: Dict[str, int] = {k.kind_id: 0 for k in registry}

    def select(self, p: float) -> ItemKind:
        candidates = [k for k in self.registry if k.probability > 0.0]
        cumulative = 0.0
        for i, kind in enumerate(candidates):
            cumulative += kind.probability
            if i == len(candidates) - 1:
                cumulative = 1.0
            if cumulative >= p:
                return kind
        raise SelectionExhausted(
            f"Item draw p={p!r} selected nothing from {len(candidates)} candidate kinds"
        )

    def next(self) -> ItemKind:
        p = self.rng()
        kind = self.select(p)
        self._generated[kind.kind_id] = self._generated.get(kind.kind_id, 0) + 1
        logger.debug("generated %s (p=%.4f)", kind.kind_id, p)
        return kind

    def generated_counts(self) -> Dict[str, int]:
        return {k.kind_id: self._generated.get(k.kind_id, 0) for k in self.registry}
