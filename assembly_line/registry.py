from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .errors import InvalidConfiguration
from .models import ItemKind, Recipe

logger = logging.getLogger(__name__)


def _contains(have: Counter, need: Counter) -> bool:
    """Multiset subset test: every count in `need` is covered by `have`."""
    return all(have[k] >= n for k, n in need.items())


class ItemRegistry:
    """Ordered table of item kinds.

    Registration order is the iteration order used by every weighted draw, so
    it must stay stable for the lifetime of the run.
    """

    def __init__(self) -> None:
        self._kinds: Dict[str, ItemKind] = {}
        self._finished: Set[str] = set()
        self._empty_id: Optional[str] = None
        self.empty_exits = 0

    # ---------------------------
    # Setup
    # ---------------------------

    def register(
        self,
        kind_id: str,
        weight: int,
        recipe: Optional[Recipe] = None,
        *,
        empty: bool = False,
        finished: Optional[bool] = None,
    ) -> ItemKind:
        if kind_id in self._kinds:
            raise InvalidConfiguration(f"Duplicate item kind '{kind_id}'")
        if weight < 0:
            raise InvalidConfiguration(f"Item kind '{kind_id}' has negative weight {weight}")
        if empty and recipe is not None:
            raise InvalidConfiguration(f"Empty kind '{kind_id}' cannot have a recipe")
        if empty and self._empty_id is not None:
            raise InvalidConfiguration(
                f"Only one empty kind allowed; '{self._empty_id}' already registered, got '{kind_id}'"
            )
        if recipe is not None:
            if not recipe.components:
                raise InvalidConfiguration(f"Recipe for '{kind_id}' has no components")
            if recipe.build_steps < 1:
                raise InvalidConfiguration(
                    f"Recipe for '{kind_id}' needs build_steps >= 1, got {recipe.build_steps}"
                )

        kind = ItemKind(kind_id=kind_id, weight=int(weight), recipe=recipe, empty=empty)
        self._kinds[kind_id] = kind
        if empty:
            self._empty_id = kind_id
        if finished or (finished is None and recipe is not None):
            self._finished.add(kind_id)
        self._recompute()
        return kind

    def mark_finished(self, kind_id: str) -> None:
        if kind_id not in self._kinds:
            raise InvalidConfiguration(f"Cannot mark unknown kind '{kind_id}' as finished")
        if self._kinds[kind_id].empty:
            raise InvalidConfiguration(f"Empty kind '{kind_id}' cannot be a finished product")
        self._finished.add(kind_id)

    def _recompute(self) -> None:
        # Full recompute on every registration; no incremental updates.
        total = self.total_weight
        for kind in self._kinds.values():
            kind.probability = kind.weight / total if total > 0 else 0.0

    def validate(self) -> None:
        if not self._kinds:
            raise InvalidConfiguration("No item kinds registered")
        if self.total_weight <= 0:
            raise InvalidConfiguration("Total item weight is zero; nothing can be generated")
        for kind in self._kinds.values():
            if kind.recipe is None:
                continue
            for comp in kind.recipe.components:
                if comp not in self._kinds:
                    raise InvalidConfiguration(f"Recipe for '{kind.kind_id}' needs unknown kind '{comp}'")
                if not self.is_raw(comp):
                    raise InvalidConfiguration(
                        f"Recipe for '{kind.kind_id}' needs '{comp}', which is not a raw component"
                    )

    # ---------------------------
    # Lookup
    # ---------------------------

    def __contains__(self, kind_id: object) -> bool:
        return kind_id in self._kinds

    def __iter__(self) -> Iterator[ItemKind]:
        return iter(self._kinds.values())

    def __len__(self) -> int:
        return len(self._kinds)

    def get(self, kind_id: str) -> ItemKind:
        return self._kinds[kind_id]

    @property
    def total_weight(self) -> int:
        return sum(k.weight for k in self._kinds.values())

    @property
    def empty_kind(self) -> Optional[str]:
        return self._empty_id

    def probabilities(self) -> Dict[str, float]:
        return {kid: k.probability for kid, k in self._kinds.items()}

    def is_finished(self, kind_id: str) -> bool:
        return kind_id in self._finished

    def is_raw(self, kind_id: str) -> bool:
        kind = self._kinds.get(kind_id)
        return kind is not None and not kind.empty and kind_id not in self._finished

    def finished_kinds(self) -> List[str]:
        return [kid for kid in self._kinds if kid in self._finished]

    # ---------------------------
    # Recipes
    # ---------------------------

    def _recipes(self) -> Iterable[ItemKind]:
        for kind in self._kinds.values():
            if kind.is_composite and kind.kind_id in self._finished:
                yield kind

    def match(self, held: Iterable[str]) -> Optional[ItemKind]:
        """First finished kind (registration order) whose recipe is covered by `held`."""
        have = Counter(held)
        if not have:
            return None
        for kind in self._recipes():
            if _contains(have, Counter(kind.recipe.components)):  # type: ignore[union-attr]
                return kind
        return None

    def could_use(self, held: Iterable[str], kind_id: str) -> bool:
        """True if some recipe still needs `kind_id` on top of what is `held`."""
        want = Counter(held)
        want[kind_id] += 1
        for kind in self._recipes():
            if _contains(Counter(kind.recipe.components), want):  # type: ignore[union-attr]
                return True
        return False

    # ---------------------------
    # Reporting
    # ---------------------------

    def record_collected(self, kind_id: str) -> None:
        self._kinds[kind_id].collected += 1

    def record_empty_exit(self) -> None:
        self.empty_exits += 1
        if self._empty_id is not None:
            self._kinds[self._empty_id].collected += 1

    def collected_counts(self) -> Dict[str, int]:
        return {kid: k.collected for kid, k in self._kinds.items()}

    def reset_counters(self) -> None:
        for kind in self._kinds.values():
            kind.collected = 0
        self.empty_exits = 0
