from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .errors import InvalidConfiguration
from .models import Slot

INPUT_SLOT = 0


@dataclass
class Belt:
    """Fixed-length row of slots. Index 0 is the entry, the last index the exit."""

    length: int
    slots: List[Slot] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.length < 1:
            raise InvalidConfiguration(f"Belt length must be >= 1, got {self.length}")
        if not self.slots:
            self.slots = [None] * self.length
        elif len(self.slots) != self.length:
            raise InvalidConfiguration(
                f"Belt of length {self.length} initialised with {len(self.slots)} slots"
            )

    @property
    def output_slot(self) -> int:
        return self.length - 1

    def in_bounds(self, idx: int) -> bool:
        return 0 <= idx < self.length

    def get_slot(self, idx: int) -> Slot:
        return self.slots[idx]

    def set_slot(self, idx: int, item: Slot) -> None:
        self.slots[idx] = item

    def deposit(self, item: Slot) -> None:
        self.slots[INPUT_SLOT] = item

    def shift(self, n: int = 1, on_collect: Optional[Callable[[str], None]] = None) -> List[Slot]:
        """Advance the belt `n` slots toward the exit.

        The `n` exit-most slots fall off first; each occupant is reported to
        `on_collect` exactly once. Returns what fell off, exit-most first.
        """
        if not 0 <= n <= self.length:
            raise InvalidConfiguration(f"Cannot shift a belt of length {self.length} by {n}")
        if n == 0:
            return []

        exited = [self.slots[i] for i in range(self.length - 1, self.length - 1 - n, -1)]
        if on_collect is not None:
            for item in exited:
                if item is not None:
                    on_collect(item)

        # Work backwards from the exit so nothing is overwritten before it moves.
        for idx in range(self.length - 1, n - 1, -1):
            self.slots[idx] = self.slots[idx - n]
        for idx in range(n):
            self.slots[idx] = None
        return exited

    def occupied(self) -> int:
        return sum(1 for s in self.slots if s is not None)

    def count(self, kind_id: str) -> int:
        return sum(1 for s in self.slots if s == kind_id)

    def clear(self) -> None:
        self.slots = [None] * self.length

    def copy_slots(self) -> List[Slot]:
        return list(self.slots)
