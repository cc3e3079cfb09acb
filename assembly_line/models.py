from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

# Any zero-argument callable returning uniform floats in [0, 1).
RandomSource = Callable[[], float]

# Belt slot content: a kind id, or None for an empty slot.
Slot = Optional[str]

# =========================
# Domain entities
# =========================

@dataclass(frozen=True)
class Recipe:
    components: Tuple[str, ...]  # multiset of required component ids
    build_steps: int = 4


@dataclass
class ItemKind:
    kind_id: str
    weight: int
    probability: float = 0.0
    collected: int = 0
    recipe: Optional[Recipe] = None
    empty: bool = False  # generating it leaves the entry slot empty

    @property
    def is_composite(self) -> bool:
        return self.recipe is not None


class WorkerState(Enum):
    IDLE = "idle"
    ASSEMBLING = "assembling"
    HOLDING_FINISHED = "holding_finished"


# =========================
# Snapshot views (viewers and reports use)
# =========================

@dataclass(frozen=True)
class ItemKindView:
    kind_id: str
    weight: int
    probability: float
    collected: int
    finished: bool
    empty: bool


@dataclass(frozen=True)
class WorkerView:
    worker_id: str
    pos: int
    weight: int
    state: str
    hands: Tuple[Slot, ...]
    assembling: Optional[str]
    remaining: int
    placed: int
    blocked_steps: int


@dataclass(frozen=True)
class Snapshot:
    tick: int
    belt: Tuple[Slot, ...]
    workers: Dict[str, WorkerView]
    kinds: Dict[str, ItemKindView]
    empty_exits: int


@dataclass
class FrameData:
    tick: int
    generated: Optional[str]  # kind drawn this step (may be the empty kind)
    belt_start: List[Slot]  # before the shift
    belt_shifted: List[Slot]  # after shift + deposit, before any worker acts
    belt_end: List[Slot]  # after every worker acted
    order: List[str]
    exited: List[Slot]
    alarms: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RunSummary:
    steps: int
    collected: Dict[str, int]
    generated: Dict[str, int]
    empty_exits: int
