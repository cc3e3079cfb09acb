from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

from .models import Slot, WorkerState
from .registry import ItemRegistry

logger = logging.getLogger(__name__)

HAND_COUNT = 2
PRIMARY_HAND = 0  # filled first; a finished item always lands here when free


class PickupPolicy(Protocol):
    def choose_hand(self, worker: "Worker", kind_id: str, registry: ItemRegistry) -> Optional[int]: ...


@dataclass(frozen=True)
class FirstFreeHandPolicy:
    """Fill hands in a fixed order, but only with components a recipe still needs.

    With the two-kind reference recipe this is the classic rule: take the
    component into the primary hand, else into the other hand unless that
    hand already holds the same kind.
    """

    hand_order: Sequence[int] = (0, 1)

    def choose_hand(self, worker: "Worker", kind_id: str, registry: ItemRegistry) -> Optional[int]:
        if not registry.could_use(worker.held(), kind_id):
            return None
        for hand in self.hand_order:
            if worker.hands[hand] is None:
                return hand
        return None


@dataclass(frozen=True)
class DistinctKindsPolicy:
    """Any raw component, as long as no hand already holds that kind.

    Knows nothing about recipes, so with more than two component kinds a
    worker can end up holding a pair that never assembles.
    """

    hand_order: Sequence[int] = (0, 1)

    def choose_hand(self, worker: "Worker", kind_id: str, registry: ItemRegistry) -> Optional[int]:
        if kind_id in worker.held():
            return None
        for hand in self.hand_order:
            if worker.hands[hand] is None:
                return hand
        return None


PICKUP_POLICIES: Dict[str, PickupPolicy] = {
    "first_free": FirstFreeHandPolicy(),
    "distinct": DistinctKindsPolicy(),
}


@dataclass
class Worker:
    worker_id: str
    pos: int  # belt slot this worker reaches
    weight: int = 1

    hands: List[Slot] = field(default_factory=lambda: [None] * HAND_COUNT)
    assembling: Optional[str] = None
    remaining: int = 0
    activated: bool = False
    blocked: bool = False  # holding a finished item, slot was occupied

    picked_up: int = 0
    placed: int = 0
    blocked_steps: int = 0
    consumed: Dict[str, int] = field(default_factory=dict)

    def is_busy(self) -> bool:
        return self.remaining > 0

    def held(self) -> List[str]:
        return [h for h in self.hands if h is not None]

    def finished_hand(self, registry: ItemRegistry) -> Optional[int]:
        for idx, h in enumerate(self.hands):
            if h is not None and registry.is_finished(h):
                return idx
        return None

    def state(self, registry: ItemRegistry) -> WorkerState:
        if self.is_busy():
            return WorkerState.ASSEMBLING
        if self.finished_hand(registry) is not None:
            return WorkerState.HOLDING_FINISHED
        return WorkerState.IDLE

    def reset(self) -> None:
        self.hands = [None] * HAND_COUNT
        self.assembling = None
        self.remaining = 0
        self.activated = False
        self.blocked = False

    # ---------------------------
    # Activation
    # ---------------------------

    def activate(
        self,
        slot: Slot,
        registry: ItemRegistry,
        policy: Optional[PickupPolicy] = None,
        place_on_completion: bool = True,
    ) -> Slot:
        """Take one turn at the belt and return what the slot should now hold."""
        self.activated = True
        self.blocked = False

        # 1) assembling has priority over everything on the belt
        if self.remaining > 0:
            self.remaining -= 1
            if self.remaining > 0:
                return slot
            self._complete_assembly()
            if not place_on_completion:
                return slot

        # 2) a finished item waits for an empty slot
        hand = self.finished_hand(registry)
        if hand is not None:
            if slot is None:
                finished = self.hands[hand]
                self.hands[hand] = None
                self.placed += 1
                logger.debug("%s placed %s at slot %d", self.worker_id, finished, self.pos)
                return finished
            self.blocked = True
            self.blocked_steps += 1
            return slot

        # 3) only raw components are of interest
        if slot is None or not registry.is_raw(slot):
            return slot
        hand = (policy or FirstFreeHandPolicy()).choose_hand(self, slot, registry)
        if hand is None:
            return slot
        self.hands[hand] = slot
        self.picked_up += 1
        logger.debug("%s picked up %s into hand %d", self.worker_id, slot, hand)

        # 4) hands changed: see whether they now cover a recipe
        self._try_assemble(registry)
        return None

    def _try_assemble(self, registry: ItemRegistry) -> None:
        kind = registry.match(self.held())
        if kind is None or kind.recipe is None:
            return
        for comp in kind.recipe.components:
            self.hands[self.hands.index(comp)] = None
            self.consumed[comp] = self.consumed.get(comp, 0) + 1
        self.assembling = kind.kind_id
        self.remaining = kind.recipe.build_steps
        logger.debug("%s started %s (%d steps)", self.worker_id, kind.kind_id, self.remaining)

    def _complete_assembly(self) -> None:
        finished = self.assembling
        self.assembling = None
        if self.hands[PRIMARY_HAND] is None:
            self.hands[PRIMARY_HAND] = finished
        else:
            self.hands[self.hands.index(None)] = finished
