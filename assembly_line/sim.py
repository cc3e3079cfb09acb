from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence

from .belt import Belt
from .config import Config
from .errors import InvalidConfiguration
from .generator import ItemGenerator
from .models import (
    FrameData,
    ItemKindView,
    RandomSource,
    Recipe,
    RunSummary,
    Snapshot,
    WorkerView,
)
from .registry import ItemRegistry
from .scheduler import Scheduler, WeightedScheduler, make_scheduler
from .worker import HAND_COUNT, PICKUP_POLICIES, FirstFreeHandPolicy, PickupPolicy, Worker

logger = logging.getLogger(__name__)


class AssemblyLine:
    """Step-synchronous simulator for one belt and its workers.

    One step, always in this order:
    - draw the next item kind for the entry slot,
    - shift the belt toward the exit, tallying whatever falls off,
    - deposit the drawn item (nothing for the empty kind) in the entry slot,
    - activate every worker once, in the scheduler's order; each worker's
      result is written back to its slot before the next worker looks.
    """

    def __init__(
        self,
        registry: ItemRegistry,
        belt: Belt,
        workers: Sequence[Worker],
        scheduler: Optional[Scheduler] = None,
        rng: Optional[RandomSource] = None,
        *,
        shift_per_step: int = 1,
        place_on_completion: bool = True,
        pickup_policy: Optional[PickupPolicy] = None,
    ) -> None:
        self.registry = registry
        self.belt = belt
        self.workers: Dict[str, Worker] = {}
        for w in workers:
            if w.worker_id in self.workers:
                raise InvalidConfiguration(f"Duplicate worker id '{w.worker_id}'")
            self.workers[w.worker_id] = w

        self.scheduler: Scheduler = scheduler or WeightedScheduler()
        self.rng: RandomSource = rng or random.Random().random
        self.shift_per_step = shift_per_step
        self.place_on_completion = place_on_completion
        self.pickup_policy: PickupPolicy = pickup_policy or FirstFreeHandPolicy()

        self.tick: int = 0
        self.alarms: List[str] = []

        self._validate()
        self.generator = ItemGenerator(registry, self.rng)
        logger.info(
            "assembly line ready: belt=%d kinds=%d workers=%d scheduler=%s",
            belt.length,
            len(registry),
            len(self.workers),
            type(self.scheduler).__name__,
        )

    # ---------------------------
    # Construction
    # ---------------------------

    @staticmethod
    def from_config(cfg: Config, rng: Optional[RandomSource] = None) -> "AssemblyLine":
        registry = ItemRegistry()
        for it in cfg.items:
            recipe = None
            if it.recipe is not None:
                recipe = Recipe(components=tuple(it.recipe.components), build_steps=it.recipe.build_steps)
            registry.register(it.kind_id, it.weight, recipe, empty=it.empty, finished=it.finished)

        workers = [Worker(worker_id=w.worker_id, pos=w.pos, weight=w.weight) for w in cfg.workers]

        if cfg.sim.pickup_policy not in PICKUP_POLICIES:
            raise InvalidConfiguration(
                f"Unknown pickup policy '{cfg.sim.pickup_policy}'; expected one of {sorted(PICKUP_POLICIES)}"
            )

        if rng is None:
            rng = random.Random(cfg.sim.seed).random

        return AssemblyLine(
            registry=registry,
            belt=Belt(cfg.belt.length),
            workers=workers,
            scheduler=make_scheduler(cfg.sim.scheduler),
            rng=rng,
            shift_per_step=cfg.belt.shift_per_step,
            place_on_completion=cfg.sim.place_on_completion,
            pickup_policy=PICKUP_POLICIES[cfg.sim.pickup_policy],
        )

    @staticmethod
    def from_yaml(path: str, rng: Optional[RandomSource] = None) -> "AssemblyLine":
        return AssemblyLine.from_config(Config.from_yaml(path), rng=rng)

    # ---------------------------
    # Public API
    # ---------------------------

    def snapshot(self) -> Snapshot:
        workers_view: Dict[str, WorkerView] = {
            wid: WorkerView(
                worker_id=wid,
                pos=w.pos,
                weight=w.weight,
                state=w.state(self.registry).value,
                hands=tuple(w.hands),
                assembling=w.assembling,
                remaining=w.remaining,
                placed=w.placed,
                blocked_steps=w.blocked_steps,
            )
            for wid, w in self.workers.items()
        }
        kinds_view: Dict[str, ItemKindView] = {
            k.kind_id: ItemKindView(
                kind_id=k.kind_id,
                weight=k.weight,
                probability=k.probability,
                collected=k.collected,
                finished=self.registry.is_finished(k.kind_id),
                empty=k.empty,
            )
            for k in self.registry
        }
        return Snapshot(
            tick=self.tick,
            belt=tuple(self.belt.slots),
            workers=workers_view,
            kinds=kinds_view,
            empty_exits=self.registry.empty_exits,
        )

    def step(self) -> FrameData:
        self.alarms = []
        belt_start = self.belt.copy_slots()

        # 1) next item for the entry slot
        kind = self.generator.next()

        # 2) move the belt along, counting what comes off the end
        exited = self.belt.shift(self.shift_per_step, on_collect=self.registry.record_collected)
        for item in exited:
            if item is None:
                self.registry.record_empty_exit()

        # 3) place the new item (or nothing) in the input slot
        self.belt.deposit(None if kind.empty else kind.kind_id)
        belt_shifted = self.belt.copy_slots()

        # 4) workers, one at a time
        for w in self.workers.values():
            w.activated = False
        order = self.scheduler.decide(list(self.workers.values()), self.rng)
        for wid in order:
            w = self.workers[wid]
            slot = self.belt.get_slot(w.pos)
            self.belt.set_slot(
                w.pos,
                w.activate(slot, self.registry, self.pickup_policy, self.place_on_completion),
            )
            if w.blocked:
                self._alarm(f"[tick {self.tick}] Worker {wid} holds {w.held()} but slot {w.pos} is occupied.")

        frame = FrameData(
            tick=self.tick,
            generated=kind.kind_id,
            belt_start=belt_start,
            belt_shifted=belt_shifted,
            belt_end=self.belt.copy_slots(),
            order=order,
            exited=exited,
            alarms=list(self.alarms),
        )
        logger.debug("tick %d: %s -> %s order=%s", self.tick, belt_start, frame.belt_end, order)

        self.tick += 1
        return frame

    def run(self, steps: int) -> RunSummary:
        if steps < 0:
            raise InvalidConfiguration(f"Step count must be >= 0, got {steps}")
        for _ in range(steps):
            self.step()
        return self.summary()

    def summary(self) -> RunSummary:
        return RunSummary(
            steps=self.tick,
            collected=self.registry.collected_counts(),
            generated=self.generator.generated_counts(),
            empty_exits=self.registry.empty_exits,
        )

    def collected_counts(self) -> Dict[str, int]:
        return self.registry.collected_counts()

    def held_count(self, kind_id: str) -> int:
        return sum(w.held().count(kind_id) for w in self.workers.values())

    def consumed_count(self, kind_id: str) -> int:
        return sum(w.consumed.get(kind_id, 0) for w in self.workers.values())

    def unaccounted(self) -> Dict[str, int]:
        """Per raw kind: generated minus everything that can be traced. Always zero."""
        generated = self.generator.generated_counts()
        out: Dict[str, int] = {}
        for k in self.registry:
            if not self.registry.is_raw(k.kind_id):
                continue
            out[k.kind_id] = (
                generated[k.kind_id]
                - k.collected
                - self.belt.count(k.kind_id)
                - self.held_count(k.kind_id)
                - self.consumed_count(k.kind_id)
            )
        return out

    # ---------------------------
    # Internals
    # ---------------------------

    def _validate(self) -> None:
        self.registry.validate()
        if not self.workers:
            raise InvalidConfiguration("No workers registered")
        for kind in self.registry:
            if kind.recipe is not None and len(kind.recipe.components) > HAND_COUNT:
                raise InvalidConfiguration(
                    f"Recipe for '{kind.kind_id}' needs {len(kind.recipe.components)} components; "
                    f"workers only have {HAND_COUNT} hands"
                )
        for wid, w in self.workers.items():
            if not self.belt.in_bounds(w.pos):
                raise InvalidConfiguration(
                    f"Worker {wid} at position {w.pos} is outside the belt (length {self.belt.length})"
                )
            if w.weight < 0:
                raise InvalidConfiguration(f"Worker {wid} has negative weight {w.weight}")
        if sum(w.weight for w in self.workers.values()) <= 0:
            raise InvalidConfiguration("Total worker weight is zero")
        if not 1 <= self.shift_per_step <= self.belt.length:
            raise InvalidConfiguration(
                f"shift_per_step must be within 1..{self.belt.length}, got {self.shift_per_step}"
            )

    def _alarm(self, msg: str) -> None:
        self.alarms.append(msg)
        logger.info(msg)
