from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .errors import InvalidConfiguration


@dataclass
class RecipeConfig:
    components: Tuple[str, ...]
    build_steps: int = 4


@dataclass
class ItemConfig:
    kind_id: str
    weight: int
    empty: bool = False
    finished: Optional[bool] = None
    recipe: Optional[RecipeConfig] = None


@dataclass
class WorkerConfig:
    worker_id: str
    pos: int
    weight: int = 1


@dataclass
class BeltConfig:
    length: int = 5
    shift_per_step: int = 1


@dataclass
class SimConfig:
    steps: int = 100
    seed: Optional[int] = None
    scheduler: str = "weighted"
    place_on_completion: bool = True
    pickup_policy: str = "first_free"


@dataclass
class Config:
    belt: BeltConfig
    sim: SimConfig
    items: List[ItemConfig]
    workers: List[WorkerConfig]

    @staticmethod
    def from_yaml(path: str) -> "Config":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise InvalidConfiguration(f"{path}: top level must be a mapping")
        return Config.from_dict(data)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Config":
        try:
            belt_data = data.get("belt", {}) or {}
            belt = BeltConfig(
                length=int(belt_data.get("length", 5)),
                shift_per_step=int(belt_data.get("shift_per_step", 1)),
            )

            sim_data = data.get("simulation", {}) or {}
            seed = sim_data.get("seed")
            sim = SimConfig(
                steps=int(sim_data.get("steps", 100)),
                seed=int(seed) if seed is not None else None,
                scheduler=str(sim_data.get("scheduler", "weighted")),
                place_on_completion=bool(sim_data.get("place_on_completion", True)),
                pickup_policy=str(sim_data.get("pickup_policy", "first_free")),
            )

            items: List[ItemConfig] = []
            for it in data.get("items", []):
                recipe = None
                r = it.get("recipe")
                if r is not None:
                    recipe = RecipeConfig(
                        components=tuple(map(str, r["components"])),
                        build_steps=int(r.get("build_steps", 4)),
                    )
                finished = it.get("finished")
                items.append(
                    ItemConfig(
                        kind_id=str(it["id"]),
                        weight=int(it.get("weight", 0)),
                        empty=bool(it.get("empty", False)),
                        finished=bool(finished) if finished is not None else None,
                        recipe=recipe,
                    )
                )

            workers: List[WorkerConfig] = []
            for w in data.get("workers", []):
                workers.append(
                    WorkerConfig(
                        worker_id=str(w["id"]),
                        pos=int(w["pos"]),
                        weight=int(w.get("weight", 1)),
                    )
                )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise InvalidConfiguration(f"Malformed configuration: {e!r}") from e

        return Config(belt=belt, sim=sim, items=items, workers=workers)

    @staticmethod
    def reference(steps: int = 100, seed: Optional[int] = None) -> "Config":
        """Five-slot belt, A/B/nothing in equal thirds, three pairs of workers building P = A + B."""
        return Config(
            belt=BeltConfig(length=5, shift_per_step=1),
            sim=SimConfig(steps=steps, seed=seed),
            items=[
                ItemConfig(kind_id="A", weight=50),
                ItemConfig(kind_id="B", weight=50),
                ItemConfig(kind_id="NULL", weight=50, empty=True),
                ItemConfig(kind_id="P", weight=0, recipe=RecipeConfig(components=("A", "B"), build_steps=4)),
            ],
            workers=[
                WorkerConfig(worker_id=f"W{i}", pos=pos, weight=1)
                for i, pos in enumerate([1, 1, 2, 2, 3, 3])
            ],
        )
