"""
Tests for loading line configurations.
"""
from pathlib import Path

import pytest

from assembly_line.config import Config
from assembly_line.errors import InvalidConfiguration
from assembly_line.sim import AssemblyLine

EXAMPLE = Path(__file__).resolve().parent.parent / "example_config.yaml"

SMALL = {
    "belt": {"length": 4},
    "simulation": {"steps": 20, "seed": 3, "scheduler": "round_robin"},
    "items": [
        {"id": "A", "weight": 1},
        {"id": "B", "weight": 1},
        {"id": "P", "recipe": {"components": ["A", "B"], "build_steps": 2}},
    ],
    "workers": [{"id": "W0", "pos": 1}, {"id": "W1", "pos": 2, "weight": 3}],
}


class TestFromDict:
    def test_values_and_defaults(self):
        cfg = Config.from_dict(SMALL)

        assert cfg.belt.length == 4
        assert cfg.belt.shift_per_step == 1
        assert cfg.sim.steps == 20
        assert cfg.sim.seed == 3
        assert cfg.sim.scheduler == "round_robin"
        assert cfg.sim.place_on_completion is True
        assert cfg.sim.pickup_policy == "first_free"
        assert [it.kind_id for it in cfg.items] == ["A", "B", "P"]
        assert cfg.items[2].weight == 0
        assert cfg.items[2].recipe.components == ("A", "B")
        assert cfg.items[2].recipe.build_steps == 2
        assert cfg.workers[0].weight == 1
        assert cfg.workers[1].weight == 3

    def test_empty_document(self):
        cfg = Config.from_dict({})
        assert cfg.belt.length == 5
        assert cfg.sim.seed is None
        assert cfg.items == []

    def test_missing_worker_position(self):
        with pytest.raises(InvalidConfiguration):
            Config.from_dict({"workers": [{"id": "W0"}]})

    @pytest.mark.parametrize(
        "data",
        [
            {"belt": 5, "items": [], "workers": []},
            {"simulation": ["steps", 10]},
            {"items": ["A", "B"]},
            {"items": [{"id": "P", "recipe": "A+B"}]},
            {"workers": ["W0"]},
        ],
    )
    def test_section_not_a_mapping(self, data):
        with pytest.raises(InvalidConfiguration):
            Config.from_dict(data)

    def test_bad_number(self):
        with pytest.raises(InvalidConfiguration):
            Config.from_dict({"belt": {"length": "long"}})


class TestFromYaml:
    def test_load(self, tmp_path):
        path = tmp_path / "line.yaml"
        path.write_text(
            "belt:\n"
            "  length: 6\n"
            "simulation:\n"
            "  seed: 5\n"
            "items:\n"
            "  - {id: A, weight: 2}\n"
            "  - {id: NONE, weight: 1, empty: true}\n"
            "workers:\n"
            "  - {id: W0, pos: 2}\n",
            encoding="utf-8",
        )
        cfg = Config.from_yaml(str(path))
        assert cfg.belt.length == 6
        assert cfg.items[1].empty

        line = AssemblyLine.from_yaml(str(path))
        assert line.belt.length == 6
        assert line.registry.empty_kind == "NONE"

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "line.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(InvalidConfiguration):
            Config.from_yaml(str(path))


class TestReference:
    def test_reference_line(self):
        cfg = Config.reference(steps=30, seed=1)
        assert cfg.sim.steps == 30
        assert [w.pos for w in cfg.workers] == [1, 1, 2, 2, 3, 3]

        line = AssemblyLine.from_config(cfg)
        assert line.registry.probabilities() == pytest.approx(
            {"A": 1 / 3, "B": 1 / 3, "NULL": 1 / 3, "P": 0.0}
        )
        assert line.registry.finished_kinds() == ["P"]

    def test_example_file_matches_reference(self):
        cfg = Config.from_yaml(str(EXAMPLE))
        ref = Config.reference(steps=cfg.sim.steps, seed=cfg.sim.seed)
        assert cfg == ref


class TestFromConfig:
    def test_unknown_scheduler(self):
        cfg = Config.reference()
        cfg.sim.scheduler = "lottery"
        with pytest.raises(InvalidConfiguration):
            AssemblyLine.from_config(cfg)

    def test_unknown_pickup_policy(self):
        cfg = Config.reference()
        cfg.sim.pickup_policy = "grab_all"
        with pytest.raises(InvalidConfiguration):
            AssemblyLine.from_config(cfg)

    def test_duplicate_kind(self):
        cfg = Config.from_dict({**SMALL, "items": SMALL["items"] + [{"id": "A", "weight": 1}]})
        with pytest.raises(InvalidConfiguration):
            AssemblyLine.from_config(cfg)

    def test_seed_makes_runs_repeatable(self):
        first = AssemblyLine.from_config(Config.from_dict(SMALL)).run(20)
        second = AssemblyLine.from_config(Config.from_dict(SMALL)).run(20)
        assert first == second
