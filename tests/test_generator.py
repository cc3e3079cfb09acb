"""
Tests for weighted item generation.
"""
import math
import random

import pytest

from assembly_line.errors import SelectionExhausted
from assembly_line.generator import ItemGenerator
from assembly_line.registry import ItemRegistry


class TestSelect:
    """Tests for the deterministic draw -> kind mapping."""

    def test_interval_boundaries(self, reference_registry):
        """[0, 1) is split into consecutive thirds: A | B | NULL."""
        gen = ItemGenerator(reference_registry, random.random)
        assert gen.select(0.0).kind_id == "A"
        assert gen.select(0.2).kind_id == "A"
        assert gen.select(0.5).kind_id == "B"
        assert gen.select(0.9).kind_id == "NULL"

    def test_last_boundary_is_inclusive(self, reference_registry):
        gen = ItemGenerator(reference_registry, random.random)
        assert gen.select(0.9999999999).kind_id == "NULL"
        assert gen.select(1.0).kind_id == "NULL"

    def test_float_residue_goes_to_last_kind(self):
        """Ten tenths sum to just under 1.0; a draw of 1.0 still lands."""
        registry = ItemRegistry()
        for i in range(10):
            registry.register(f"K{i}", 1)
        gen = ItemGenerator(registry, random.random)
        assert gen.select(1.0).kind_id == "K9"

    def test_zero_weight_kinds_never_selected(self):
        registry = ItemRegistry()
        registry.register("Z", 0)
        registry.register("A", 1)
        gen = ItemGenerator(registry, random.random)
        assert gen.select(0.0).kind_id == "A"

    @pytest.mark.parametrize("p", [1.5, float("nan")])
    def test_bad_draw_raises(self, reference_registry, p):
        """A draw no interval can hold is a bug, not a retry."""
        gen = ItemGenerator(reference_registry, random.random)
        with pytest.raises(SelectionExhausted):
            gen.select(p)

    def test_empty_pool_raises(self):
        registry = ItemRegistry()
        registry.register("A", 0)
        gen = ItemGenerator(registry, random.random)
        with pytest.raises(SelectionExhausted):
            gen.select(0.1)


class TestNext:
    """Tests for draws from a random source."""

    def test_fixed_sequence_frequencies(self, reference_registry, scripted):
        """A replayed sequence gives exactly the expected frequencies."""
        gen = ItemGenerator(reference_registry, scripted(0.1, 0.5, 0.9))
        drawn = [gen.next().kind_id for _ in range(300)]
        assert drawn[:3] == ["A", "B", "NULL"]
        assert drawn.count("A") == drawn.count("B") == drawn.count("NULL") == 100

    def test_frequencies_converge(self, reference_registry):
        """Empirical frequencies approach the configured probabilities."""
        gen = ItemGenerator(reference_registry, random.Random(1234).random)
        n = 30000
        for _ in range(n):
            gen.next()
        counts = gen.generated_counts()
        for kid in ("A", "B", "NULL"):
            assert counts[kid] / n == pytest.approx(1 / 3, abs=0.02)
        assert counts["P"] == 0

    def test_skewed_weights_converge(self):
        registry = ItemRegistry()
        registry.register("A", 1)
        registry.register("B", 3)
        gen = ItemGenerator(registry, random.Random(99).random)
        n = 20000
        for _ in range(n):
            gen.next()
        assert gen.generated_counts()["B"] / n == pytest.approx(0.75, abs=0.02)

    def test_generated_counts_start_at_zero(self, reference_registry):
        gen = ItemGenerator(reference_registry, random.random)
        assert gen.generated_counts() == {"A": 0, "B": 0, "NULL": 0, "P": 0}

    def test_broken_source_raises(self, reference_registry):
        gen = ItemGenerator(reference_registry, lambda: math.inf)
        with pytest.raises(SelectionExhausted):
            gen.next()
