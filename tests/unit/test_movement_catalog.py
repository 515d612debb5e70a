"""
Unit tests for the movement catalog.

Tests cover:
- Library loading and lookups
- Equipment and constraint filtering
- Pattern-balanced sampling
"""
import pytest

from models import EnergySystem, MovementPattern
from services.movement_catalog import (
    avoid_constraints,
    filter_by_equipment,
    get_cooldown_library,
    get_movement,
    get_movement_library,
    get_movements_by_complexity,
    get_movements_by_energy_system,
    get_movements_by_pattern,
    get_warmup_library,
    is_catalog_movement,
    sample_balanced,
)
from services.seeded_random import SeededRandom


def _ids(movements):
    return [m.id for m in movements]


# =============================================================================
# Library
# =============================================================================


@pytest.mark.unit
class TestLibrary:
    """Tests for catalog loading and lookups."""

    def test_library_sizes(self):
        """Main, warm-up and cool-down sub-libraries load fully."""
        assert len(get_movement_library()) == 30
        assert len(get_warmup_library()) == 10
        assert len(get_cooldown_library()) == 7

    def test_every_pattern_represented(self):
        """All eight movement patterns have at least one movement."""
        patterns = {m.pattern for m in get_movement_library()}
        assert patterns == set(MovementPattern)

    def test_ids_are_unique(self):
        """No id appears twice across the sub-libraries."""
        all_ids = _ids(get_movement_library()) + _ids(get_warmup_library()) + _ids(get_cooldown_library())
        assert len(all_ids) == len(set(all_ids))

    def test_library_is_cached(self):
        """Repeated access returns the same tuple."""
        assert get_movement_library() is get_movement_library()

    def test_get_movement(self):
        """Lookup by id covers every sub-library."""
        assert get_movement("deadlift").name == "Deadlift"
        assert get_movement("cat_cow").pattern == MovementPattern.HINGE
        assert get_movement("box_breathing") is not None

    def test_get_unknown_movement(self):
        """Unknown ids return None."""
        assert get_movement("underwater_basket_weaving") is None

    def test_is_catalog_movement(self):
        """Only the catalog's own entries qualify."""
        deadlift = get_movement("deadlift")
        assert is_catalog_movement(deadlift) is True
        assert is_catalog_movement(deadlift.model_copy(update={"name": "Fake Lift"})) is False
        assert is_catalog_movement(None) is False

    def test_get_movements_by_pattern(self):
        """Carry pattern contains the farmer walk."""
        assert _ids(get_movements_by_pattern(MovementPattern.CARRY)) == ["farmer_walk"]

    def test_get_movements_by_energy_system(self):
        """Energy system filter returns only matching movements."""
        aerobic = get_movements_by_energy_system(EnergySystem.AEROBIC)
        assert aerobic
        assert all(m.energy_system == EnergySystem.AEROBIC for m in aerobic)

    def test_get_movements_by_complexity(self):
        """Complexity filter is inclusive."""
        simple = get_movements_by_complexity(1)
        assert simple
        assert all(m.complexity <= 1 for m in simple)
        assert "handstand_push_up" not in _ids(get_movements_by_complexity(4))


# =============================================================================
# Filtering
# =============================================================================


@pytest.mark.unit
class TestFiltering:
    """Tests for equipment and constraint filters."""

    def test_any_equipment_tag_enables_movement(self):
        """A movement needs only one of its tags to be available."""
        ids = _ids(filter_by_equipment(get_movement_library(), ["barbell"]))
        assert "back_squat" in ids
        assert "deadlift" in ids
        assert "goblet_squat" not in ids

    def test_no_equipment_means_no_movements(self):
        """An empty equipment list enables nothing."""
        assert filter_by_equipment(get_movement_library(), []) == []

    def test_no_barbell_constraint(self):
        """no_barbell removes every barbell movement."""
        filtered = avoid_constraints(get_movement_library(), ["no_barbell"])
        assert filtered
        assert all("barbell" not in m.equipment for m in filtered)

    def test_no_weights_constraint(self):
        """no_weights keeps only body-weight friendly movements."""
        ids = _ids(avoid_constraints(get_movement_library(), ["no_weights"]))
        assert "push_up" in ids
        assert "pull_up" in ids
        assert "walking_lunge" not in ids
        assert "deadlift" not in ids

    def test_low_impact_constraint(self):
        """low_impact drops jumping movements."""
        ids = _ids(avoid_constraints(get_movement_library(), ["low_impact"]))
        assert "burpee" not in ids
        assert "box_jump" not in ids
        assert "plank" in ids

    def test_unknown_constraint_is_ignored(self):
        """Unknown tags fail open."""
        library = get_movement_library()
        assert avoid_constraints(library, ["bad_knees_today"]) == list(library)

    def test_constraints_combine(self):
        """Multiple constraints all apply."""
        filtered = avoid_constraints(get_movement_library(), ["no_barbell", "upper_only"])
        assert filtered
        for movement in filtered:
            assert "barbell" not in movement.equipment
            assert movement.pattern in (MovementPattern.PUSH, MovementPattern.PULL, MovementPattern.CORE)


# =============================================================================
# Sampling
# =============================================================================


@pytest.mark.unit
class TestSampleBalanced:
    """Tests for pattern-balanced sampling."""

    def test_empty_pool(self):
        """Nothing in, nothing out."""
        assert sample_balanced([], 3, SeededRandom("s")) == []

    def test_zero_count(self):
        """Zero count returns nothing."""
        assert sample_balanced(get_movement_library(), 0, SeededRandom("s")) == []

    def test_first_pick_is_compound(self):
        """ensure_compound draws the first movement from compound movements."""
        pool = [get_movement("plank"), get_movement("dead_bug"), get_movement("deadlift")]
        selected = sample_balanced(pool, 2, SeededRandom("compound"))
        assert selected[0].id == "deadlift"
        assert len(selected) == 2

    def test_no_compound_available_returns_nothing(self):
        """ensure_compound with no compound candidates yields an empty list."""
        pool = [get_movement("plank"), get_movement("dead_bug")]
        assert sample_balanced(pool, 1, SeededRandom("s"), ensure_compound=True) == []

    def test_preferred_patterns_win(self):
        """Preferred patterns are chosen while they have candidates."""
        selected = sample_balanced(
            get_movement_library(),
            2,
            SeededRandom("prefer-pull"),
            preferred_patterns=[MovementPattern.PULL],
        )
        assert [m.pattern for m in selected] == [MovementPattern.PULL, MovementPattern.PULL]

    def test_pattern_cap_spreads_selection(self):
        """Once a pattern hits the cap, other patterns are used."""
        selected = sample_balanced(
            get_movement_library(),
            3,
            SeededRandom("cap"),
            preferred_patterns=[MovementPattern.CORE],
            ensure_compound=False,
        )
        core = [m for m in selected if m.pattern == MovementPattern.CORE]
        assert len(selected) == 3
        assert len(core) == 2

    def test_cap_relaxed_when_nothing_else_left(self):
        """A single-pattern pool still fills the request."""
        pool = get_movements_by_pattern(MovementPattern.CORE)
        selected = sample_balanced(pool, 3, SeededRandom("relax"), ensure_compound=False)
        assert len(selected) == 3

    def test_returns_fewer_when_pool_runs_out(self):
        """Never more than the pool holds, never duplicates."""
        pool = [get_movement("pull_up"), get_movement("chin_up")]
        selected = sample_balanced(pool, 5, SeededRandom("short"))
        assert sorted(_ids(selected)) == ["chin_up", "pull_up"]

    def test_selection_is_distinct(self):
        """No movement is selected twice."""
        selected = sample_balanced(get_movement_library(), 10, SeededRandom("distinct"))
        assert len(_ids(selected)) == len(set(_ids(selected)))

    def test_deterministic(self):
        """Same seed, same selection."""
        a = sample_balanced(get_movement_library(), 5, SeededRandom("repeat"))
        b = sample_balanced(get_movement_library(), 5, SeededRandom("repeat"))
        assert _ids(a) == _ids(b)
