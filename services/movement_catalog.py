"""
Movement catalog for workout generation.

Loads the curated movement library from YAML once and exposes pure
filtering and sampling helpers over it. The library is read-only: every
accessor returns tuples of frozen Movement models.
"""

import logging
import pathlib
from functools import lru_cache
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import yaml

from models.movement import EnergySystem, Movement, MovementPattern

logger = logging.getLogger(__name__)

DATA_PATH = pathlib.Path(__file__).resolve().parent / "data" / "movements.yaml"

# A draw function returning floats in [0, 1); SeededRandom instances qualify
RandomSource = Callable[[], float]

# Pattern order used when no preference is given
DEFAULT_PATTERN_ORDER: Tuple[MovementPattern, ...] = tuple(MovementPattern)

HIGH_IMPACT_MOVEMENTS = frozenset({"burpee", "mountain_climber", "box_jump"})
BODYWEIGHT_ONLY_EQUIPMENT = frozenset({"bodyweight", "floor", "pull_up_bar"})
UPPER_BODY_PATTERNS = frozenset({MovementPattern.PUSH, MovementPattern.PULL, MovementPattern.CORE})
LOWER_BODY_PATTERNS = frozenset({
    MovementPattern.SQUAT,
    MovementPattern.HINGE,
    MovementPattern.MONO,
    MovementPattern.CARRY,
})

# Constraint tag -> predicate a movement must satisfy to stay in the pool.
# Constraints missing from this table are ignored.
CONSTRAINT_PREDICATES: Dict[str, Callable[[Movement], bool]] = {
    "no_weights": lambda m: all(eq in BODYWEIGHT_ONLY_EQUIPMENT for eq in m.equipment),
    "no_barbell": lambda m: "barbell" not in m.equipment,
    "no_floor": lambda m: "floor" not in m.equipment,
    "low_impact": lambda m: m.id not in HIGH_IMPACT_MOVEMENTS,
    "upper_only": lambda m: m.pattern in UPPER_BODY_PATTERNS,
    "lower_only": lambda m: m.pattern in LOWER_BODY_PATTERNS,
}


# ---------------------------------------------------------------------------
# Library access
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def _load_catalog() -> Dict[str, Tuple[Movement, ...]]:
    raw = yaml.safe_load(DATA_PATH.read_text(encoding="utf-8"))
    catalog = {
        section: tuple(Movement(**item) for item in raw.get(section) or [])
        for section in ("movements", "warmup", "cooldown")
    }
    logger.debug(
        f"Loaded movement catalog: {len(catalog['movements'])} movements, "
        f"{len(catalog['warmup'])} warm-up, {len(catalog['cooldown'])} cool-down"
    )
    return catalog


def get_movement_library() -> Tuple[Movement, ...]:
    """Movements available to working blocks."""
    return _load_catalog()["movements"]


def get_warmup_library() -> Tuple[Movement, ...]:
    return _load_catalog()["warmup"]


def get_cooldown_library() -> Tuple[Movement, ...]:
    return _load_catalog()["cooldown"]


@lru_cache(maxsize=1)
def _movement_index() -> Dict[str, Movement]:
    index: Dict[str, Movement] = {}
    for section in _load_catalog().values():
        for movement in section:
            index[movement.id] = movement
    return index


def get_movement(movement_id: str) -> Optional[Movement]:
    """Look up a movement by id across all sub-libraries."""
    return _movement_index().get(movement_id)


def is_catalog_movement(movement: Optional[Movement]) -> bool:
    """True when the movement is the catalog's own entry for its id."""
    if movement is None:
        return False
    return get_movement(movement.id) == movement


def get_movements_by_pattern(pattern: MovementPattern | str) -> List[Movement]:
    return [m for m in get_movement_library() if m.pattern == pattern]


def get_movements_by_energy_system(energy_system: EnergySystem | str) -> List[Movement]:
    return [m for m in get_movement_library() if m.energy_system == energy_system]


def get_movements_by_complexity(max_complexity: int) -> List[Movement]:
    return [m for m in get_movement_library() if m.complexity <= max_complexity]


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def filter_by_equipment(movements: Iterable[Movement], available: Iterable[str]) -> List[Movement]:
    """Keep movements that at least one available equipment tag enables."""
    available_set = set(available)
    return [m for m in movements if available_set.intersection(m.equipment)]


def avoid_constraints(movements: Iterable[Movement], constraints: Iterable[str]) -> List[Movement]:
    """
    Remove movements that violate any known constraint.

    Unknown constraint tags fail open: they are logged and ignored.
    """
    predicates = []
    for constraint in constraints:
        predicate = CONSTRAINT_PREDICATES.get(constraint)
        if predicate is None:
            logger.debug(f"Ignoring unknown constraint '{constraint}'")
            continue
        predicates.append(predicate)

    return [m for m in movements if all(predicate(m) for predicate in predicates)]


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------


def sample_balanced(
    pool: Sequence[Movement],
    count: int,
    rng: RandomSource,
    preferred_patterns: Sequence[MovementPattern] = (),
    max_per_pattern: int = 2,
    ensure_compound: bool = True,
) -> List[Movement]:
    """
    Select movements with an even spread across movement patterns.

    Args:
        pool: Candidate movements
        count: Number of movements wanted
        rng: Draw function; the only source of randomness
        preferred_patterns: Patterns favoured over the rest, in priority order
        max_per_pattern: Soft cap per pattern, relaxed when nothing else is left
        ensure_compound: Draw the first movement from compound movements only

    Returns:
        Up to ``count`` distinct movements. Fewer when the pool runs out.
    """
    if not pool or count <= 0:
        return []

    priority = list(preferred_patterns) + [
        p for p in DEFAULT_PATTERN_ORDER if p not in preferred_patterns
    ]
    rank = {pattern: i for i, pattern in enumerate(priority)}
    preferred = set(preferred_patterns)

    selected: List[Movement] = []
    selected_ids = set()
    pattern_counts: Dict[MovementPattern, int] = {p: 0 for p in DEFAULT_PATTERN_ORDER}

    available = [m for m in pool if m.compound] if ensure_compound else list(pool)

    while len(selected) < count and available:
        candidates = [
            m for m in available
            if pattern_counts[m.pattern] < max_per_pattern and m.id not in selected_ids
        ]
        if not candidates:
            candidates = [m for m in available if m.id not in selected_ids]
        if not candidates:
            break

        if preferred:
            in_preferred = [m for m in candidates if m.pattern in preferred]
            if in_preferred:
                candidates = in_preferred
        candidates.sort(key=lambda m: rank[m.pattern])

        movement = candidates[int(rng() * len(candidates))]
        selected.append(movement)
        selected_ids.add(movement.id)
        pattern_counts[movement.pattern] += 1

        # First compound pick made; open up the full pool
        if ensure_compound and len(selected) == 1:
            available = list(pool)

    return selected
