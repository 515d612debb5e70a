"""
Warm-up and cool-down planning.

Builds preparation sequences keyed to the main workout's movement
patterns and recovery sequences scaled by workout intensity. Each plan
draws from its own derived random stream so that neither perturbs the
main workout's selections.
"""

import logging
import math
from typing import Dict, Iterable, List, Sequence

from core.constants import COOLDOWN_SEED_SUFFIX, WARMUP_SEED_SUFFIX
from models.movement import Movement, MovementPattern
from models.preparation import CooldownExercise, CooldownPlan, WarmupExercise, WarmupPlan
from models.template import Archetype
from services.movement_catalog import filter_by_equipment, get_cooldown_library, get_warmup_library
from services.seeded_random import SeededRandom

logger = logging.getLogger(__name__)

# Always available for preparation work, whatever else the user has
BASELINE_EQUIPMENT = "bodyweight"

GENERAL_MOBILITY_IDS = ("cat_cow", "hip_circle", "arm_circle")
ACTIVATION_IDS = ("glute_bridge", "scap_pushup", "band_pull_apart")
DYNAMIC_FLOW_IDS = ("inchworm", "world_greatest_stretch")
RESTORATIVE_IDS = ("childs_pose", "legs_up_wall", "savasana")
BREATHING_ID = "box_breathing"

MAX_PREP_PATTERNS = 3
MAX_STRETCHES = 2
MIN_WARMUP_MINUTES = 5
DEFAULT_SET_SECONDS = 30
EXTENDED_COOLDOWN_INTENSITY = 7

# Main pattern -> stretch patterns that relieve it
STRETCH_MAP: Dict[MovementPattern, Sequence[MovementPattern]] = {
    MovementPattern.SQUAT: (MovementPattern.HINGE, MovementPattern.CORE),
    MovementPattern.HINGE: (MovementPattern.HINGE, MovementPattern.ROTATION),
    MovementPattern.PUSH: (MovementPattern.CORE, MovementPattern.ROTATION),
    MovementPattern.PULL: (MovementPattern.CORE, MovementPattern.ROTATION),
    MovementPattern.CORE: (MovementPattern.CORE, MovementPattern.ROTATION),
    MovementPattern.MONO: (MovementPattern.HINGE, MovementPattern.CORE),
    MovementPattern.CARRY: (MovementPattern.CORE, MovementPattern.HINGE),
    MovementPattern.ROTATION: (MovementPattern.ROTATION, MovementPattern.CORE),
}

WARMUP_BASE_MINUTES: Dict[Archetype, int] = {
    Archetype.STRENGTH: 8,
    Archetype.CONDITIONING: 6,
    Archetype.ENDURANCE: 5,
    Archetype.MIXED: 7,
}


def _with_baseline(equipment: Iterable[str]) -> List[str]:
    tags = list(equipment)
    if BASELINE_EQUIPMENT not in tags:
        tags.append(BASELINE_EQUIPMENT)
    return tags


def _pick(rng: SeededRandom, candidates: Sequence[Movement]) -> Movement:
    return candidates[int(rng() * len(candidates))]


def _dedupe(patterns: Iterable[MovementPattern]) -> List[MovementPattern]:
    seen: List[MovementPattern] = []
    for pattern in patterns:
        if pattern not in seen:
            seen.append(pattern)
    return seen


def generate_warmup(
    main_patterns: Sequence[MovementPattern],
    equipment: Iterable[str],
    target_minutes: float,
    seed: str,
) -> WarmupPlan:
    """
    Build a warm-up for the main workout.

    Sequence: one general mobility drill, up to three pattern-specific
    preparation drills, an activation drill when there are 8+ minutes and
    a dynamic flow drill when there are 10+ minutes. No drill repeats.
    """
    rng = SeededRandom(seed + WARMUP_SEED_SUFFIX)
    available = filter_by_equipment(get_warmup_library(), _with_baseline(equipment))
    exercises: List[WarmupExercise] = []

    def unused(movements: Iterable[Movement]) -> List[Movement]:
        chosen = {e.movement.id for e in exercises}
        return [m for m in movements if m.id not in chosen]

    general = [m for m in available if m.id in GENERAL_MOBILITY_IDS]
    if general:
        exercises.append(
            WarmupExercise(
                movement=_pick(rng, general),
                sets=1,
                reps="8-10",
                intensity="light",
                purpose="mobility",
            )
        )

    for pattern in _dedupe(main_patterns)[:MAX_PREP_PATTERNS]:
        candidates = unused(m for m in available if m.pattern == pattern)
        if not candidates:
            continue
        is_core = pattern == MovementPattern.CORE
        exercises.append(
            WarmupExercise(
                movement=_pick(rng, candidates),
                sets=1,
                reps="30-45s" if is_core else "5-8",
                duration=40 if is_core else None,
                intensity="light",
                purpose="preparation",
            )
        )

    if target_minutes >= 8:
        candidates = unused(m for m in available if m.id in ACTIVATION_IDS)
        if candidates:
            exercises.append(
                WarmupExercise(
                    movement=_pick(rng, candidates),
                    sets=2,
                    reps="8-12",
                    intensity="moderate",
                    purpose="activation",
                )
            )

    if target_minutes >= 10:
        candidates = unused(m for m in available if m.id in DYNAMIC_FLOW_IDS)
        if candidates:
            exercises.append(
                WarmupExercise(
                    movement=_pick(rng, candidates),
                    sets=1,
                    reps="5-8",
                    intensity="moderate",
                    purpose="preparation",
                )
            )

    estimated = sum(e.sets * (e.duration or DEFAULT_SET_SECONDS) for e in exercises) / 60
    pattern_text = " and ".join(MovementPattern(p).value for p in list(main_patterns)[:2])

    return WarmupPlan(
        exercises=exercises,
        total_minutes=max(MIN_WARMUP_MINUTES, min(target_minutes, estimated)),
        description=(
            f"Dynamic warm-up targeting {pattern_text} patterns "
            f"with {len(exercises)} preparatory exercises"
        ),
    )


def _stretch_patterns(main_patterns: Sequence[MovementPattern]) -> List[MovementPattern]:
    relevant: List[MovementPattern] = []
    for pattern in main_patterns:
        relevant.extend(STRETCH_MAP.get(pattern, (MovementPattern.CORE,)))
    return _dedupe(relevant)[:3]


def generate_cooldown(
    intensity: int,
    main_patterns: Sequence[MovementPattern],
    equipment: Iterable[str],
    seed: str,
) -> CooldownPlan:
    """
    Build a cool-down scaled to workout intensity.

    High-intensity sessions open with three minutes of box breathing. Up to
    two pattern-relevant stretches follow, then one restorative pose.
    """
    rng = SeededRandom(seed + COOLDOWN_SEED_SUFFIX)
    extended = needs_extended_cooldown(intensity)
    base_minutes = 8 if extended else 5
    available = filter_by_equipment(get_cooldown_library(), _with_baseline(equipment))
    exercises: List[CooldownExercise] = []

    def unused(movements: Iterable[Movement]) -> List[Movement]:
        chosen = {e.movement.id for e in exercises}
        return [m for m in movements if m.id not in chosen]

    if extended:
        breathing = next((m for m in available if m.id == BREATHING_ID), None)
        if breathing is not None:
            exercises.append(
                CooldownExercise(movement=breathing, sets=1, duration=180, purpose="breathing")
            )

    for pattern in _stretch_patterns(main_patterns)[:MAX_STRETCHES]:
        candidates = unused(
            m for m in available
            if m.pattern == pattern
            or (pattern == MovementPattern.HINGE and m.pattern == MovementPattern.ROTATION)
        )
        if candidates:
            exercises.append(
                CooldownExercise(
                    movement=_pick(rng, candidates), sets=1, duration=60, purpose="recovery"
                )
            )

    restorative = unused(m for m in available if m.id in RESTORATIVE_IDS)
    if restorative:
        exercises.append(
            CooldownExercise(
                movement=_pick(rng, restorative), sets=1, duration=120, purpose="restoration"
            )
        )

    total_seconds = sum(e.duration or 60 for e in exercises)

    if extended:
        description = (
            f"Extended recovery sequence with breathing work and "
            f"{len(exercises)} restorative exercises"
        )
    else:
        description = f"Recovery cool-down with {len(exercises)} gentle stretches and relaxation"

    return CooldownPlan(
        exercises=exercises,
        total_minutes=max(base_minutes, math.ceil(total_seconds / 60)),
        description=description,
    )


def get_recommended_warmup_duration(intensity: int, archetype: Archetype | str) -> int:
    """Warm-up minutes by archetype, plus two for high-intensity sessions."""
    try:
        base = WARMUP_BASE_MINUTES[Archetype(archetype)]
    except ValueError:
        logger.debug(f"Unknown archetype {archetype!r}, using mixed warm-up duration")
        base = WARMUP_BASE_MINUTES[Archetype.MIXED]
    return base + (2 if intensity >= EXTENDED_COOLDOWN_INTENSITY else 0)


def needs_extended_cooldown(intensity: int) -> bool:
    return intensity >= EXTENDED_COOLDOWN_INTENSITY
