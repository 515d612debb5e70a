"""
Template catalog for workout generation.

Loads archetype-specific workout templates from YAML and selects the best
match for a request. Selection order:
1. Exact archetype whose duration range contains the requested minutes
2. Conditioning requests broaden to mixed/endurance templates
3. Prefer templates whose intensity range contains the target
4. Fall back to the archetype's template with the closest midpoint duration

Ties are broken with the supplied seeded draw function, never list order.
"""

import logging
import pathlib
from functools import lru_cache
from typing import Callable, List, Optional, Tuple

import yaml

from models.movement import MovementPattern
from models.template import (
    Archetype,
    IntervalBlock,
    SetBlock,
    TemplateBlock,
    TimeCappedBlock,
    WorkoutTemplate,
)

logger = logging.getLogger(__name__)

DATA_PATH = pathlib.Path(__file__).resolve().parent / "data" / "templates.yaml"

RandomSource = Callable[[], float]

# Archetypes a conditioning request may borrow templates from
CONDITIONING_FALLBACK_ARCHETYPES = (Archetype.MIXED, Archetype.ENDURANCE)

SECONDS_PER_SET_ESTIMATE = 45
DEFAULT_BLOCK_MINUTES = 10


@lru_cache(maxsize=1)
def get_workout_templates() -> Tuple[WorkoutTemplate, ...]:
    """All templates, in catalog order."""
    raw = yaml.safe_load(DATA_PATH.read_text(encoding="utf-8"))
    templates = tuple(WorkoutTemplate(**item) for item in raw.get("templates") or [])
    logger.debug(f"Loaded {len(templates)} workout templates")
    return templates


def get_template_by_id(template_id: str) -> Optional[WorkoutTemplate]:
    return next((t for t in get_workout_templates() if t.id == template_id), None)


def get_templates_by_archetype(archetype: Archetype | str) -> List[WorkoutTemplate]:
    return [t for t in get_workout_templates() if t.archetype == archetype]


def get_templates_by_duration(minutes: float) -> List[WorkoutTemplate]:
    return [t for t in get_workout_templates() if t.fits_duration(minutes)]


def select_template(
    archetype: Archetype | str,
    minutes: float,
    target_intensity: int,
    rng: RandomSource,
) -> Optional[WorkoutTemplate]:
    """
    Select a template for the request.

    Args:
        archetype: Requested archetype
        minutes: Requested session length
        target_intensity: Adjusted target intensity (1-10)
        rng: Draw function used to break ties

    Returns:
        The chosen template, or None if the archetype has no templates at all
    """
    templates = get_workout_templates()

    candidates = [t for t in templates if t.archetype == archetype and t.fits_duration(minutes)]

    if not candidates and archetype == Archetype.CONDITIONING:
        candidates = [
            t for t in templates
            if t.archetype in CONDITIONING_FALLBACK_ARCHETYPES and t.fits_duration(minutes)
        ]
        if candidates:
            logger.info(
                f"No conditioning template for {minutes} min, broadened to "
                f"{[t.id for t in candidates]}"
            )

    intensity_matches = [t for t in candidates if t.fits_intensity(target_intensity)]
    final_candidates = intensity_matches or candidates

    if not final_candidates:
        same_archetype = [t for t in templates if t.archetype == archetype]
        if not same_archetype:
            logger.warning(f"No templates exist for archetype {archetype}")
            return None

        best = min(abs(t.midpoint_minutes - minutes) for t in same_archetype)
        nearest = [t for t in same_archetype if abs(t.midpoint_minutes - minutes) == best]
        closest = nearest[int(rng() * len(nearest))]
        logger.info(
            f"No template covers {minutes} min for {archetype}; "
            f"using closest duration match '{closest.id}' of {len(nearest)} tied"
        )
        return closest

    selected = final_candidates[int(rng() * len(final_candidates))]
    logger.info(
        f"Selected template '{selected.id}' from {len(final_candidates)} candidate(s) "
        f"for {archetype} {minutes} min @ {target_intensity}"
    )
    return selected


def estimate_block_minutes(block: TemplateBlock) -> float:
    """Rough duration of a single template block in minutes."""
    if isinstance(block, TimeCappedBlock):
        return float(block.time_cap)

    if isinstance(block, IntervalBlock):
        return block.rounds * block.work_minutes + (block.rounds - 1) * block.rest / 60

    if isinstance(block, SetBlock):
        if block.time:
            return float(block.time)
        if block.sets and block.rest is not None:
            work_seconds = block.sets * SECONDS_PER_SET_ESTIMATE
            rest_seconds = (block.sets - 1) * block.rest
            return (work_seconds + rest_seconds) / 60

    return float(DEFAULT_BLOCK_MINUTES)


def estimate_workout_time(template: WorkoutTemplate) -> float:
    """Estimate total template duration in minutes."""
    return sum(estimate_block_minutes(block) for block in template.blocks)


def extract_main_patterns(template: WorkoutTemplate) -> List[MovementPattern]:
    """Distinct movement patterns across every block's slots, in order."""
    patterns: List[MovementPattern] = []
    for block in template.blocks:
        for slot in block.slots:
            for pattern in slot.patterns:
                if pattern not in patterns:
                    patterns.append(pattern)
    return patterns
