"""
Deterministic workout generator.

Orchestrates every engine component for a single request:
1. Cap the target intensity using health modifiers
2. Analyze history into progression directives
3. Select a template and the intensity parameters for the adjusted target
4. Filter the movement pool and fill each template block's slots
5. Wrap the session in a warm-up and, for hard sessions, a cool-down
6. Validate the assembled workout before returning it

Every random draw comes from a stream derived from the request seed, so
the same request and history always produce the same result.
"""

import logging
import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

import sentry_sdk

from application.exceptions import TemplateNotFoundError, WorkoutGenerationError
from application.ports import FeedbackRepository
from backend.settings import Settings, get_settings
from core.constants import PROGRESSION_SEED_SUFFIX
from models.generation import (
    GeneratedBlock,
    GeneratedExercise,
    GeneratedWorkout,
    GenerationMetadata,
    GenerationRequest,
    GenerationResult,
    GeneratorChoices,
    WorkoutMetadata,
)
from models.history import ProgressionDirectives, ProgressionType, WorkoutHistoryEntry
from models.intensity import HealthModifiers, IntensityParameters
from models.movement import Movement
from models.preparation import CooldownPlan, WarmupPlan
from models.template import (
    Archetype,
    BlockKind,
    IntervalBlock,
    MovementSlot,
    SetBlock,
    TemplateBlock,
    TimeCappedBlock,
    WorkoutTemplate,
)
from services.intensity import apply_health_caps, clamp_intensity, get_intensity_parameters
from services.movement_catalog import (
    avoid_constraints,
    filter_by_equipment,
    get_movement_library,
    sample_balanced,
)
from services.progression_analyzer import ProgressionAnalyzer
from services.seeded_random import SeededRandom
from services.template_catalog import extract_main_patterns, select_template
from services.warmup_cooldown import (
    generate_cooldown,
    generate_warmup,
    get_recommended_warmup_duration,
    needs_extended_cooldown,
)
from services.workout_validator import WorkoutValidator

logger = logging.getLogger(__name__)

MovementPredicate = Callable[[Movement], bool]

DEFAULT_SETS = 3
DEFAULT_REPS = "8-12"
DEFAULT_LOAD = "moderate"
MINUTES_PER_SET = 1.5
DEFAULT_BLOCK_MINUTES = 15

LOW_OVERALL_SCORE_ADVISORY = 40
LOW_VITALITY_ADVISORY = 35

INTENSITY_LABELS = {
    1: "Recovery",
    2: "Easy",
    3: "Light",
    4: "Moderate",
    5: "Steady",
    6: "Challenging",
    7: "Hard",
    8: "Intense",
    9: "Very Hard",
    10: "Maximum",
}

_PERCENT_NUMBERS = re.compile(r"\d+")
_SEED_DAY = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


# ---------------------------------------------------------------------------
# Reference time
# ---------------------------------------------------------------------------


def resolve_reference_time(request: GenerationRequest) -> Optional[datetime]:
    """
    Reference time for history windows.

    An explicit as_of wins. Otherwise the day embedded in the seed
    (e.g. 'user123_2024-01-15') is used, anchored to the end of that day
    in UTC, so replaying a seed reads history the same way. Returns None
    when neither is available.
    """
    if request.as_of is not None:
        return request.as_of
    match = _SEED_DAY.search(request.seed)
    if match is None:
        return None
    try:
        day = date(*(int(part) for part in match.groups()))
    except ValueError:
        return None
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc) + timedelta(days=1)


# ---------------------------------------------------------------------------
# Slot resolution
# ---------------------------------------------------------------------------


def _strict_predicate(slot: MovementSlot) -> MovementPredicate:
    def matches(movement: Movement) -> bool:
        if movement.pattern not in slot.patterns:
            return False
        if slot.compound is not None and movement.compound != slot.compound:
            return False
        if slot.unilateral is not None and movement.unilateral != slot.unilateral:
            return False
        if slot.energy_system is not None and movement.energy_system != slot.energy_system:
            return False
        return True

    return matches


def _pattern_only_predicate(slot: MovementSlot) -> MovementPredicate:
    return lambda movement: movement.pattern in slot.patterns


# Tried in order; the first step that yields movements wins
SLOT_RELAXATION_STEPS: Tuple[Tuple[str, Callable[[MovementSlot], MovementPredicate]], ...] = (
    ("strict", _strict_predicate),
    ("pattern_only", _pattern_only_predicate),
)


def resolve_slot(
    slot: MovementSlot,
    pool: Sequence[Movement],
    rng: Callable[[], float],
) -> List[Movement]:
    """
    Pick movements for one template slot.

    Walks the relaxation steps until one produces movements. Returns an
    empty list when even the pattern-only step finds nothing; the caller
    omits the slot.
    """
    for step_name, build_predicate in SLOT_RELAXATION_STEPS:
        predicate = build_predicate(slot)
        candidates = [m for m in pool if predicate(m)]
        selected = sample_balanced(
            candidates,
            slot.count,
            rng,
            preferred_patterns=slot.patterns,
            ensure_compound=step_name == "strict" and bool(slot.compound),
        )
        if selected:
            if step_name != "strict":
                logger.warning(
                    f"Slot '{slot.role}' ({', '.join(p.value for p in slot.patterns)}) "
                    f"resolved with relaxed filter '{step_name}'"
                )
            logger.debug(
                f"Slot '{slot.role}' -> {[m.id for m in selected]} "
                f"from {len(candidates)} candidate(s)"
            )
            return selected

    logger.warning(
        f"No movements available for slot '{slot.role}' "
        f"({', '.join(p.value for p in slot.patterns)}); omitting slot"
    )
    return []


def filter_movement_pool(
    movements: Sequence[Movement],
    equipment: Sequence[str],
    constraints: Sequence[str],
    max_complexity: int,
) -> List[Movement]:
    """Equipment, then constraints, then the complexity ceiling."""
    filtered = filter_by_equipment(movements, equipment)
    filtered = avoid_constraints(filtered, constraints)
    return [m for m in filtered if m.complexity <= max_complexity]


# ---------------------------------------------------------------------------
# Exercise materialization
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _block_sets(block: TemplateBlock) -> Optional[int]:
    if isinstance(block, SetBlock):
        return block.sets
    if isinstance(block, IntervalBlock):
        return block.rounds
    return None


def _block_rest(block: TemplateBlock) -> Optional[int]:
    if isinstance(block, (SetBlock, IntervalBlock)):
        return block.rest
    return None


def _block_work_seconds(block: TemplateBlock) -> Optional[int]:
    if isinstance(block, SetBlock) and block.time:
        return block.time * 60
    if isinstance(block, TimeCappedBlock):
        return block.time_cap * 60
    if isinstance(block, IntervalBlock):
        return int(block.work_minutes * 60)
    return None


def _fixed_block_minutes(block: TemplateBlock) -> Optional[float]:
    """Clock time for time-capped blocks and single timed efforts without rest."""
    if isinstance(block, TimeCappedBlock):
        return float(block.time_cap)
    if isinstance(block, SetBlock) and block.time and block.rest is None:
        return float(block.time)
    return None


def scale_load(load: str, multiplier: float, floor: Optional[int] = None) -> str:
    """
    Scale a percentage range such as '80-90%'; other loads pass through.

    With a floor, the lower bound never drops below it and the upper bound
    never drops below the lower one.
    """
    if "%" not in load:
        return load
    numbers = _PERCENT_NUMBERS.findall(load)
    if len(numbers) < 2 or (multiplier == 1.0 and floor is None):
        return load
    low = _round_half_up(int(numbers[0]) * multiplier)
    high = _round_half_up(int(numbers[1]) * multiplier)
    if floor is not None:
        low = max(low, floor)
        high = max(high, low)
    return f"{low}-{high}%"


def _exercise_notes(movement: Movement, role: str, directives: ProgressionDirectives) -> str:
    notes = []
    if movement.complexity >= 4:
        notes.append("Focus on technique - complex movement")
    if role == "primary" and directives.progression_type == ProgressionType.LOAD:
        notes.append("Aim for slight load increase from last session")
    if movement.unilateral:
        notes.append("Perform each side")
    return ". ".join(notes)


def create_exercise(
    movement: Movement,
    block: TemplateBlock,
    role: str,
    directives: ProgressionDirectives,
    load_floor: Optional[int] = None,
) -> GeneratedExercise:
    """Apply the block's prescription and the progression adjustments to a movement."""
    sets = _block_sets(block) or DEFAULT_SETS
    if directives.volume_adjustment != 1.0:
        sets = max(1, _round_half_up(sets * directives.volume_adjustment))

    block_load = block.load if isinstance(block, SetBlock) else None
    load = scale_load(block_load, directives.load_adjustment, load_floor) if block_load else DEFAULT_LOAD

    return GeneratedExercise(
        id=movement.id,
        name=movement.name,
        movement=movement,
        sets=sets,
        reps=block.reps or DEFAULT_REPS,
        load=load,
        duration=_block_work_seconds(block),
        notes=_exercise_notes(movement, role, directives),
    )


def _block_name(block_id: str) -> str:
    return block_id.replace("-", " ").capitalize()


def build_working_block(
    block: TemplateBlock,
    pool: Sequence[Movement],
    directives: ProgressionDirectives,
    rng: Callable[[], float],
    load_floor: Optional[int] = None,
) -> GeneratedBlock:
    exercises: List[GeneratedExercise] = []
    for slot in block.slots:
        for movement in resolve_slot(slot, pool, rng):
            exercises.append(create_exercise(movement, block, slot.role, directives, load_floor))

    return GeneratedBlock(
        id=block.id,
        name=_block_name(block.id),
        kind=block.kind,
        structure=block.structure,
        exercises=exercises,
        sets=_block_sets(block),
        rest_seconds=_block_rest(block),
        notes=block.notes,
    )


# ---------------------------------------------------------------------------
# Warm-up and cool-down blocks
# ---------------------------------------------------------------------------


def warmup_block(plan: WarmupPlan) -> GeneratedBlock:
    return GeneratedBlock(
        id="warmup",
        name="Warm-up",
        kind=BlockKind.WARMUP,
        structure="sequence",
        exercises=[
            GeneratedExercise(
                id=ex.movement.id,
                name=ex.movement.name,
                movement=ex.movement,
                sets=ex.sets,
                reps=ex.reps,
                duration=ex.duration,
                notes=f"{ex.purpose} - {ex.intensity} intensity",
            )
            for ex in plan.exercises
        ],
        notes=plan.description,
    )


def cooldown_block(plan: CooldownPlan) -> GeneratedBlock:
    return GeneratedBlock(
        id="cooldown",
        name="Cool-down",
        kind=BlockKind.COOLDOWN,
        structure="sequence",
        exercises=[
            GeneratedExercise(
                id=ex.movement.id,
                name=ex.movement.name,
                movement=ex.movement,
                sets=ex.sets,
                reps=ex.reps or "hold",
                duration=ex.duration,
                notes=f"{ex.purpose} - gentle recovery",
            )
            for ex in plan.exercises
        ],
        notes=plan.description,
    )


# ---------------------------------------------------------------------------
# Naming and notes
# ---------------------------------------------------------------------------


def _archetype_value(archetype: Archetype | str) -> str:
    return archetype.value if isinstance(archetype, Archetype) else str(archetype)


def generate_workout_name(archetype: Archetype | str, intensity: int) -> str:
    label = INTENSITY_LABELS.get(intensity, "Moderate")
    return f"{label} {_archetype_value(archetype).capitalize()} Workout"


def generate_workout_description(
    template: WorkoutTemplate,
    directives: ProgressionDirectives,
    intensity_capped: bool,
) -> str:
    description = (
        template.description
        or f"{template.archetype.value} workout using {template.name} template"
    )
    if intensity_capped:
        description += " (intensity adjusted based on recovery metrics)"
    if directives.progression_type != ProgressionType.SKILL:
        description += f" with {directives.progression_type.value} progression"
    return description


def generate_coaching_notes(
    directives: ProgressionDirectives,
    intensity_capped: bool,
    modifiers: Optional[HealthModifiers],
) -> str:
    notes = []

    if intensity_capped:
        notes.append("Workout intensity has been adjusted based on your current recovery metrics.")

    if directives.deload_recommended:
        notes.append("This is a deload session - focus on movement quality and recovery.")
    elif directives.progression_type == ProgressionType.LOAD:
        notes.append("Progressive overload: aim to increase load from your last session.")
    elif directives.progression_type == ProgressionType.VOLUME:
        notes.append("Volume progression: additional sets/reps from previous workout.")

    if directives.reasoning:
        notes.append(directives.reasoning)

    if modifiers is not None:
        if modifiers.overall_score is not None and modifiers.overall_score < LOW_OVERALL_SCORE_ADVISORY:
            notes.append(
                "Low overall health score detected - prioritize recovery and lighter loads today."
            )
        if modifiers.vitality is not None and modifiers.vitality < LOW_VITALITY_ADVISORY:
            notes.append("Consider reducing intensity if energy levels remain low.")

    if not notes:
        notes.append("Focus on proper form and controlled movement throughout the workout.")

    return " ".join(notes)


def estimate_total_minutes(
    blocks: Sequence[GeneratedBlock],
    fixed_minutes: Sequence[Optional[float]],
    warmup_minutes: float,
    cooldown_minutes: float,
) -> int:
    """
    Sum block-level duration estimates.

    Warm-up and cool-down use their planned minutes; set-based blocks use
    1.5 minutes per set plus inter-set rest; time-capped and single
    timed blocks use their clock time.
    """
    total = 0.0
    for block, fixed in zip(blocks, fixed_minutes):
        if block.kind == BlockKind.WARMUP:
            total += warmup_minutes
        elif block.kind == BlockKind.COOLDOWN:
            total += cooldown_minutes
        elif fixed:
            total += fixed
        elif block.sets and block.rest_seconds is not None:
            total += block.sets * MINUTES_PER_SET + (block.sets - 1) * block.rest_seconds / 60
        else:
            total += DEFAULT_BLOCK_MINUTES
    return max(1, _round_half_up(total))


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class WorkoutGenerator:
    """
    Deterministic workout generator.

    Same request and history in, same workout and choices out. The only
    I/O is the optional feedback lookup used to enrich history with RPE.
    """

    def __init__(
        self,
        feedback_repo: Optional[FeedbackRepository] = None,
        settings: Optional[Settings] = None,
        validator: Optional[WorkoutValidator] = None,
    ):
        """
        Initialize the generator.

        Args:
            feedback_repo: Optional feedback store for RPE enrichment
            settings: Engine settings (default: get_settings())
            validator: Structural validator (default: WorkoutValidator())
        """
        self._settings = settings or get_settings()
        self._analyzer = ProgressionAnalyzer(
            feedback_repo=feedback_repo,
            history_window_days=self._settings.history_window_days,
            feedback_lookup_limit=self._settings.feedback_lookup_limit,
        )
        self._validator = validator or WorkoutValidator()

    async def generate(
        self,
        request: GenerationRequest,
        history: Sequence[WorkoutHistoryEntry] = (),
    ) -> GenerationResult:
        """
        Generate a workout.

        Args:
            request: Validated generation request
            history: Past workouts used for progression

        Returns:
            GenerationResult with the workout, choices and metadata

        Raises:
            TemplateNotFoundError: The archetype has no templates
            WorkoutValidationError: The assembled workout is structurally invalid
            WorkoutGenerationError: Any other generation failure
        """
        try:
            return await self._generate(request, history)
        except WorkoutGenerationError:
            raise
        except Exception as e:
            logger.exception(f"Workout generation failed for seed '{request.seed}'")
            raise WorkoutGenerationError(str(e)) from e

    async def _generate(
        self,
        request: GenerationRequest,
        history: Sequence[WorkoutHistoryEntry],
    ) -> GenerationResult:
        rng = SeededRandom(request.seed)
        modifiers = request.health_modifiers
        archetype = request.archetype

        capped = apply_health_caps(request.target_intensity, modifiers)
        intensity_capped = capped != request.target_intensity

        as_of = resolve_reference_time(request)
        if as_of is None:
            logger.warning(
                f"Seed '{request.seed}' carries no day and no as_of was given; "
                f"history windows use the current time"
            )

        directives = await self._analyzer.generate_directives(
            request.user_id,
            history,
            archetype,
            rng=SeededRandom(request.seed + PROGRESSION_SEED_SUFFIX),
            as_of=as_of,
        )
        adjusted = clamp_intensity(capped + directives.intensity_adjustment)

        template = select_template(archetype, request.minutes, adjusted, rng)
        if template is None:
            raise TemplateNotFoundError(archetype.value, request.minutes)

        params: IntensityParameters = get_intensity_parameters(adjusted, modifiers)
        pool = filter_movement_pool(
            get_movement_library(),
            request.equipment,
            request.constraints,
            params.complexity_limit,
        )
        logger.debug(
            f"Movement pool for seed '{request.seed}': {len(pool)} movement(s) "
            f"(complexity <= {params.complexity_limit})"
        )

        main_patterns = extract_main_patterns(template)
        blocks: List[GeneratedBlock] = []
        fixed_minutes: List[Optional[float]] = []

        warmup_minutes = get_recommended_warmup_duration(adjusted, archetype)
        warmup_plan = generate_warmup(main_patterns, request.equipment, warmup_minutes, request.seed)
        blocks.append(warmup_block(warmup_plan))
        fixed_minutes.append(None)

        for template_block in template.working_blocks():
            # Main lifts stay at or above the intensity's lower load bound
            load_floor = params.load_percentage[0] if template_block.kind == BlockKind.MAIN else None
            block = build_working_block(template_block, pool, directives, rng, load_floor)
            if not block.exercises:
                logger.warning(f"Dropping block '{template_block.id}': no slot could be filled")
                continue
            blocks.append(block)
            fixed_minutes.append(_fixed_block_minutes(template_block))

        cooldown_minutes = 0.0
        if needs_extended_cooldown(adjusted):
            cooldown_plan = generate_cooldown(
                adjusted, main_patterns, request.equipment, request.seed
            )
            cooldown_minutes = cooldown_plan.total_minutes
            blocks.append(cooldown_block(cooldown_plan))
            fixed_minutes.append(None)

        movement_ids = [ex.movement.id for block in blocks for ex in block.exercises if ex.movement]

        workout = GeneratedWorkout(
            id=f"workout-{request.seed}",
            name=generate_workout_name(archetype, adjusted),
            description=generate_workout_description(template, directives, intensity_capped),
            total_minutes=estimate_total_minutes(
                blocks, fixed_minutes, warmup_plan.total_minutes, cooldown_minutes
            ),
            estimated_intensity=adjusted,
            blocks=blocks,
            coaching_notes=generate_coaching_notes(directives, intensity_capped, modifiers),
            metadata=WorkoutMetadata(
                template=template.id,
                patterns=main_patterns,
                equipment=list(request.equipment),
                progression=directives.reasoning,
            ),
        )

        self._validator.ensure_valid(workout)

        logger.info(
            f"Generated workout '{workout.id}' from template '{template.id}': "
            f"{len(blocks)} block(s), {len(movement_ids)} movement(s), "
            f"intensity {request.target_intensity} -> {adjusted}"
        )

        return GenerationResult(
            workout=workout,
            choices=GeneratorChoices(
                template_id=template.id,
                movement_pool_ids=movement_ids,
                scheme_id=directives.progression_type.value,
            ),
            metadata=GenerationMetadata(
                template_used=template.id,
                progression_applied=directives.progression_type.value,
                intensity_capped=intensity_capped,
                total_movements=len(movement_ids),
                generator_version=self._settings.generator_version,
            ),
        )


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------


FallbackGenerator = Callable[
    [GenerationRequest, Sequence[WorkoutHistoryEntry]], Awaitable[GenerationResult]
]


async def generate_with_fallback(
    request: GenerationRequest,
    history: Sequence[WorkoutHistoryEntry],
    fallback: FallbackGenerator,
    generator: Optional[WorkoutGenerator] = None,
    settings: Optional[Settings] = None,
) -> GenerationResult:
    """
    Generate deterministically, handing off to ``fallback`` on failure.

    The hand-off only happens when ``generator_allow_fallback`` is enabled;
    otherwise the generation error propagates.
    """
    settings = settings or get_settings()
    generator = generator or WorkoutGenerator(settings=settings)

    try:
        return await generator.generate(request, history)
    except WorkoutGenerationError as e:
        if not settings.generator_allow_fallback:
            raise
        sentry_sdk.capture_exception(e)
        logger.warning(f"Deterministic generation failed, using fallback generator: {e}")
        return await fallback(request, history)
