"""Models package for the workout generator."""

from models.movement import (
    EnergySystem,
    Loadability,
    Movement,
    MovementPattern,
    Plane,
)
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
from models.intensity import (
    HealthModifiers,
    HeartRateZone,
    IntensityParameters,
    SessionIntensityPlan,
    SessionPhase,
)
from models.history import (
    ProgressionContext,
    ProgressionDirectives,
    ProgressionType,
    RPERecord,
    TrainingPhase,
    WorkoutFeedback,
    WorkoutHistoryEntry,
)
from models.preparation import (
    CooldownExercise,
    CooldownPlan,
    WarmupExercise,
    WarmupPlan,
)
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

__all__ = [
    "EnergySystem",
    "Loadability",
    "Movement",
    "MovementPattern",
    "Plane",
    "Archetype",
    "BlockKind",
    "IntervalBlock",
    "MovementSlot",
    "SetBlock",
    "TemplateBlock",
    "TimeCappedBlock",
    "WorkoutTemplate",
    "HealthModifiers",
    "HeartRateZone",
    "IntensityParameters",
    "SessionIntensityPlan",
    "SessionPhase",
    "ProgressionContext",
    "ProgressionDirectives",
    "ProgressionType",
    "RPERecord",
    "TrainingPhase",
    "WorkoutFeedback",
    "WorkoutHistoryEntry",
    "CooldownExercise",
    "CooldownPlan",
    "WarmupExercise",
    "WarmupPlan",
    "GeneratedBlock",
    "GeneratedExercise",
    "GeneratedWorkout",
    "GenerationMetadata",
    "GenerationRequest",
    "GenerationResult",
    "GeneratorChoices",
    "WorkoutMetadata",
]
