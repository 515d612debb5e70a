"""
Workout generation services.

Entry points:
    from services import WorkoutGenerator, generate_with_fallback

    result = await WorkoutGenerator().generate(request, history)
"""

from services.progression_analyzer import ProgressionAnalyzer
from services.seeded_random import SeededRandom, build_generation_seed, generate_seed
from services.workout_generator import WorkoutGenerator, generate_with_fallback
from services.workout_validator import (
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
    WorkoutValidator,
)

__all__ = [
    "ProgressionAnalyzer",
    "SeededRandom",
    "build_generation_seed",
    "generate_seed",
    "WorkoutGenerator",
    "generate_with_fallback",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSeverity",
    "WorkoutValidator",
]
