"""
Structural validator for generated workouts.

Checks that an assembled workout has every required field, that every
block has exercises, and that every exercise references a real catalog
movement with a positive set count and a rep prescription. A failure here
indicates a generator defect, not bad input.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from application.exceptions import WorkoutValidationError
from models.generation import GeneratedBlock, GeneratedWorkout
from services.movement_catalog import is_catalog_movement

logger = logging.getLogger(__name__)


class ValidationSeverity(str, Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Workout must not be returned
    WARNING = "warning"  # Should be reviewed


@dataclass
class ValidationIssue:
    """A single validation issue."""

    message: str
    severity: ValidationSeverity
    location: Optional[str] = None  # e.g., "blocks[1].exercises[0]"


@dataclass
class ValidationResult:
    """Result of workout validation."""

    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationIssue]:
        """Get error-level issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        """Get warning-level issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]


class WorkoutValidator:
    """
    Validates the structure of generated workouts.

    Checks:
    1. Workout fields - id, name, description, positive minutes and intensity,
       coaching notes, metadata
    2. Blocks - at least one, each with id, name, kind and exercises
    3. Exercises - id, name, catalog movement, positive sets, reps
    """

    def validate(self, workout: GeneratedWorkout) -> ValidationResult:
        """
        Validate a generated workout.

        Args:
            workout: The assembled workout

        Returns:
            ValidationResult listing every issue found
        """
        issues: List[ValidationIssue] = []
        issues.extend(self._validate_workout_fields(workout))

        for index, block in enumerate(workout.blocks):
            issues.extend(self._validate_block(block, index))

        result = ValidationResult(
            is_valid=not any(i.severity == ValidationSeverity.ERROR for i in issues),
            issues=issues,
        )
        if not result.is_valid:
            logger.error(
                f"Workout {workout.id or '<no id>'} failed validation with "
                f"{len(result.errors)} error(s)"
            )
        return result

    def ensure_valid(self, workout: GeneratedWorkout) -> None:
        """
        Raise if the workout has any structural error.

        Raises:
            WorkoutValidationError: Listing every error message
        """
        result = self.validate(workout)
        if not result.is_valid:
            raise WorkoutValidationError(
                [issue.message for issue in result.errors],
                workout_id=workout.id or None,
            )

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def _validate_workout_fields(self, workout: GeneratedWorkout) -> List[ValidationIssue]:
        issues = []

        def error(message: str, location: str) -> None:
            issues.append(ValidationIssue(message, ValidationSeverity.ERROR, location))

        if not workout.id:
            error("Workout missing required field: id", "id")
        if not workout.name:
            error("Workout missing required field: name", "name")
        if not workout.description:
            error("Workout missing required field: description", "description")
        if not workout.total_minutes or workout.total_minutes <= 0:
            error("Workout missing valid total_minutes", "total_minutes")
        if not workout.estimated_intensity or workout.estimated_intensity <= 0:
            error("Workout missing valid estimated_intensity", "estimated_intensity")
        if not workout.blocks:
            error("Workout missing blocks", "blocks")
        if not workout.coaching_notes:
            error("Workout missing coaching_notes", "coaching_notes")
        if workout.metadata is None:
            error("Workout missing metadata", "metadata")

        return issues

    def _validate_block(self, block: GeneratedBlock, index: int) -> List[ValidationIssue]:
        issues = []
        location = f"blocks[{index}]"

        def error(message: str, where: str = location) -> None:
            issues.append(ValidationIssue(message, ValidationSeverity.ERROR, where))

        if not block.id:
            error(f"Block {index} missing required field: id")
        if not block.name:
            error(f"Block {index} missing required field: name")
        if not block.kind:
            error(f"Block {index} missing required field: kind")
        if not block.exercises:
            error(f"Block {index} missing exercises")

        for ex_index, exercise in enumerate(block.exercises):
            where = f"{location}.exercises[{ex_index}]"
            prefix = f"Block {index} exercise {ex_index}"

            if not exercise.id:
                error(f"{prefix} missing required field: id", where)
            if not exercise.name:
                error(f"{prefix} missing required field: name", where)
            if exercise.movement is None:
                error(f"{prefix} missing required field: movement", where)
            elif not is_catalog_movement(exercise.movement):
                error(f"{prefix} references unknown movement '{exercise.movement.id}'", where)
            if not exercise.sets or exercise.sets <= 0:
                error(f"{prefix} missing valid sets", where)
            if not exercise.reps:
                error(f"{prefix} missing required field: reps", where)

        return issues
