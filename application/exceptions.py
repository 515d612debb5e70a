"""
Application-layer exceptions.

These exceptions are raised by the generation services and surfaced by
whatever caller invokes the engine (HTTP handler, job runner, tests).
"""

from typing import List, Optional


class WorkoutGenerationError(Exception):
    """Error during deterministic workout generation.

    Base class for every failure the generator reports. Unexpected
    errors raised while assembling a workout are wrapped in this type.
    """

    pass


class TemplateNotFoundError(WorkoutGenerationError):
    """No template exists for the requested archetype at any duration.

    This is a request-rejection failure: the caller should surface it
    to the client rather than retry.
    """

    def __init__(self, archetype: str, minutes: int):
        self.archetype = archetype
        self.minutes = minutes
        super().__init__(
            f"No suitable template found for {archetype} workout of {minutes} minutes"
        )


class WorkoutValidationError(WorkoutGenerationError):
    """Generated workout failed structural validation.

    Indicates an internal logic defect, not bad input.
    """

    def __init__(self, errors: List[str], workout_id: Optional[str] = None):
        self.errors = errors
        self.workout_id = workout_id
        detail = "; ".join(errors) if errors else "unknown structural error"
        super().__init__(f"Workout failed structural validation: {detail}")
