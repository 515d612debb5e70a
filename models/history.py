"""
Workout history and progression models.

History entries are supplied by the persistence layer and treated as
immutable; enrichment produces copies.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProgressionType(str, Enum):
    """How the next session should progress."""

    LOAD = "load"
    VOLUME = "volume"
    DENSITY = "density"
    SKILL = "skill"
    DELOAD = "deload"


class TrainingPhase(str, Enum):
    """Block periodization phase inferred from recent training."""

    ACCUMULATION = "accumulation"
    INTENSIFICATION = "intensification"
    REALIZATION = "realization"
    DELOAD = "deload"


class WorkoutFeedback(BaseModel):
    """Post-workout subjective feedback."""

    model_config = ConfigDict(frozen=True)

    difficulty: float = Field(..., ge=0, le=10)
    satisfaction: Optional[float] = Field(None, ge=0, le=10)


class WorkoutHistoryEntry(BaseModel):
    """A past generated or completed workout."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: datetime
    archetype: str = Field(..., description="Archetype value; legacy values are kept as-is")
    target_intensity: float = Field(..., ge=0, le=10)
    actual_intensity: Optional[float] = Field(None, ge=0, le=10)
    volume: float = Field(default=10, ge=0, description="Total sets or minutes")
    avg_load: Optional[float] = None
    rpe: Optional[float] = Field(None, ge=0, le=10)
    completed: bool = False
    feedback: Optional[WorkoutFeedback] = None

    @property
    def effective_intensity(self) -> float:
        """Actual intensity when recorded, otherwise the target."""
        if self.actual_intensity is not None:
            return self.actual_intensity
        return self.target_intensity


class RPERecord(BaseModel):
    """A perceived-exertion rating from the feedback store."""

    workout_id: str
    perceived_intensity: Optional[float] = None
    created_at: Optional[datetime] = None


class ProgressionDirectives(BaseModel):
    """Adjustments the generator applies on top of the template."""

    model_config = ConfigDict(frozen=True)

    load_adjustment: float = Field(1.0, description="Multiplier, roughly 0.8-1.2")
    volume_adjustment: float = Field(1.0, description="Multiplier, roughly 0.7-1.3")
    intensity_adjustment: int = Field(0, description="Additive, -2 to +2")
    deload_recommended: bool = False
    progression_type: ProgressionType = ProgressionType.SKILL
    reasoning: str


class ProgressionContext(BaseModel):
    """Summary of recent training used to choose directives."""

    recent_workouts: List[WorkoutHistoryEntry]
    days_since_last_same_archetype: int
    consecutive_high_intensity: int
    avg_recovery_score: float
    training_phase: TrainingPhase
