"""
Request and response models for workout generation.

The request carries everything needed to reproduce a workout: inputs,
health snapshot, reference date and the seed string. The result pairs
the workout with the choices made so a replay can verify determinism.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.constants import (
    MAX_INTENSITY,
    MAX_SESSION_MINUTES,
    MIN_INTENSITY,
    MIN_SESSION_MINUTES,
)
from models.intensity import HealthModifiers
from models.movement import Movement, MovementPattern
from models.template import Archetype, BlockKind


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class GenerationRequest(BaseModel):
    """Inputs for deterministic workout generation."""

    seed: str = Field(
        ...,
        min_length=1,
        description="user-hash + day + optional focus + optional nonce",
    )
    user_id: Optional[str] = Field(None, description="Used for feedback enrichment")
    archetype: Archetype
    minutes: int = Field(..., ge=MIN_SESSION_MINUTES, le=MAX_SESSION_MINUTES)
    target_intensity: int = Field(..., ge=MIN_INTENSITY, le=MAX_INTENSITY)
    equipment: List[str] = Field(default_factory=list)
    constraints: List[str] = Field(default_factory=list)
    health_modifiers: HealthModifiers = Field(default_factory=HealthModifiers)
    as_of: Optional[datetime] = Field(
        None,
        description="Reference date for history windows; defaults to the end of the day in the seed, else now",
    )

    @field_validator("equipment", "constraints")
    @classmethod
    def strip_tags(cls, v: List[str]) -> List[str]:
        """Drop blank tags; matching is otherwise exact."""
        return [tag.strip() for tag in v if tag and tag.strip()]


# ---------------------------------------------------------------------------
# Generated workout
# ---------------------------------------------------------------------------


class GeneratedExercise(BaseModel):
    """A concrete exercise prescription."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    movement: Optional[Movement]
    sets: int
    reps: str
    load: Optional[str] = None
    duration: Optional[int] = Field(None, description="Seconds")
    notes: Optional[str] = None


class GeneratedBlock(BaseModel):
    """An ordered group of exercises."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    kind: BlockKind
    structure: str
    exercises: List[GeneratedExercise] = Field(default_factory=list)
    sets: Optional[int] = None
    rest_seconds: Optional[int] = None
    notes: Optional[str] = None


class WorkoutMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    template: str
    patterns: List[MovementPattern]
    equipment: List[str]
    progression: str


class GeneratedWorkout(BaseModel):
    """The engine's sole output. Never mutated after construction."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    total_minutes: int
    estimated_intensity: int
    blocks: List[GeneratedBlock] = Field(default_factory=list)
    coaching_notes: str
    metadata: Optional[WorkoutMetadata] = None


# ---------------------------------------------------------------------------
# Result envelope
# ---------------------------------------------------------------------------


class GeneratorChoices(BaseModel):
    """Every decision needed to replay a generation."""

    template_id: str = ""
    movement_pool_ids: List[str] = Field(default_factory=list)
    scheme_id: str = "default"


class GenerationMetadata(BaseModel):
    template_used: str
    progression_applied: str
    intensity_capped: bool
    total_movements: int
    generator_version: str


class GenerationResult(BaseModel):
    """Workout plus the audit trail of how it was produced."""

    workout: GeneratedWorkout
    choices: GeneratorChoices
    metadata: GenerationMetadata
