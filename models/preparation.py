"""Warm-up and cool-down plan models."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from models.movement import Movement


class WarmupExercise(BaseModel):
    """A preparation exercise."""

    movement: Movement
    sets: int = Field(..., ge=1)
    reps: str
    duration: Optional[int] = Field(None, description="Seconds")
    intensity: Literal["light", "moderate"]
    purpose: Literal["mobility", "activation", "preparation"]


class CooldownExercise(BaseModel):
    """A recovery exercise."""

    movement: Movement
    sets: int = Field(..., ge=1)
    reps: Optional[str] = None
    duration: Optional[int] = Field(None, description="Seconds")
    purpose: Literal["recovery", "restoration", "breathing"]


class WarmupPlan(BaseModel):
    exercises: List[WarmupExercise]
    total_minutes: float
    description: str


class CooldownPlan(BaseModel):
    exercises: List[CooldownExercise]
    total_minutes: float
    description: str
