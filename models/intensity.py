"""
Intensity and health-modifier models.

Health modifiers are externally supplied wellness scores. They can only
cap intensity, never raise it. All fields are optional; an absent field
imposes no cap.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class HealthModifiers(BaseModel):
    """Snapshot of the user's wellness scores at generation time."""

    model_config = ConfigDict(frozen=True)

    vitality: Optional[float] = Field(None, ge=0, le=100)
    performance_potential: Optional[float] = Field(None, ge=0, le=100)
    stress: Optional[float] = Field(None, ge=0, le=10, description="0-10 scale")
    recovery: Optional[float] = Field(None, ge=0, le=100)
    circadian: Optional[float] = Field(None, ge=0, le=100, description="Circadian alignment")
    overall_score: Optional[float] = Field(None, ge=0, le=100)


class IntensityParameters(BaseModel):
    """Concrete training parameters for one intensity level."""

    model_config = ConfigDict(frozen=True)

    total_sets: int = Field(..., ge=1)
    avg_rest_seconds: int = Field(..., ge=0)
    time_under_tension: int = Field(..., ge=0, description="Seconds per set")
    load_percentage: Tuple[int, int]
    complexity_limit: int = Field(..., ge=1, le=5)
    volume_multiplier: float = Field(..., gt=0)


class SessionPhase(BaseModel):
    """One segment of the session intensity wave."""

    phase_index: int
    duration: float = Field(..., description="Minutes")
    intensity: int
    description: str


class SessionIntensityPlan(BaseModel):
    """Ramp, peak and taper across the session."""

    phases: List[SessionPhase]
    peak_phase: int
    avg_intensity: float
    total_minutes: float


class HeartRateZone(BaseModel):
    """Target heart rate window in beats per minute."""

    min: int
    max: int
    target: int
