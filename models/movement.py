"""
Movement models for the exercise catalog.

Movements are immutable catalog entries; nothing in the generator
mutates them after the catalog is loaded.
"""

from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class MovementPattern(str, Enum):
    """Biomechanical movement pattern taxonomy."""

    HINGE = "hinge"
    SQUAT = "squat"
    PUSH = "push"
    PULL = "pull"
    CORE = "core"
    MONO = "mono"  # Unilateral lower body
    CARRY = "carry"
    ROTATION = "rotation"


class Plane(str, Enum):
    """Plane of motion."""

    SAGITTAL = "sagittal"
    FRONTAL = "frontal"
    TRANSVERSE = "transverse"
    MULTI = "multi"


class EnergySystem(str, Enum):
    """Dominant energy system of a movement."""

    ALACTIC = "alactic"
    GLYCOLYTIC = "glycolytic"
    AEROBIC = "aerobic"
    MIXED = "mixed"


class Loadability(str, Enum):
    """How much external load a movement tolerates."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    SKILL = "skill"


class Movement(BaseModel):
    """A single exercise definition from the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    pattern: MovementPattern
    equipment: Tuple[str, ...] = Field(
        ..., min_length=1, description="Equipment tags, any one of which enables the movement"
    )
    plane: Plane
    energy_system: EnergySystem
    loadability: Loadability
    complexity: int = Field(..., ge=1, le=5, description="1=beginner, 5=expert")
    unilateral: bool = False
    compound: bool = False
