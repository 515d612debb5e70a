"""
Workout template models.

A template is an archetype-bound structural recipe. Its blocks form a
tagged union keyed on ``structure``: set-based blocks carry sets, reps,
rest and load; time-capped blocks (EMOM/AMRAP) carry a time cap; interval
blocks carry rounds, work time and rest.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.movement import EnergySystem, MovementPattern


class Archetype(str, Enum):
    """High-level training goal that selects a template family."""

    STRENGTH = "strength"
    CONDITIONING = "conditioning"
    MIXED = "mixed"
    ENDURANCE = "endurance"


class BlockKind(str, Enum):
    """Role of a block within a workout."""

    WARMUP = "warmup"
    MAIN = "main"
    ACCESSORY = "accessory"
    CONDITIONING = "conditioning"
    COOLDOWN = "cooldown"


class MovementSlot(BaseModel):
    """How many movements of what kind a block needs."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(..., description="e.g. primary, accessory, mobility, cardio")
    patterns: Tuple[MovementPattern, ...] = Field(..., min_length=1)
    count: int = Field(default=1, ge=1)
    compound: Optional[bool] = None
    unilateral: Optional[bool] = None
    energy_system: Optional[EnergySystem] = None


class _TemplateBlockBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    kind: BlockKind
    slots: Tuple[MovementSlot, ...] = Field(..., min_length=1)
    reps: Optional[str] = None
    notes: Optional[str] = None


class SetBlock(_TemplateBlockBase):
    """Straight sets, supersets and circuits."""

    structure: Literal["straight", "superset", "circuit"]
    sets: Optional[int] = Field(default=None, ge=1)
    rest: Optional[int] = Field(default=None, ge=0, description="Rest between sets in seconds")
    load: Optional[str] = Field(default=None, description="e.g. '80-90%' or 'moderate'")
    time: Optional[int] = Field(default=None, ge=1, description="Work time in minutes")


class TimeCappedBlock(_TemplateBlockBase):
    """EMOM and AMRAP pieces bounded by a running clock."""

    structure: Literal["emom", "amrap"]
    time_cap: int = Field(..., ge=1, description="Time cap in minutes")


class IntervalBlock(_TemplateBlockBase):
    """Repeated work/rest intervals."""

    structure: Literal["intervals"]
    rounds: int = Field(..., ge=1)
    work_minutes: float = Field(..., gt=0)
    rest: int = Field(..., ge=0, description="Rest between rounds in seconds")


TemplateBlock = Annotated[
    Union[SetBlock, TimeCappedBlock, IntervalBlock],
    Field(discriminator="structure"),
]


class WorkoutTemplate(BaseModel):
    """An archetype-specific workout skeleton."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: Optional[str] = None
    archetype: Archetype
    min_minutes: int = Field(..., ge=1)
    max_minutes: int = Field(..., ge=1)
    intensity_range: Tuple[int, int]
    blocks: Tuple[TemplateBlock, ...] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_ranges(self) -> "WorkoutTemplate":
        """Ensure duration and intensity ranges are ordered."""
        if self.min_minutes > self.max_minutes:
            raise ValueError(
                f"Template {self.id}: min_minutes {self.min_minutes} exceeds max_minutes {self.max_minutes}"
            )
        low, high = self.intensity_range
        if not 1 <= low <= high <= 10:
            raise ValueError(f"Template {self.id}: invalid intensity range {self.intensity_range}")
        return self

    @property
    def midpoint_minutes(self) -> float:
        return (self.min_minutes + self.max_minutes) / 2

    def fits_duration(self, minutes: float) -> bool:
        return self.min_minutes <= minutes <= self.max_minutes

    def fits_intensity(self, intensity: int) -> bool:
        low, high = self.intensity_range
        return low <= intensity <= high

    def working_blocks(self) -> List[TemplateBlock]:
        """Blocks that are filled from the movement catalog."""
        return [
            block for block in self.blocks
            if block.kind not in (BlockKind.WARMUP, BlockKind.COOLDOWN)
        ]
