"""
Intensity mapping and health-modifier caps.

Maps a 1-10 target intensity to concrete training parameters and applies
safety caps from the user's health modifiers. Caps only ever lower the
effective intensity.
"""

import logging
import math
from typing import Dict, Optional, Tuple

from core.constants import MAX_INTENSITY, MIN_INTENSITY
from models.intensity import (
    HealthModifiers,
    HeartRateZone,
    IntensityParameters,
    SessionIntensityPlan,
    SessionPhase,
)

logger = logging.getLogger(__name__)


def _params(sets, rest, tut, load, complexity, volume) -> IntensityParameters:
    return IntensityParameters(
        total_sets=sets,
        avg_rest_seconds=rest,
        time_under_tension=tut,
        load_percentage=load,
        complexity_limit=complexity,
        volume_multiplier=volume,
    )


# Base mapping without health constraints
INTENSITY_TABLE: Dict[int, IntensityParameters] = {
    1: _params(8, 60, 20, (40, 55), 2, 0.7),
    2: _params(10, 75, 25, (45, 60), 2, 0.8),
    3: _params(12, 90, 30, (50, 65), 3, 0.9),
    4: _params(14, 105, 35, (55, 70), 3, 1.0),
    5: _params(16, 120, 40, (60, 75), 3, 1.0),
    6: _params(18, 135, 45, (65, 80), 4, 1.1),
    7: _params(20, 150, 50, (70, 85), 4, 1.1),
    8: _params(22, 165, 55, (75, 90), 4, 1.2),
    9: _params(24, 180, 60, (80, 95), 5, 1.2),
    10: _params(26, 200, 65, (85, 100), 5, 1.3),
}

# %HRmax window per intensity level
HEART_RATE_ZONES: Dict[int, Tuple[float, float]] = {
    1: (0.50, 0.60),  # Recovery
    2: (0.60, 0.65),  # Aerobic base
    3: (0.65, 0.70),  # Aerobic
    4: (0.70, 0.75),  # Aerobic threshold
    5: (0.75, 0.80),  # Tempo
    6: (0.80, 0.85),  # Lactate threshold
    7: (0.85, 0.90),  # VO2 max
    8: (0.90, 0.95),  # Neuromuscular
    9: (0.95, 0.98),  # Alactic
    10: (0.98, 1.00),  # Peak
}

DEFAULT_MAX_HEART_RATE = 190

# Health thresholds
LOW_VITALITY = 40
LOW_OVERALL_SCORE = 40
LOW_PERFORMANCE_POTENTIAL = 35
HIGH_STRESS = 7
LOW_RECOVERY = 30
LOW_CIRCADIAN = 35

SHORTENED_SESSION_FACTOR = 0.8


def clamp_intensity(value: float) -> int:
    """Round and clamp an intensity into the supported 1-10 range."""
    return int(max(MIN_INTENSITY, min(MAX_INTENSITY, round(value))))


def apply_health_caps(target_intensity: int, modifiers: Optional[HealthModifiers] = None) -> int:
    """
    Cap target intensity using health modifiers.

    Each condition sets an independent ceiling; the tightest wins. Absent
    modifier fields impose no cap. The result never exceeds the target and
    never drops below 1.
    """
    capped = target_intensity
    if modifiers is None:
        return max(MIN_INTENSITY, capped)

    if (modifiers.vitality is not None and modifiers.vitality < LOW_VITALITY) or (
        modifiers.overall_score is not None and modifiers.overall_score < LOW_OVERALL_SCORE
    ):
        capped = min(capped, 6)

    if (
        modifiers.performance_potential is not None
        and modifiers.performance_potential < LOW_PERFORMANCE_POTENTIAL
    ):
        capped = min(capped, 5)

    if modifiers.stress is not None and modifiers.stress > HIGH_STRESS:
        capped = min(capped, 4)

    if modifiers.recovery is not None and modifiers.recovery < LOW_RECOVERY:
        capped = min(capped, 5)

    if capped < target_intensity:
        logger.debug(f"Health caps lowered intensity {target_intensity} -> {capped}")

    return max(MIN_INTENSITY, capped)


def _has_low_performance(modifiers: Optional[HealthModifiers]) -> bool:
    return (
        modifiers is not None
        and modifiers.performance_potential is not None
        and modifiers.performance_potential < LOW_PERFORMANCE_POTENTIAL
    )


def adjust_volume_for_performance(
    params: IntensityParameters,
    modifiers: Optional[HealthModifiers] = None,
) -> IntensityParameters:
    """
    Reduce volume and bias toward aerobic work when performance potential is low.

    Volume multiplier and total sets drop by 20% (minimum 6 sets); rest is
    capped at 90 seconds and the load range shifts down by 10 points.
    """
    if not _has_low_performance(modifiers):
        return params

    low, high = params.load_percentage
    return params.model_copy(
        update={
            "volume_multiplier": params.volume_multiplier * 0.8,
            "total_sets": max(6, math.floor(params.total_sets * 0.8)),
            "avg_rest_seconds": min(90, params.avg_rest_seconds),
            "load_percentage": (max(40, low - 10), max(60, high - 10)),
        }
    )


def should_shorten_session(modifiers: Optional[HealthModifiers] = None) -> bool:
    """Sessions are shortened when circadian alignment is poor."""
    return (
        modifiers is not None
        and modifiers.circadian is not None
        and modifiers.circadian < LOW_CIRCADIAN
    )


def get_intensity_parameters(
    target_intensity: int,
    modifiers: Optional[HealthModifiers] = None,
) -> IntensityParameters:
    """
    Get training parameters for a target intensity.

    Out-of-range targets are clamped into 1-10 before the health caps and
    the performance adjustment are applied.
    """
    capped = apply_health_caps(clamp_intensity(target_intensity), modifiers)
    return adjust_volume_for_performance(INTENSITY_TABLE[capped], modifiers)


def _phase_description(phase_index: int, total_phases: int, intensity: int) -> str:
    if phase_index == 0:
        return "Warm-up and activation"
    if phase_index == total_phases - 1:
        return "Cool-down and recovery"
    if intensity <= 3:
        return "Easy preparation"
    if intensity <= 5:
        return "Moderate work"
    if intensity <= 7:
        return "Challenging effort"
    if intensity <= 9:
        return "High intensity"
    return "Maximum effort"


def create_session_intensity_plan(
    target_intensity: int,
    session_minutes: float,
    modifiers: Optional[HealthModifiers] = None,
) -> SessionIntensityPlan:
    """
    Build a ramp, peak and taper wave across the session.

    Three phases use a fixed ramp/peak/taper split. Four to six phases
    follow a sine curve rising two points above the ramp level at the
    middle of the session.
    """
    capped = apply_health_caps(clamp_intensity(target_intensity), modifiers)

    minutes = session_minutes
    if should_shorten_session(modifiers):
        minutes = session_minutes * SHORTENED_SESSION_FACTOR

    num_phases = max(3, min(6, math.floor(minutes / 8)))
    phase_minutes = minutes / num_phases
    base = max(1, capped - 2)

    phases = []
    for i in range(num_phases):
        if num_phases <= 3:
            if i == 0:
                intensity = base
            elif i == 1:
                intensity = capped
            else:
                intensity = max(1, capped - 1)
        else:
            progress = i / (num_phases - 1)
            intensity = int(round(base + math.sin(progress * math.pi) * 2))

        phases.append(
            SessionPhase(
                phase_index=i,
                duration=phase_minutes,
                intensity=intensity,
                description=_phase_description(i, num_phases, intensity),
            )
        )

    peak_value = max(p.intensity for p in phases)
    peak_phase = next(p.phase_index for p in phases if p.intensity == peak_value)
    avg_intensity = sum(p.intensity for p in phases) / len(phases)

    return SessionIntensityPlan(
        phases=phases,
        peak_phase=peak_phase,
        avg_intensity=avg_intensity,
        total_minutes=minutes,
    )


def get_rest_recommendation(intensity: int, exercise_type: str = "strength") -> float:
    """Rest between exercises in seconds for the given exercise type."""
    params = INTENSITY_TABLE.get(intensity)
    base_rest = params.avg_rest_seconds if params else 120

    if exercise_type == "conditioning":
        return max(30, base_rest * 0.5)
    if exercise_type == "skill":
        return max(60, base_rest * 0.7)
    return base_rest


def get_heart_rate_zones(intensity: int, max_hr: Optional[int] = None) -> HeartRateZone:
    """Target heart rate window for an intensity level."""
    max_hr = max_hr or DEFAULT_MAX_HEART_RATE
    min_pct, max_pct = HEART_RATE_ZONES.get(intensity, (0.70, 0.80))
    return HeartRateZone(
        min=round(max_hr * min_pct),
        max=round(max_hr * max_pct),
        target=round(max_hr * (min_pct + max_pct) / 2),
    )
