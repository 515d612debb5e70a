"""
Progression analyzer for history-driven progressive overload.

Inspects recent workout history to decide whether the next session should
add load, add volume, add density, hold steady, or deload.

Missing or partial history never raises: absence of data always degrades
to a conservative default.
"""

import logging
import math
import random
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from application.ports import FeedbackRepository
from core.constants import (
    DEFAULT_DAYS_SINCE_SAME_ARCHETYPE,
    DEFAULT_LAST_RPE,
    DEFAULT_PHASE_INTENSITY,
    DEFAULT_RECOVERY_SCORE,
    FEEDBACK_LOOKUP_LIMIT,
    HIGH_INTENSITY_THRESHOLD,
    HISTORY_WINDOW_DAYS,
    PHASE_WINDOW_DAYS,
)
from models.history import (
    ProgressionContext,
    ProgressionDirectives,
    ProgressionType,
    TrainingPhase,
    WorkoutFeedback,
    WorkoutHistoryEntry,
)
from models.template import Archetype

logger = logging.getLogger(__name__)

RandomSource = Callable[[], float]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _reference_time(as_of: Optional[datetime]) -> datetime:
    return _as_utc(as_of) if as_of is not None else datetime.now(timezone.utc)


def _archetype_value(archetype: Archetype | str) -> str:
    return archetype.value if hasattr(archetype, "value") else str(archetype)


class ProgressionAnalyzer:
    """
    Generates progression directives from recent training history.

    Decision flow:
    1. Enrich history with RPE ratings from the feedback store (best-effort)
    2. Summarise the last four weeks into a ProgressionContext
    3. Branch by archetype (strength, conditioning/mixed, endurance)
    """

    # Strength thresholds
    DELOAD_CONSECUTIVE_HIGH = 4
    DELOAD_RECOVERY_FLOOR = 4
    LOW_RPE = 7
    HIGH_RPE = 9
    GOOD_RECOVERY = 6
    POOR_RECOVERY = 5

    # Conditioning thresholds
    CONDITIONING_DELOAD_EXPOSURES = 4
    CONDITIONING_DELOAD_CONSECUTIVE_HIGH = 3
    CONDITIONING_MIN_EXPOSURES = 2

    # Endurance threshold
    ENDURANCE_RECOVERY = 7

    def __init__(
        self,
        feedback_repo: Optional[FeedbackRepository] = None,
        history_window_days: int = HISTORY_WINDOW_DAYS,
        feedback_lookup_limit: int = FEEDBACK_LOOKUP_LIMIT,
    ):
        """
        Initialize the analyzer.

        Args:
            feedback_repo: Optional feedback store used for RPE enrichment
            history_window_days: How far back history is considered
            feedback_lookup_limit: RPE records requested per enrichment
        """
        self._feedback_repo = feedback_repo
        self._history_window_days = history_window_days
        self._feedback_lookup_limit = feedback_lookup_limit

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def generate_directives(
        self,
        user_id: Optional[str],
        history: Sequence[WorkoutHistoryEntry],
        archetype: Archetype | str,
        rng: Optional[RandomSource] = None,
        as_of: Optional[datetime] = None,
    ) -> ProgressionDirectives:
        """
        Generate progression directives for the next session.

        Args:
            user_id: User whose feedback enriches the history
            history: Past workouts, any order
            archetype: Target archetype of the next session
            rng: Draw function for the conditioning volume/density choice.
                Without one the choice is not reproducible.
            as_of: Reference time for the history windows (default: now)

        Returns:
            ProgressionDirectives for the generator
        """
        enriched = await self.enrich_history(user_id, history)
        context = self.analyze_history(enriched, archetype, as_of=as_of)
        archetype_str = _archetype_value(archetype)

        if archetype_str == Archetype.STRENGTH.value:
            directives = self._strength_progression(context, archetype_str)
        elif archetype_str in (Archetype.CONDITIONING.value, Archetype.MIXED.value):
            directives = self._conditioning_progression(context, archetype_str, rng)
        elif archetype_str == Archetype.ENDURANCE.value:
            directives = self._endurance_progression(context)
        else:
            directives = ProgressionDirectives(
                progression_type=ProgressionType.SKILL,
                reasoning="Unknown archetype - maintaining current level",
            )

        logger.info(
            f"Progression for {archetype_str}: {directives.progression_type.value} "
            f"(phase={context.training_phase.value}, "
            f"consecutive_high={context.consecutive_high_intensity}, "
            f"recovery={context.avg_recovery_score:.1f})"
        )
        return directives

    async def enrich_history(
        self,
        user_id: Optional[str],
        history: Sequence[WorkoutHistoryEntry],
    ) -> List[WorkoutHistoryEntry]:
        """
        Attach RPE ratings from the feedback store.

        Enrichment is best-effort: any failure is logged and the original
        history is returned unchanged.
        """
        entries = list(history)
        if self._feedback_repo is None or not user_id or not entries:
            return entries

        try:
            records = await self._feedback_repo.get_recent_rpes(
                user_id, self._feedback_lookup_limit
            )
        except Exception as e:
            logger.warning(f"RPE enrichment failed for user {user_id}, using raw history: {e}")
            return entries

        rpe_by_workout: Dict[str, float] = {}
        for record in records:
            if record.perceived_intensity is not None:
                rpe_by_workout.setdefault(record.workout_id, record.perceived_intensity)

        if not rpe_by_workout:
            return entries

        return [
            entry.model_copy(update={"rpe": rpe_by_workout[entry.id]})
            if entry.id in rpe_by_workout
            else entry
            for entry in entries
        ]

    def analyze_history(
        self,
        history: Sequence[WorkoutHistoryEntry],
        archetype: Archetype | str,
        as_of: Optional[datetime] = None,
    ) -> ProgressionContext:
        """Summarise recent history relative to ``as_of``."""
        now = _reference_time(as_of)
        archetype_str = _archetype_value(archetype)
        cutoff = now - timedelta(days=self._history_window_days)

        ordered = sorted(history, key=lambda w: _as_utc(w.date), reverse=True)
        recent = [w for w in ordered if _as_utc(w.date) >= cutoff]

        last_same = next((w for w in recent if w.archetype == archetype_str), None)
        if last_same is not None:
            days_since = math.floor((now - _as_utc(last_same.date)).total_seconds() / 86400)
        else:
            days_since = DEFAULT_DAYS_SINCE_SAME_ARCHETYPE

        consecutive_high = 0
        for workout in recent:
            if workout.effective_intensity >= HIGH_INTENSITY_THRESHOLD:
                consecutive_high += 1
            else:
                break

        with_feedback = [w for w in recent if w.feedback is not None]
        if with_feedback:
            avg_recovery = sum(10 - w.feedback.difficulty for w in with_feedback) / len(with_feedback)
        else:
            avg_recovery = DEFAULT_RECOVERY_SCORE

        return ProgressionContext(
            recent_workouts=recent,
            days_since_last_same_archetype=days_since,
            consecutive_high_intensity=consecutive_high,
            avg_recovery_score=avg_recovery,
            training_phase=self.determine_training_phase(recent, consecutive_high, as_of=now),
        )

    def determine_training_phase(
        self,
        recent: Sequence[WorkoutHistoryEntry],
        consecutive_high: int,
        as_of: Optional[datetime] = None,
    ) -> TrainingPhase:
        """Classify the current phase from consecutive load and 14-day intensity."""
        if consecutive_high >= self.DELOAD_CONSECUTIVE_HIGH:
            return TrainingPhase.DELOAD

        cutoff = _reference_time(as_of) - timedelta(days=PHASE_WINDOW_DAYS)
        last_two_weeks = [w for w in recent if _as_utc(w.date) >= cutoff]

        if last_two_weeks:
            avg_intensity = sum(w.effective_intensity for w in last_two_weeks) / len(last_two_weeks)
        else:
            avg_intensity = DEFAULT_PHASE_INTENSITY

        if avg_intensity >= 7.5:
            return TrainingPhase.REALIZATION
        if avg_intensity >= 6:
            return TrainingPhase.INTENSIFICATION
        return TrainingPhase.ACCUMULATION

    # -------------------------------------------------------------------------
    # Archetype branches
    # -------------------------------------------------------------------------

    def _strength_progression(
        self, context: ProgressionContext, archetype: str
    ) -> ProgressionDirectives:
        same_archetype = [w for w in context.recent_workouts if w.archetype == archetype][:4]

        if (
            context.consecutive_high_intensity >= self.DELOAD_CONSECUTIVE_HIGH
            or context.avg_recovery_score < self.DELOAD_RECOVERY_FLOOR
            or context.training_phase == TrainingPhase.DELOAD
        ):
            return ProgressionDirectives(
                load_adjustment=0.8,
                volume_adjustment=0.7,
                intensity_adjustment=-2,
                deload_recommended=True,
                progression_type=ProgressionType.DELOAD,
                reasoning="Deload recommended due to accumulated fatigue",
            )

        if not same_archetype:
            return ProgressionDirectives(
                load_adjustment=0.9,
                volume_adjustment=0.9,
                progression_type=ProgressionType.LOAD,
                reasoning="Conservative start due to no recent history",
            )

        last = same_archetype[0]
        if last.rpe is not None:
            last_rpe = last.rpe
        elif last.feedback is not None:
            last_rpe = last.feedback.difficulty
        else:
            last_rpe = DEFAULT_LAST_RPE

        if last_rpe < self.LOW_RPE and context.avg_recovery_score > self.GOOD_RECOVERY:
            return ProgressionDirectives(
                load_adjustment=1.05,
                progression_type=ProgressionType.LOAD,
                reasoning="Increasing load due to low perceived exertion",
            )

        if last_rpe >= self.HIGH_RPE or context.avg_recovery_score < self.POOR_RECOVERY:
            return ProgressionDirectives(
                load_adjustment=0.95,
                intensity_adjustment=-1,
                progression_type=ProgressionType.DELOAD,
                reasoning="Reducing load due to high fatigue indicators",
            )

        return ProgressionDirectives(
            volume_adjustment=1.1,
            progression_type=ProgressionType.VOLUME,
            reasoning="Adding volume while maintaining load",
        )

    def _conditioning_progression(
        self,
        context: ProgressionContext,
        archetype: str,
        rng: Optional[RandomSource],
    ) -> ProgressionDirectives:
        same_archetype = [w for w in context.recent_workouts if w.archetype == archetype][:4]

        if (
            len(same_archetype) >= self.CONDITIONING_DELOAD_EXPOSURES
            or context.consecutive_high_intensity >= self.CONDITIONING_DELOAD_CONSECUTIVE_HIGH
            or context.avg_recovery_score < self.POOR_RECOVERY
        ):
            return ProgressionDirectives(
                load_adjustment=0.9,
                volume_adjustment=0.8,
                intensity_adjustment=-1,
                deload_recommended=True,
                progression_type=ProgressionType.DELOAD,
                reasoning="Deload recommended for conditioning recovery",
            )

        exposures = min(len(same_archetype), 3)
        if exposures >= self.CONDITIONING_MIN_EXPOSURES and context.avg_recovery_score > self.GOOD_RECOVERY:
            draw = rng() if rng is not None else random.random()
            if draw > 0.5:
                return ProgressionDirectives(
                    volume_adjustment=1.1,
                    progression_type=ProgressionType.VOLUME,
                    reasoning="Increasing volume for conditioning adaptation",
                )
            return ProgressionDirectives(
                intensity_adjustment=1,
                progression_type=ProgressionType.DENSITY,
                reasoning="Increasing density for conditioning adaptation",
            )

        return ProgressionDirectives(
            progression_type=ProgressionType.SKILL,
            reasoning="Maintaining current level for adaptation",
        )

    def _endurance_progression(self, context: ProgressionContext) -> ProgressionDirectives:
        if context.avg_recovery_score > self.ENDURANCE_RECOVERY:
            return ProgressionDirectives(
                volume_adjustment=1.05,
                progression_type=ProgressionType.VOLUME,
                reasoning="Gradual volume increase for endurance base",
            )

        return ProgressionDirectives(
            progression_type=ProgressionType.SKILL,
            reasoning="Maintaining endurance base",
        )


# ---------------------------------------------------------------------------
# History helpers
# ---------------------------------------------------------------------------


def needs_recovery_week(
    history: Sequence[WorkoutHistoryEntry],
    as_of: Optional[datetime] = None,
    window_days: int = HISTORY_WINDOW_DAYS,
) -> bool:
    """True after 8+ high-intensity sessions or an average RPE of 8+ in the window."""
    cutoff = _reference_time(as_of) - timedelta(days=window_days)
    recent = [w for w in history if _as_utc(w.date) >= cutoff]
    if not recent:
        return False

    high_count = sum(1 for w in recent if w.effective_intensity >= HIGH_INTENSITY_THRESHOLD)
    avg_rpe = sum(w.rpe if w.rpe is not None else DEFAULT_LAST_RPE for w in recent) / len(recent)

    return high_count >= 8 or avg_rpe >= 8


def map_category_to_archetype(category: Optional[str]) -> Archetype:
    """Map legacy workout category names to archetypes. Unknown maps to mixed."""
    value = (category or "").strip().lower()

    if value in ("strength", "powerlifting", "olympic"):
        return Archetype.STRENGTH
    if value in ("crossfit", "hiit", "crossfit/hiit"):
        return Archetype.MIXED
    if value in ("cardio", "endurance", "running", "cycling"):
        return Archetype.ENDURANCE
    if value in ("conditioning", "metabolic"):
        return Archetype.CONDITIONING
    return Archetype.MIXED


def convert_to_history_entry(record: Dict[str, Any]) -> WorkoutHistoryEntry:
    """
    Build a history entry from a persisted workout record.

    Expected keys (all but ``id`` and ``created_at`` optional):
    ``category``, ``request.category``, ``request.intensity``, ``feedback``,
    ``sets``, ``completed``.
    """
    request = record.get("request") or {}
    feedback = record.get("feedback") or None
    difficulty = feedback.get("difficulty") if feedback else None
    sets = record.get("sets") or []

    return WorkoutHistoryEntry(
        id=str(record["id"]),
        date=record["created_at"],
        archetype=map_category_to_archetype(record.get("category") or request.get("category")).value,
        target_intensity=request.get("intensity") or 5,
        actual_intensity=difficulty,
        volume=len(sets) or 10,
        rpe=difficulty,
        completed=bool(record.get("completed")),
        feedback=(
            WorkoutFeedback(
                difficulty=difficulty,
                satisfaction=feedback.get("satisfaction"),
            )
            if difficulty is not None
            else None
        ),
    )
