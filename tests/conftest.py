"""
Pytest fixtures for workout engine tests.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List

import pytest

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from backend.settings import Settings
from models import Archetype, GenerationRequest, WorkoutFeedback, WorkoutHistoryEntry
from tests.fakes import FakeFeedbackRepository


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TEST_USER_ID = "test-user-123"
AS_OF = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

FULL_EQUIPMENT = [
    "barbell",
    "squat_rack",
    "dumbbell",
    "kettlebell",
    "pull_up_bar",
    "box",
    "rower",
    "bike",
    "floor",
    "bodyweight",
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """Test settings that ignore any local .env file."""
    return Settings(_env_file=None, environment="test")


@pytest.fixture
def feedback_repo() -> FakeFeedbackRepository:
    """Fresh in-memory feedback store."""
    return FakeFeedbackRepository()


@pytest.fixture
def make_request() -> Callable[..., GenerationRequest]:
    """Factory for generation requests with sensible defaults."""

    def _make(**overrides) -> GenerationRequest:
        values = {
            "seed": "user123_2024-01-15",
            "user_id": TEST_USER_ID,
            "archetype": Archetype.STRENGTH,
            "minutes": 45,
            "target_intensity": 6,
            "equipment": list(FULL_EQUIPMENT),
            "as_of": AS_OF,
        }
        values.update(overrides)
        return GenerationRequest(**values)

    return _make


@pytest.fixture
def make_history() -> Callable[..., List[WorkoutHistoryEntry]]:
    """
    Factory for workout history.

    Produces ``count`` entries one per ``spacing_days``, newest first,
    counting back from AS_OF.
    """

    def _make(
        count: int,
        archetype: str = "strength",
        intensity: float = 6,
        difficulty: float = None,
        rpe: float = None,
        spacing_days: int = 2,
    ) -> List[WorkoutHistoryEntry]:
        entries = []
        for i in range(count):
            entries.append(
                WorkoutHistoryEntry(
                    id=f"w{i + 1}",
                    date=AS_OF - timedelta(days=(i + 1) * spacing_days),
                    archetype=archetype,
                    target_intensity=intensity,
                    rpe=rpe,
                    completed=True,
                    feedback=WorkoutFeedback(difficulty=difficulty) if difficulty is not None else None,
                )
            )
        return entries

    return _make
