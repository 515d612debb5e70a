"""
Fake Repository Implementations for Testing.

This package provides in-memory fake implementations of the engine's
ports for fast, isolated testing. No database or external dependencies
required.

Features:
- All fakes implement the same Protocol interfaces as real implementations
- Supports seeding with test data
- Supports reset() for test isolation
- Factory functions for common test scenarios

Usage:
    from tests.fakes import FakeFeedbackRepository, create_feedback_repo

    # Direct instantiation
    repo = FakeFeedbackRepository()
    repo.seed("user1", [RPERecord(workout_id="w1", perceived_intensity=8)])

    # Factory function with pre-populated data
    repo = create_feedback_repo(user_id="user1", rpes={"w1": 8, "w2": 6})
"""
from typing import Dict

from models.history import RPERecord
from tests.fakes.feedback_repository import FakeFeedbackRepository


# =============================================================================
# Factory Functions
# =============================================================================


def create_feedback_repo(
    *,
    user_id: str = "test_user",
    rpes: Dict[str, float] = None,
) -> FakeFeedbackRepository:
    """
    Create a FakeFeedbackRepository with optional pre-populated ratings.

    Args:
        user_id: User ID the ratings belong to
        rpes: Mapping of workout id to perceived intensity

    Returns:
        Pre-populated FakeFeedbackRepository
    """
    repo = FakeFeedbackRepository()
    if rpes:
        repo.seed(
            user_id,
            [
                RPERecord(workout_id=workout_id, perceived_intensity=rpe)
                for workout_id, rpe in rpes.items()
            ],
        )
    return repo


__all__ = [
    "FakeFeedbackRepository",
    "create_feedback_repo",
]
