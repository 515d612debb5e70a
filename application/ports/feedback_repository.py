"""
Feedback repository port (interface).

This Protocol defines the read contract the progression analyzer needs
from the workout feedback store. Persistence itself is owned elsewhere.
"""

from typing import List, Protocol

from models.history import RPERecord


class FeedbackRepository(Protocol):
    """
    Repository interface for post-workout feedback.

    Used only to enrich workout history with perceived-exertion ratings.
    """

    async def get_recent_rpes(self, user_id: str, limit: int = 10) -> List[RPERecord]:
        """
        Get the user's most recent RPE ratings.

        Args:
            user_id: The user's ID
            limit: Maximum number of records to return

        Returns:
            RPE records ordered newest first
        """
        ...
