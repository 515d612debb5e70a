"""
Port interfaces (Protocols) for the workout generator.

The generator is a pure library; the only collaborator it talks to at
runtime is the feedback store used to enrich workout history with RPE
ratings. Infrastructure implementations must satisfy these Protocols.
"""

from application.ports.feedback_repository import FeedbackRepository

__all__ = [
    "FeedbackRepository",
]
