"""
데이터베이스 모델
"""

from app.models.user import User
from app.models.quiz import Quiz, Attempt
from app.models.friend import FriendRequest
from app.models.multiplayer import MultiplayerSession, SessionPlayer, SessionInvite

__all__ = [
    "User",
    "Quiz",
    "Attempt",
    "FriendRequest",
    "MultiplayerSession",
    "SessionPlayer",
    "SessionInvite",
]
