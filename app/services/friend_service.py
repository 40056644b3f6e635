"""
친구 관계 조회 헬퍼
친구 여부는 양방향 중 하나라도 ACCEPTED 요청이 있는지로 판단
"""

from typing import List, Optional, Set

from sqlalchemy import select, or_, and_
from sqlalchemy.orm import Session

from app.models.friend import FriendRequest
from app.models.user import User


def _between(user_id: int, other_id: int):
    return or_(
        and_(FriendRequest.requester_id == user_id, FriendRequest.recipient_id == other_id),
        and_(FriendRequest.requester_id == other_id, FriendRequest.recipient_id == user_id),
    )


def requests_between(db: Session, user_id: int, other_id: int) -> List[FriendRequest]:
    result = db.execute(select(FriendRequest).where(_between(user_id, other_id)))
    return list(result.scalars().all())


def find_pending_request(db: Session, user_id: int, other_id: int) -> Optional[FriendRequest]:
    """양방향 중 대기 중인 요청"""
    result = db.execute(
        select(FriendRequest).where(_between(user_id, other_id), FriendRequest.status == "PENDING")
    )
    return result.scalars().first()


def are_friends(db: Session, user_id: int, other_id: int) -> bool:
    result = db.execute(
        select(FriendRequest.id).where(_between(user_id, other_id), FriendRequest.status == "ACCEPTED")
    )
    return result.first() is not None


def accepted_requests(db: Session, user_id: int) -> List[FriendRequest]:
    result = db.execute(
        select(FriendRequest)
        .where(
            or_(FriendRequest.requester_id == user_id, FriendRequest.recipient_id == user_id),
            FriendRequest.status == "ACCEPTED",
        )
        .order_by(FriendRequest.updated_at)
    )
    return list(result.scalars().all())


def friend_ids(db: Session, user_id: int) -> Set[int]:
    return {request.other_user_id(user_id) for request in accepted_requests(db, user_id)}


def user_summary(user: User) -> dict:
    return {
        "userId": user.id,
        "username": user.username,
        "email": user.email,
        "name": user.name,
    }
