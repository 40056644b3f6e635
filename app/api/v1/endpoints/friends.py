"""
친구 API 엔드포인트
사용자 검색, 친구 요청/수락/거절, 친구 목록, 친구 삭제
"""

from fastapi import APIRouter, HTTPException, status, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import select, or_, and_
from typing import Optional
from datetime import datetime, timezone
import logging

from app.api.dependencies import get_current_user, get_user_or_404
from app.db.database import get_db
from app.models.friend import FriendRequest
from app.models.user import User
from app.schemas.friend import (
    UserSearchResponse,
    FriendRequestCreate,
    FriendRequestCreated,
    FriendRequestAction,
    FriendRequestListResponse,
    FriendAcceptedResponse,
    FriendListResponse,
    MessageResponse,
)
from app.services import friend_service

logger = logging.getLogger(__name__)

router = APIRouter()

SEARCH_LIMIT = 20


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _get_request_for_recipient(db: Session, request_id: int, user: User, action: str) -> FriendRequest:
    """수락/거절 공통 검증: 존재, 수신자 본인, 대기 상태"""
    result = db.execute(select(FriendRequest).where(FriendRequest.id == request_id))
    friend_request = result.scalar_one_or_none()

    if not friend_request:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Friend request not found",
        )

    if friend_request.recipient_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this request",
        )

    if friend_request.status != "PENDING":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request is not pending",
        )

    return friend_request


@router.get("/search", response_model=UserSearchResponse)
def search_users(
    query: Optional[str] = Query(None, description="사용자 이름, 이메일, 표시 이름 검색어 (2자 이상)"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """사용자 검색 (본인 제외, 최대 20명)"""
    if not query or len(query) < 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query must be at least 2 characters",
        )

    pattern = _like_pattern(query)
    result = db.execute(
        select(User)
        .where(
            User.id != current_user.id,
            or_(
                User.username.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
                User.name.ilike(pattern, escape="\\"),
            ),
        )
        .order_by(User.username)
        .limit(SEARCH_LIMIT)
    )
    users = result.scalars().all()

    logger.info(f"[사용자 검색] '{query}' - {len(users)}명")

    return UserSearchResponse(users=[friend_service.user_summary(user) for user in users])


@router.post("/request", response_model=FriendRequestCreated)
def send_friend_request(
    request: FriendRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    친구 요청 보내기

    거절/취소됐던 같은 방향의 요청은 다시 대기 상태로 열립니다.
    """
    if request.friendId == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot send friend request to yourself",
        )

    recipient = get_user_or_404(db, request.friendId)

    if friend_service.are_friends(db, current_user.id, recipient.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Already friends with this user",
        )

    if friend_service.find_pending_request(db, current_user.id, recipient.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Friend request already exists",
        )

    result = db.execute(
        select(FriendRequest).where(
            and_(
                FriendRequest.requester_id == current_user.id,
                FriendRequest.recipient_id == recipient.id,
            )
        )
    )
    friend_request = result.scalar_one_or_none()

    if friend_request:
        friend_request.status = "PENDING"
        friend_request.message = request.message or ""
        # 다시 보낸 요청은 최신 요청으로 정렬
        friend_request.created_at = datetime.now(timezone.utc)
    else:
        friend_request = FriendRequest(
            requester_id=current_user.id,
            recipient_id=recipient.id,
            message=request.message or "",
            status="PENDING",
        )
        db.add(friend_request)

    db.commit()
    db.refresh(friend_request)

    logger.info(f"[친구 요청] {current_user.username} -> {recipient.username} (ID {friend_request.id})")

    return FriendRequestCreated(message="Friend request sent", requestId=friend_request.id)


@router.get("/requests", response_model=FriendRequestListResponse)
def get_pending_requests(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """받은 친구 요청 목록 (최신순)"""
    result = db.execute(
        select(FriendRequest)
        .where(
            FriendRequest.recipient_id == current_user.id,
            FriendRequest.status == "PENDING",
        )
        .order_by(FriendRequest.created_at.desc(), FriendRequest.id.desc())
    )
    requests = result.scalars().all()

    return FriendRequestListResponse(
        requests=[
            {
                "id": friend_request.id,
                "requester": friend_service.user_summary(friend_request.requester),
                "message": friend_request.message,
                "status": friend_request.status,
                "createdAt": friend_request.created_at,
            }
            for friend_request in requests
        ]
    )


@router.post("/accept", response_model=FriendAcceptedResponse)
def accept_friend_request(
    request: FriendRequestAction,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """친구 요청 수락"""
    friend_request = _get_request_for_recipient(db, request.requestId, current_user, "accept")

    friend_request.status = "ACCEPTED"
    db.commit()

    requester = friend_request.requester
    logger.info(f"[친구 수락] {current_user.username} <-> {requester.username}")

    return FriendAcceptedResponse(
        message="Friend request accepted",
        friend=friend_service.user_summary(requester),
    )


@router.post("/decline", response_model=MessageResponse)
def decline_friend_request(
    request: FriendRequestAction,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """친구 요청 거절"""
    friend_request = _get_request_for_recipient(db, request.requestId, current_user, "decline")

    friend_request.status = "DECLINED"
    db.commit()

    logger.info(f"[친구 거절] 요청 ID {friend_request.id}")

    return MessageResponse(message="Friend request declined")


@router.get("", response_model=FriendListResponse)
def get_friends(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """친구 목록"""
    friends = []
    for friend_request in friend_service.accepted_requests(db, current_user.id):
        friend = (
            friend_request.recipient
            if friend_request.requester_id == current_user.id
            else friend_request.requester
        )
        entry = friend_service.user_summary(friend)
        entry["addedAt"] = friend_request.updated_at or friend_request.created_at
        friends.append(entry)

    return FriendListResponse(friends=friends)


@router.delete("/{friend_id}", response_model=MessageResponse)
def remove_friend(
    friend_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """친구 삭제 - 두 사용자 사이의 모든 요청을 CANCELLED로 변경"""
    friend = get_user_or_404(db, friend_id)

    for friend_request in friend_service.requests_between(db, current_user.id, friend.id):
        friend_request.status = "CANCELLED"
    db.commit()

    logger.info(f"[친구 삭제] {current_user.username} x {friend.username}")

    return MessageResponse(message="Friend removed successfully")
