"""
친구 관련 스키마
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class FriendUser(BaseModel):
    userId: int
    username: str
    email: Optional[str] = None
    name: Optional[str] = None


class FriendEntry(FriendUser):
    addedAt: Optional[datetime] = None


class UserSearchResponse(BaseModel):
    users: List[FriendUser]


class FriendRequestCreate(BaseModel):
    """친구 요청 보내기"""
    friendId: int = Field(..., description="요청을 받을 사용자 ID")
    message: Optional[str] = Field(None, max_length=280, description="요청과 함께 보낼 메시지")


class FriendRequestCreated(BaseModel):
    message: str
    requestId: int


class FriendRequestAction(BaseModel):
    """친구 요청 수락/거절"""
    requestId: int


class FriendRequestOut(BaseModel):
    id: int
    requester: FriendUser
    message: Optional[str] = None
    status: str
    createdAt: Optional[datetime] = None


class FriendRequestListResponse(BaseModel):
    requests: List[FriendRequestOut]


class FriendAcceptedResponse(BaseModel):
    message: str
    friend: FriendUser


class FriendListResponse(BaseModel):
    friends: List[FriendEntry]


class MessageResponse(BaseModel):
    message: str
