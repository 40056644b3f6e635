"""
멀티플레이어 세션 스키마
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any, Literal
from datetime import datetime


class QuizConfig(BaseModel):
    source: Literal["opentdb", "triviaapi"] = "opentdb"
    amount: int = Field(10, ge=1, le=50)
    difficulty: Optional[Literal["easy", "medium", "hard"]] = "medium"
    category: Optional[str] = None


class SessionCreateRequest(BaseModel):
    quizConfig: Optional[QuizConfig] = None
    visibility: Literal["PUBLIC", "PRIVATE", "FRIENDS_ONLY"] = "PRIVATE"
    maxPlayers: Optional[int] = Field(None, ge=1, le=50)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "quizConfig": {"source": "opentdb", "amount": 10, "difficulty": "medium"},
                "visibility": "PUBLIC",
                "maxPlayers": 8
            }
        }
    )


class SessionCreateResponse(BaseModel):
    sessionCode: str
    sessionId: int
    status: str


class SessionJoinRequest(BaseModel):
    sessionCode: str = Field(..., min_length=1)


class PlayerOut(BaseModel):
    userId: int
    username: str
    score: int
    isHost: bool
    currentQuestion: int
    finished: bool
    joinedAt: Optional[datetime] = None


class SessionJoinResponse(BaseModel):
    sessionCode: str
    players: List[PlayerOut]
    status: str


class SessionDetailResponse(BaseModel):
    sessionCode: str
    hostId: int
    players: List[PlayerOut]
    status: str
    maxPlayers: int
    visibility: str
    quizConfig: Dict[str, Any]
    questions: List[Dict[str, Any]]
    startedAt: Optional[datetime] = None
    finishedAt: Optional[datetime] = None


class PublicSessionOut(BaseModel):
    sessionCode: str
    hostUsername: Optional[str] = None
    playerCount: int
    maxPlayers: int
    quizConfig: Dict[str, Any]


class PublicSessionListResponse(BaseModel):
    sessions: List[PublicSessionOut]


class SessionStartRequest(BaseModel):
    questions: Optional[List[Dict[str, Any]]] = Field(
        None, description="없으면 quizConfig 기준으로 서버가 외부 API에서 가져옴"
    )


class SessionStartResponse(BaseModel):
    sessionCode: str
    status: str
    questions: List[Dict[str, Any]]
    startedAt: Optional[datetime] = None


class AnswerRequest(BaseModel):
    questionIndex: int = Field(..., ge=0)
    answer: Optional[str] = Field(None, description="선택한 보기 텍스트")
    isCorrect: Optional[bool] = None


class AnswerResponse(BaseModel):
    score: int
    currentQuestion: int
    finished: bool


class LeaderboardEntry(BaseModel):
    userId: int
    username: str
    score: int
    isHost: bool
    finished: bool
    currentQuestion: int


class LeaderboardResponse(BaseModel):
    leaderboard: List[LeaderboardEntry]


class InviteRequest(BaseModel):
    sessionCode: str
    friendIds: List[int] = Field(..., min_length=1)


class InviteResponse(BaseModel):
    message: str
    invitedCount: int


class InviteOut(BaseModel):
    sessionCode: str
    hostUsername: Optional[str] = None
    invitedBy: int
    invitedAt: Optional[datetime] = None
    status: str


class InviteListResponse(BaseModel):
    invites: List[InviteOut]
