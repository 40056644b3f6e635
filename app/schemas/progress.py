"""
진행도 (XP/레벨/업적/일일 챌린지) 스키마
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict, Any
from datetime import datetime


class ResultSubmitRequest(BaseModel):
    """클라이언트에서 푼 퀴즈 결과 기록 (외부 API / 로컬 문제)"""
    source: str = Field("OPENTDB", max_length=32)
    category: Optional[str] = None
    difficulty: Optional[str] = None
    score: int = Field(..., ge=0, description="맞힌 문제 수")
    total: int = Field(..., ge=1, description="전체 문제 수")
    maxStreak: int = Field(0, ge=0)
    durationSeconds: Optional[int] = Field(None, ge=0)
    firstCorrect: bool = False
    finishedAt: Optional[datetime] = Field(None, description="사용자 로컬 시간대 기준 완료 시각")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "source": "OPENTDB",
                "category": "Science & Nature",
                "difficulty": "medium",
                "score": 9,
                "total": 10,
                "maxStreak": 6,
                "durationSeconds": 95,
                "firstCorrect": True,
                "finishedAt": "2025-01-09T21:30:00+09:00"
            }
        }
    )


class AchievementOut(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    rarity: str
    xp: int
    unlocked: bool = False


class ProgressUpdate(BaseModel):
    """결과 기록 후 진행도 변화"""
    attemptId: Optional[int] = None
    xpGained: int
    totalXp: int
    level: int
    leveledUp: bool
    newAchievements: List[AchievementOut]
    dailyChallengeCompleted: bool


class ProgressResponse(BaseModel):
    level: int
    xp: int
    xpToNext: int
    totalXp: int
    title: str
    achievements: List[AchievementOut]
    stats: Dict[str, Any]


class AchievementListResponse(BaseModel):
    achievements: List[AchievementOut]
    unlockedCount: int


class DailyChallengeResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    difficulty: str
    reward: Dict[str, int]
    config: Dict[str, Any]
    date: str
    completed: bool
    secondsUntilReset: int
