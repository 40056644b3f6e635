"""
진행도 API 엔드포인트
퀴즈 결과 기록, XP/레벨, 업적, 일일 챌린지
"""

from fastapi import APIRouter, HTTPException, status, Depends
from sqlalchemy.orm import Session
from datetime import datetime
import logging

from app.api.dependencies import get_current_user
from app.db.database import get_db
from app.models.quiz import Attempt
from app.models.user import User
from app.schemas.progress import (
    ResultSubmitRequest,
    ProgressUpdate,
    ProgressResponse,
    AchievementListResponse,
    DailyChallengeResponse,
)
from app.services.progression import (
    ACHIEVEMENTS,
    ACHIEVEMENTS_BY_ID,
    achievement_public,
    apply_attempt,
    challenge_for_date,
    compute_stats,
    level_progress,
    load_attempts,
    local_wall_clock,
    seconds_until_reset,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/results", response_model=ProgressUpdate)
def record_result(
    request: ResultSubmitRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    클라이언트에서 푼 퀴즈 결과 기록

    외부 API 문제는 서버에 저장되지 않으므로 점수만 받아 진행도에 반영합니다.
    """
    if request.score > request.total:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Score cannot exceed the number of questions",
        )

    if request.maxStreak > request.total:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Streak cannot exceed the number of questions",
        )

    attempt = Attempt(
        user_id=current_user.id,
        quiz_id=None,
        source=request.source.upper(),
        category=request.category,
        difficulty=request.difficulty,
        score=request.score,
        max_score=request.total,
        max_streak=request.maxStreak,
        duration_ms=request.durationSeconds * 1000 if request.durationSeconds is not None else None,
        first_correct=request.firstCorrect,
        answers=[],
        finished_at=local_wall_clock(request.finishedAt),
    )
    db.add(attempt)
    db.flush()

    progress = apply_attempt(db, current_user, attempt)
    db.commit()

    logger.info(
        f"[결과 기록] 사용자 {current_user.username} {request.source} "
        f"{request.score}/{request.total} (XP +{progress['xpGained']})"
    )

    return ProgressUpdate(**progress)


@router.get("", response_model=ProgressResponse)
def get_progress(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """내 레벨, 업적, 통계"""
    stats = compute_stats(load_attempts(db, current_user.id))
    unlocked = [
        achievement_public(ACHIEVEMENTS_BY_ID[achievement_id], unlocked=True)
        for achievement_id in (current_user.achievements or [])
        if achievement_id in ACHIEVEMENTS_BY_ID
    ]

    return ProgressResponse(
        **level_progress(current_user.total_xp or 0),
        achievements=unlocked,
        stats=stats,
    )


@router.get("/achievements", response_model=AchievementListResponse)
def list_achievements(current_user: User = Depends(get_current_user)):
    """전체 업적 목록 (달성 여부 포함)"""
    unlocked = set(current_user.achievements or [])
    achievements = [achievement_public(a, unlocked=a["id"] in unlocked) for a in ACHIEVEMENTS]
    return AchievementListResponse(
        achievements=achievements,
        unlockedCount=sum(1 for a in achievements if a["unlocked"]),
    )


@router.get("/daily-challenge", response_model=DailyChallengeResponse)
def get_daily_challenge(current_user: User = Depends(get_current_user)):
    """오늘의 챌린지"""
    now = datetime.now()
    today = now.date()
    challenge = challenge_for_date(today)

    return DailyChallengeResponse(
        id=challenge["id"],
        name=challenge["name"],
        description=challenge["description"],
        icon=challenge["icon"],
        difficulty=challenge["difficulty"],
        reward=challenge["reward"],
        config=challenge["config"],
        date=today.isoformat(),
        completed=current_user.last_daily_challenge == today.isoformat(),
        secondsUntilReset=seconds_until_reset(now),
    )
