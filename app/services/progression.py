"""
진행도 서비스
XP/레벨 계산, 업적 달성 판정, 일일 챌린지

풀이 기록(Attempt)의 finished_at은 사용자 로컬 시각(타임존 제거) 기준으로 저장되어
시간대/날짜 기반 업적(Early Bird, Night Owl, 연속 플레이)을 그대로 판정할 수 있음
"""

from datetime import date, datetime, timedelta
from typing import List, Dict, Any, Optional, Iterable, Sequence
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.quiz import Attempt
from app.models.user import User

logger = logging.getLogger(__name__)

XP_PER_CORRECT_ANSWER = 10


# ---------------------------------------------------------------------------
# 레벨
# ---------------------------------------------------------------------------

LEVEL_TITLES = [
    (50, "Quiz Legend"),
    (40, "Quiz Master"),
    (30, "Quiz Expert"),
    (20, "Quiz Scholar"),
    (15, "Quiz Enthusiast"),
    (10, "Quiz Apprentice"),
    (5, "Quiz Novice"),
]


def xp_for_level(level: int) -> int:
    """해당 레벨에서 다음 레벨까지 필요한 XP (레벨마다 20%씩 증가)"""
    return int(100 * 1.2 ** (level - 1))


def total_xp_for_level(level: int) -> int:
    """해당 레벨에 도달하기 위한 누적 XP"""
    return sum(xp_for_level(i) for i in range(1, level))


def level_for_xp(total_xp: int) -> int:
    level = 1
    while total_xp >= total_xp_for_level(level + 1):
        level += 1
    return level


def level_title(level: int) -> str:
    for minimum, title in LEVEL_TITLES:
        if level >= minimum:
            return title
    return "Quiz Beginner"


def level_progress(total_xp: int) -> Dict[str, Any]:
    level = level_for_xp(total_xp)
    return {
        "level": level,
        "xp": total_xp - total_xp_for_level(level),
        "xpToNext": xp_for_level(level),
        "totalXp": total_xp,
        "title": level_title(level),
    }


# ---------------------------------------------------------------------------
# 통계
# ---------------------------------------------------------------------------

def _finished(attempt: Attempt) -> datetime:
    return attempt.finished_at or attempt.created_at or datetime.min


def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _consecutive_days(days: Iterable[date]) -> int:
    """가장 최근 플레이 날짜부터 거꾸로 끊기지 않은 날짜 수"""
    played = set(days)
    if not played:
        return 0
    current = max(played)
    count = 0
    while current in played:
        count += 1
        current -= timedelta(days=1)
    return count


def compute_stats(attempts: List[Attempt]) -> Dict[str, Any]:
    """
    사용자의 전체 풀이 기록으로 업적 판정용 통계 계산

    Args:
        attempts: 사용자의 Attempt 목록 (순서 무관)
    """
    ordered = sorted(attempts, key=lambda a: (_finished(a), a.id or 0))
    percentages = [a.percentage for a in ordered]

    category_scores: Dict[str, List[float]] = {}
    for attempt in ordered:
        if attempt.category:
            category_scores.setdefault(attempt.category, []).append(attempt.percentage)

    durations = [a.duration_ms / 1000 for a in ordered if a.duration_ms is not None]
    hours = [_finished(a).hour for a in ordered if a.finished_at]
    days = [_finished(a).date() for a in ordered if a.finished_at]

    latest_day = days[-1] if days else None
    today_percentages = [
        a.percentage for a in ordered
        if a.finished_at and latest_day and a.finished_at.date() == latest_day
    ]

    return {
        "totalAttempts": len(ordered),
        "bestScore": max(percentages, default=0),
        "averageScore": round(_average(percentages), 2),
        "maxStreak": max((a.max_streak or 0 for a in ordered), default=0),
        "fastestTime": min(durations) if durations else None,
        "maxQuestions": max((a.max_score for a in ordered), default=0),
        "categoryScores": {
            category: round(_average(scores), 2) for category, scores in category_scores.items()
        },
        "categoriesPlayed": len(category_scores),
        "hasEarlyBird": any(hour < 8 for hour in hours),
        "hasNightOwl": any(hour >= 22 for hour in hours),
        "consecutiveDays": _consecutive_days(days),
        "firstTryCorrect": any(a.first_correct for a in ordered),
        "lastScore": percentages[-1] if percentages else None,
        "previousScore": percentages[-2] if len(percentages) >= 2 else None,
        "lastTwoPerfect": len(percentages) >= 2 and all(p == 100 for p in percentages[-2:]),
        "todayAttempts": len(today_percentages),
        "todayAllPerfect": bool(today_percentages) and all(p == 100 for p in today_percentages),
        "lastTenAverage": round(_average(percentages[-10:]), 2),
    }


# ---------------------------------------------------------------------------
# 업적
# ---------------------------------------------------------------------------

def _improved_by(stats: Dict[str, Any], points: float) -> bool:
    if stats["lastScore"] is None or stats["previousScore"] is None:
        return False
    return stats["lastScore"] - stats["previousScore"] >= points


ACHIEVEMENTS: List[Dict[str, Any]] = [
    # Common
    {"id": "first_quiz", "name": "Getting Started", "description": "Complete your first quiz",
     "icon": "🎯", "rarity": "common", "xp": 10,
     "condition": lambda s: s["totalAttempts"] >= 1},
    {"id": "five_quizzes", "name": "Getting the Hang of It", "description": "Complete 5 quizzes",
     "icon": "🧠", "rarity": "common", "xp": 15,
     "condition": lambda s: s["totalAttempts"] >= 5},
    {"id": "ten_quizzes", "name": "Quiz Enthusiast", "description": "Complete 10 quizzes",
     "icon": "📘", "rarity": "common", "xp": 20,
     "condition": lambda s: s["totalAttempts"] >= 10},
    {"id": "early_bird", "name": "Early Bird", "description": "Complete a quiz before 8 AM",
     "icon": "🌅", "rarity": "common", "xp": 20,
     "condition": lambda s: s["hasEarlyBird"]},
    {"id": "night_owl", "name": "Night Owl", "description": "Complete a quiz after 10 PM",
     "icon": "🦉", "rarity": "common", "xp": 20,
     "condition": lambda s: s["hasNightOwl"]},
    {"id": "streak_5", "name": "Hot Streak", "description": "Get a 5-question streak",
     "icon": "🔥", "rarity": "common", "xp": 15,
     "condition": lambda s: s["maxStreak"] >= 5},
    {"id": "first_try_correct", "name": "Lucky Guess", "description": "Get the first question of a quiz right",
     "icon": "🍀", "rarity": "common", "xp": 10,
     "condition": lambda s: s["firstTryCorrect"]},
    # Rare
    {"id": "perfect_score", "name": "Perfectionist", "description": "Get 100% on any quiz",
     "icon": "🏆", "rarity": "rare", "xp": 50,
     "condition": lambda s: s["bestScore"] == 100},
    {"id": "streak_10", "name": "On Fire", "description": "Get a 10-question streak",
     "icon": "⚡", "rarity": "rare", "xp": 30,
     "condition": lambda s: s["maxStreak"] >= 10},
    {"id": "speed_demon", "name": "Speed Demon", "description": "Complete a quiz in under 2 minutes",
     "icon": "⏱️", "rarity": "rare", "xp": 40,
     "condition": lambda s: s["fastestTime"] is not None and s["fastestTime"] <= 120},
    {"id": "marathon_runner", "name": "Marathon Runner", "description": "Complete a 50+ question quiz",
     "icon": "🏃", "rarity": "rare", "xp": 35,
     "condition": lambda s: s["maxQuestions"] >= 50},
    {"id": "category_expert", "name": "Category Expert", "description": "Get 90%+ in any category",
     "icon": "🎓", "rarity": "rare", "xp": 45,
     "condition": lambda s: any(score >= 90 for score in s["categoryScores"].values())},
    {"id": "comeback_king", "name": "Comeback King",
     "description": "Improve your score by 20% compared to your previous attempt",
     "icon": "🔁", "rarity": "rare", "xp": 40,
     "condition": lambda s: _improved_by(s, 20)},
    {"id": "consistency", "name": "Consistent Performer", "description": "Play quizzes 7 days in a row",
     "icon": "📅", "rarity": "rare", "xp": 60,
     "condition": lambda s: s["consecutiveDays"] >= 7},
    {"id": "almost_there", "name": "So Close!", "description": "Finish a quiz with 90-99%",
     "icon": "🥈", "rarity": "rare", "xp": 30,
     "condition": lambda s: s["lastScore"] is not None and 90 <= s["lastScore"] < 100},
    {"id": "double_perfect", "name": "Double Perfection", "description": "Get 100% twice in a row",
     "icon": "✨", "rarity": "rare", "xp": 55,
     "condition": lambda s: s["lastTwoPerfect"]},
    # Epic
    {"id": "streak_20", "name": "Unstoppable", "description": "Get a 20-question streak",
     "icon": "💎", "rarity": "epic", "xp": 75,
     "condition": lambda s: s["maxStreak"] >= 20},
    {"id": "quiz_master", "name": "Quiz Master", "description": "Complete 50 quizzes",
     "icon": "👑", "rarity": "epic", "xp": 100,
     "condition": lambda s: s["totalAttempts"] >= 50},
    {"id": "multitasker", "name": "Multitasker", "description": "Take quizzes in 5 different categories",
     "icon": "🗂️", "rarity": "epic", "xp": 70,
     "condition": lambda s: s["categoriesPlayed"] >= 5},
    {"id": "quiz_addict", "name": "Quiz Addict", "description": "Complete 100 quizzes",
     "icon": "💀", "rarity": "epic", "xp": 90,
     "condition": lambda s: s["totalAttempts"] >= 100},
    {"id": "flawless_day", "name": "Flawless Day", "description": "Get 100% on every quiz taken today (3 or more)",
     "icon": "🌞", "rarity": "epic", "xp": 85,
     "condition": lambda s: s["todayAttempts"] >= 3 and s["todayAllPerfect"]},
    {"id": "accuracy_beast", "name": "Accuracy Beast", "description": "Maintain a 90%+ average over 10 quizzes",
     "icon": "🎯", "rarity": "epic", "xp": 80,
     "condition": lambda s: s["totalAttempts"] >= 10 and s["lastTenAverage"] >= 90},
    # Legendary
    {"id": "legendary_brain", "name": "Legendary Brain",
     "description": "Maintain a 95%+ average across 25 quizzes",
     "icon": "🧠", "rarity": "legendary", "xp": 120,
     "condition": lambda s: s["totalAttempts"] >= 25 and s["averageScore"] >= 95},
]

ACHIEVEMENTS_BY_ID = {achievement["id"]: achievement for achievement in ACHIEVEMENTS}


def achievement_public(achievement: Dict[str, Any], unlocked: bool = False) -> Dict[str, Any]:
    """condition 함수를 뺀 응답용 딕셔너리"""
    data = {key: value for key, value in achievement.items() if key != "condition"}
    data["unlocked"] = unlocked
    return data


def find_new_achievements(stats: Dict[str, Any], unlocked: Iterable[str]) -> List[Dict[str, Any]]:
    """아직 달성하지 않았고 조건을 만족하는 업적 목록 (정의 순서 유지)"""
    already = set(unlocked)
    return [
        achievement for achievement in ACHIEVEMENTS
        if achievement["id"] not in already and achievement["condition"](stats)
    ]


# ---------------------------------------------------------------------------
# 일일 챌린지
# ---------------------------------------------------------------------------

DAILY_CHALLENGES: List[Dict[str, Any]] = [
    {"id": "speed_master", "name": "Speed Master", "description": "Complete 10 questions in under 2 minutes",
     "icon": "⚡", "difficulty": "medium", "reward": {"xp": 50, "coins": 10},
     "config": {"amount": 10, "difficulty": "medium", "timeLimit": 120}},
    {"id": "perfectionist", "name": "Perfectionist", "description": "Get 100% on a 15-question quiz",
     "icon": "🏆", "difficulty": "hard", "reward": {"xp": 75, "coins": 15},
     "config": {"amount": 15, "difficulty": "medium", "perfectScore": True}},
    {"id": "streak_champion", "name": "Streak Champion", "description": "Maintain a 10-question streak",
     "icon": "🔥", "difficulty": "hard", "reward": {"xp": 60, "coins": 12},
     "config": {"amount": 15, "difficulty": "medium", "streakGoal": 10}},
    {"id": "category_expert", "name": "Category Expert", "description": "Score 80%+ in Science & Nature",
     "icon": "🔬", "difficulty": "medium", "reward": {"xp": 40, "coins": 8},
     "config": {"amount": 10, "difficulty": "medium", "category": "Science & Nature", "minScore": 80}},
    {"id": "marathon_runner", "name": "Marathon Runner", "description": "Complete 25 questions without breaks",
     "icon": "🏃", "difficulty": "hard", "reward": {"xp": 80, "coins": 20},
     "config": {"amount": 25, "difficulty": "easy", "noBreaks": True}},
    {"id": "night_owl", "name": "Night Owl", "description": "Complete any quiz after 10 PM",
     "icon": "🦉", "difficulty": "easy", "reward": {"xp": 25, "coins": 5},
     "config": {"amount": 10, "difficulty": "easy", "timeRestriction": "night"}},
]


def challenge_for_date(day: date) -> Dict[str, Any]:
    """날짜로 챌린지 결정 - 같은 날에는 모든 사용자가 같은 챌린지를 받음"""
    return DAILY_CHALLENGES[day.toordinal() % len(DAILY_CHALLENGES)]


def challenge_satisfied(challenge: Dict[str, Any], attempt: Attempt) -> bool:
    """한 번의 풀이 기록이 챌린지 조건을 만족하는지"""
    challenge_id = challenge["id"]
    seconds = attempt.duration_ms / 1000 if attempt.duration_ms is not None else None

    if challenge_id == "speed_master":
        return attempt.max_score >= 10 and seconds is not None and seconds <= 120
    if challenge_id == "perfectionist":
        return attempt.max_score >= 15 and attempt.percentage == 100
    if challenge_id == "streak_champion":
        return (attempt.max_streak or 0) >= 10
    if challenge_id == "category_expert":
        return attempt.category == "Science & Nature" and attempt.percentage >= 80
    if challenge_id == "marathon_runner":
        return attempt.max_score >= 25
    if challenge_id == "night_owl":
        return attempt.finished_at is not None and attempt.finished_at.hour >= 22
    return False


def seconds_until_reset(now: datetime) -> int:
    midnight = datetime.combine(now.date() + timedelta(days=1), datetime.min.time())
    return int((midnight - now).total_seconds())


# ---------------------------------------------------------------------------
# 기록 반영
# ---------------------------------------------------------------------------

def local_wall_clock(moment: Optional[datetime]) -> datetime:
    """클라이언트가 보낸 시각에서 타임존을 떼어 로컬 벽시계 시각으로 사용"""
    if moment is None:
        return datetime.now()
    return moment.replace(tzinfo=None)


def load_attempts(db: Session, user_id: int) -> List[Attempt]:
    result = db.execute(select(Attempt).where(Attempt.user_id == user_id))
    return list(result.scalars().all())


def apply_attempt(db: Session, user: User, attempt: Attempt) -> Dict[str, Any]:
    """
    새 풀이 기록을 사용자 진행도에 반영 (XP, 업적, 일일 챌린지)
    attempt는 이미 세션에 추가(flush)된 상태여야 함

    Returns:
        ProgressUpdate 형태의 딕셔너리
    """
    attempts = load_attempts(db, user.id)
    if attempt not in attempts:
        attempts.append(attempt)

    stats = compute_stats(attempts)
    unlocked = list(user.achievements or [])
    new_achievements = find_new_achievements(stats, unlocked)

    xp_gained = attempt.score * XP_PER_CORRECT_ANSWER
    xp_gained += sum(achievement["xp"] for achievement in new_achievements)

    # 일일 챌린지 (하루 한 번만 보상)
    challenge_completed = False
    played_day = local_wall_clock(attempt.finished_at).date()
    if user.last_daily_challenge != played_day.isoformat():
        challenge = challenge_for_date(played_day)
        if challenge_satisfied(challenge, attempt):
            challenge_completed = True
            user.last_daily_challenge = played_day.isoformat()
            xp_gained += challenge["reward"]["xp"]
            logger.info(f"[진행도] 사용자 {user.username} 일일 챌린지 '{challenge['id']}' 완료")

    previous_level = level_for_xp(user.total_xp or 0)
    user.total_xp = (user.total_xp or 0) + xp_gained
    # JSON 컬럼은 새 리스트를 할당해야 변경이 감지됨
    user.achievements = unlocked + [achievement["id"] for achievement in new_achievements]
    new_level = level_for_xp(user.total_xp)

    if new_achievements:
        logger.info(
            f"[진행도] 사용자 {user.username} 업적 달성: "
            f"{', '.join(a['id'] for a in new_achievements)}"
        )

    return {
        "attemptId": attempt.id,
        "xpGained": xp_gained,
        "totalXp": user.total_xp,
        "level": new_level,
        "leveledUp": new_level > previous_level,
        "newAchievements": [achievement_public(a, unlocked=True) for a in new_achievements],
        "dailyChallengeCompleted": challenge_completed,
    }
