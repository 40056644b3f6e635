"""
레벨/통계/업적/챌린지 계산 단위 테스트
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from app.models.quiz import Attempt
from app.services.progression import (
    ACHIEVEMENTS_BY_ID,
    DAILY_CHALLENGES,
    challenge_for_date,
    challenge_satisfied,
    compute_stats,
    find_new_achievements,
    level_for_xp,
    level_progress,
    level_title,
    local_wall_clock,
    seconds_until_reset,
    total_xp_for_level,
    xp_for_level,
)


def make_attempt(score, max_score=10, finished_at=None, **kwargs):
    attempt = Attempt(
        user_id=1,
        score=score,
        max_score=max_score,
        max_streak=kwargs.pop("max_streak", 0),
        first_correct=kwargs.pop("first_correct", False),
        finished_at=finished_at or datetime(2025, 1, 8, 12, 0),
        **kwargs,
    )
    return attempt


def test_xp_curve():
    assert xp_for_level(1) == 100
    assert xp_for_level(2) == 120
    assert xp_for_level(3) == 144
    assert total_xp_for_level(1) == 0
    assert total_xp_for_level(3) == 220


@pytest.mark.parametrize(
    "total_xp, level",
    [(0, 1), (99, 1), (100, 2), (219, 2), (220, 3)],
)
def test_level_for_xp(total_xp, level):
    assert level_for_xp(total_xp) == level


def test_level_progress_and_titles():
    assert level_progress(150) == {
        "level": 2,
        "xp": 50,
        "xpToNext": 120,
        "totalXp": 150,
        "title": "Quiz Beginner",
    }
    assert level_title(5) == "Quiz Novice"
    assert level_title(49) == "Quiz Master"
    assert level_title(80) == "Quiz Legend"


def test_attempt_percentage():
    assert make_attempt(7, 10).percentage == 70.0
    assert make_attempt(1, 3).percentage == 33.33
    assert make_attempt(0, 0).percentage == 0.0


def test_compute_stats_empty():
    stats = compute_stats([])
    assert stats["totalAttempts"] == 0
    assert stats["bestScore"] == 0
    assert stats["fastestTime"] is None
    assert stats["lastScore"] is None
    assert stats["consecutiveDays"] == 0
    assert stats["lastTwoPerfect"] is False


def test_compute_stats_orders_by_finish_time():
    later = make_attempt(10, finished_at=datetime(2025, 1, 8, 23, 0), category="History")
    earlier = make_attempt(6, finished_at=datetime(2025, 1, 7, 7, 30), category="History", duration_ms=90_000)

    stats = compute_stats([later, earlier])

    assert stats["lastScore"] == 100.0
    assert stats["previousScore"] == 60.0
    assert stats["averageScore"] == 80.0
    assert stats["categoryScores"] == {"History": 80.0}
    assert stats["fastestTime"] == 90.0
    assert stats["hasEarlyBird"] is True
    assert stats["hasNightOwl"] is True
    assert stats["consecutiveDays"] == 2
    assert stats["todayAttempts"] == 1


def test_consecutive_days_counts_back_from_latest_day():
    days = [date(2025, 1, d) for d in (1, 2, 4, 5, 6)]
    attempts = [make_attempt(5, finished_at=datetime(d.year, d.month, d.day, 12)) for d in days]

    assert compute_stats(attempts)["consecutiveDays"] == 3


def test_comeback_and_double_perfect():
    attempts = [
        make_attempt(5, finished_at=datetime(2025, 1, 8, 10)),
        make_attempt(10, finished_at=datetime(2025, 1, 8, 11)),
    ]
    stats = compute_stats(attempts)
    new_ids = {a["id"] for a in find_new_achievements(stats, [])}

    assert "comeback_king" in new_ids
    assert "double_perfect" not in new_ids

    attempts.append(make_attempt(10, finished_at=datetime(2025, 1, 8, 12)))
    new_ids = {a["id"] for a in find_new_achievements(compute_stats(attempts), [])}
    assert "double_perfect" in new_ids


def test_flawless_day_needs_three_perfect_attempts_today():
    perfect = [make_attempt(10, finished_at=datetime(2025, 1, 8, h)) for h in (9, 10)]
    assert not ACHIEVEMENTS_BY_ID["flawless_day"]["condition"](compute_stats(perfect))

    perfect.append(make_attempt(10, finished_at=datetime(2025, 1, 8, 11)))
    assert ACHIEVEMENTS_BY_ID["flawless_day"]["condition"](compute_stats(perfect))

    # 다른 날의 실수는 영향 없음
    perfect.insert(0, make_attempt(2, finished_at=datetime(2025, 1, 7, 11)))
    assert ACHIEVEMENTS_BY_ID["flawless_day"]["condition"](compute_stats(perfect))


def test_find_new_achievements_skips_unlocked():
    stats = compute_stats([make_attempt(10, first_correct=True)])

    first = [a["id"] for a in find_new_achievements(stats, [])]
    assert first[:1] == ["first_quiz"]

    again = [a["id"] for a in find_new_achievements(stats, first)]
    assert again == []


def test_challenge_for_date_is_deterministic():
    assert challenge_for_date(date(2025, 1, 8))["id"] == "night_owl"
    assert challenge_for_date(date(2025, 1, 9))["id"] == DAILY_CHALLENGES[0]["id"]
    seen = {challenge_for_date(date(2025, 2, d))["id"] for d in range(1, 7)}
    assert seen == {c["id"] for c in DAILY_CHALLENGES}


@pytest.mark.parametrize(
    "challenge_id, attempt, expected",
    [
        ("speed_master", dict(score=8, max_score=10, duration_ms=110_000), True),
        ("speed_master", dict(score=8, max_score=10, duration_ms=130_000), False),
        ("perfectionist", dict(score=15, max_score=15), True),
        ("perfectionist", dict(score=10, max_score=10), False),
        ("streak_champion", dict(score=10, max_score=15, max_streak=10), True),
        ("category_expert", dict(score=8, max_score=10, category="Science & Nature"), True),
        ("category_expert", dict(score=8, max_score=10, category="History"), False),
        ("marathon_runner", dict(score=1, max_score=25), True),
        ("night_owl", dict(score=1, max_score=10, finished_at=datetime(2025, 1, 8, 22, 5)), True),
        ("night_owl", dict(score=1, max_score=10, finished_at=datetime(2025, 1, 8, 21, 55)), False),
    ],
)
def test_challenge_satisfied(challenge_id, attempt, expected):
    challenge = next(c for c in DAILY_CHALLENGES if c["id"] == challenge_id)
    assert challenge_satisfied(challenge, make_attempt(**attempt)) is expected


def test_seconds_until_reset():
    assert seconds_until_reset(datetime(2025, 1, 8, 23, 59, 0)) == 60
    assert seconds_until_reset(datetime(2025, 1, 8, 0, 0, 0)) == 24 * 60 * 60


def test_local_wall_clock_strips_timezone():
    moment = datetime(2025, 1, 8, 6, 45, tzinfo=timezone(timedelta(hours=-5)))
    assert local_wall_clock(moment) == datetime(2025, 1, 8, 6, 45)
    assert local_wall_clock(None).tzinfo is None

