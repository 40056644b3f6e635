"""
진행도 API 테스트 (결과 기록, 레벨/업적, 일일 챌린지)
"""

from app.services.progression import ACHIEVEMENTS, DAILY_CHALLENGES


NIGHT_RESULT = {
    "source": "OPENTDB",
    "category": "Science & Nature",
    "difficulty": "medium",
    "score": 9,
    "total": 10,
    "maxStreak": 6,
    "durationSeconds": 95,
    "firstCorrect": True,
    # 사용자 로컬 시각 23:30 (2025-01-08의 챌린지는 Night Owl)
    "finishedAt": "2025-01-08T23:30:00+09:00",
}


def test_record_result_awards_xp_achievements_and_challenge(client, make_user):
    _, headers = make_user("alice")

    response = client.post("/api/progress/results", json=NIGHT_RESULT, headers=headers)
    assert response.status_code == 200, response.text
    progress = response.json()

    unlocked = [a["id"] for a in progress["newAchievements"]]
    assert unlocked == [
        "first_quiz",
        "night_owl",
        "streak_5",
        "first_try_correct",
        "speed_demon",
        "category_expert",
        "almost_there",
    ]
    assert progress["dailyChallengeCompleted"] is True
    # 9 x 10 + 업적 170 + 챌린지 25
    assert progress["xpGained"] == 285
    assert progress["totalXp"] == 285
    assert progress["level"] == 3
    assert progress["leveledUp"] is True


def test_daily_challenge_rewarded_once_per_day(client, make_user):
    _, headers = make_user("alice")

    client.post("/api/progress/results", json=NIGHT_RESULT, headers=headers)
    second = client.post("/api/progress/results", json=NIGHT_RESULT, headers=headers).json()

    assert second["dailyChallengeCompleted"] is False
    assert second["newAchievements"] == []
    assert second["xpGained"] == 90


def test_record_result_validation(client, make_user):
    _, headers = make_user("alice")

    too_high = client.post("/api/progress/results", json={"score": 11, "total": 10}, headers=headers)
    assert too_high.status_code == 400
    assert too_high.json()["detail"] == "Score cannot exceed the number of questions"

    streak = client.post(
        "/api/progress/results", json={"score": 5, "total": 10, "maxStreak": 11}, headers=headers
    )
    assert streak.status_code == 400

    zero_total = client.post("/api/progress/results", json={"score": 0, "total": 0}, headers=headers)
    assert zero_total.status_code == 400

    assert client.post("/api/progress/results", json={"score": 1, "total": 1}).status_code == 401


def test_get_progress(client, make_user):
    _, headers = make_user("alice")

    empty = client.get("/api/progress", headers=headers).json()
    assert empty["level"] == 1
    assert empty["totalXp"] == 0
    assert empty["xpToNext"] == 100
    assert empty["title"] == "Quiz Beginner"
    assert empty["achievements"] == []
    assert empty["stats"]["totalAttempts"] == 0

    client.post("/api/progress/results", json=NIGHT_RESULT, headers=headers)

    progress = client.get("/api/progress", headers=headers).json()
    assert progress["level"] == 3
    assert progress["xp"] == 285 - 220
    assert progress["stats"]["totalAttempts"] == 1
    assert progress["stats"]["bestScore"] == 90.0
    assert progress["stats"]["hasNightOwl"] is True
    assert all(a["unlocked"] for a in progress["achievements"])
    assert len(progress["achievements"]) == 7


def test_list_achievements(client, make_user):
    _, headers = make_user("alice")
    client.post("/api/progress/results", json={**NIGHT_RESULT, "score": 10}, headers=headers)

    data = client.get("/api/progress/achievements", headers=headers).json()
    assert len(data["achievements"]) == len(ACHIEVEMENTS)
    unlocked = {a["id"] for a in data["achievements"] if a["unlocked"]}
    assert "perfect_score" in unlocked
    assert "almost_there" not in unlocked
    assert data["unlockedCount"] == len(unlocked)
    assert all("condition" not in a for a in data["achievements"])


def test_daily_challenge_endpoint(client, make_user):
    _, headers = make_user("alice")

    response = client.get("/api/progress/daily-challenge", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["id"] in {c["id"] for c in DAILY_CHALLENGES}
    assert data["completed"] is False
    assert 0 < data["secondsUntilReset"] <= 24 * 60 * 60
    assert data["reward"]["xp"] > 0
