"""
멀티플레이어 세션 테스트
"""

import re

import httpx
import pytest

from app.main import app as fastapi_app
from app.services.trivia_client import TriviaClient, TriviaProviderError, get_trivia_client


QUESTIONS = [
    {
        "text": "2 + 2 = ?",
        "type": "MULTIPLE_CHOICE",
        "options": [{"text": "4", "isCorrect": True}, {"text": "5", "isCorrect": False}],
    },
    {
        "text": "The sky is blue.",
        "type": "TRUE_FALSE",
        "options": [{"text": "True", "isCorrect": True}, {"text": "False", "isCorrect": False}],
    },
]


class FakeTriviaClient:
    def __init__(self, questions=None, error=None):
        self.questions = questions or []
        self.error = error
        self.configs = []

    async def fetch_for_config(self, quiz_config):
        self.configs.append(quiz_config)
        if self.error:
            raise self.error
        return self.questions


@pytest.fixture
def trivia():
    fake = FakeTriviaClient(questions=QUESTIONS)
    fastapi_app.dependency_overrides[get_trivia_client] = lambda: fake
    yield fake
    fastapi_app.dependency_overrides.pop(get_trivia_client, None)


def _create(client, headers, **body):
    response = client.post("/api/multiplayer/create", json=body, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["sessionCode"]


def _join(client, headers, code):
    return client.post("/api/multiplayer/join", json={"sessionCode": code}, headers=headers)


def _answer(client, headers, code, index, answer=None, is_correct=None):
    return client.post(
        f"/api/multiplayer/session/{code}/answer",
        json={"questionIndex": index, "answer": answer, "isCorrect": is_correct},
        headers=headers,
    )


def test_create_session(client, make_user):
    host, headers = make_user("host")

    response = client.post(
        "/api/multiplayer/create",
        json={"quizConfig": {"source": "triviaapi", "amount": 5, "difficulty": "easy"}},
        headers=headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert len(data["sessionCode"]) == 6
    assert re.fullmatch(r"[A-Z0-9]{6}", data["sessionCode"])
    assert data["status"] == "WAITING"

    detail = client.get(f"/api/multiplayer/session/{data['sessionCode']}").json()
    assert detail["hostId"] == host["id"]
    assert detail["visibility"] == "PRIVATE"
    assert detail["maxPlayers"] == 8
    assert detail["quizConfig"]["source"] == "triviaapi"
    assert [p["username"] for p in detail["players"]] == ["host"]
    assert detail["players"][0]["isHost"] is True


def test_session_code_lookup_is_case_insensitive(client, make_user):
    _, headers = make_user("host")
    code = _create(client, headers)

    assert client.get(f"/api/multiplayer/session/{code.lower()}").status_code == 200
    assert client.get("/api/multiplayer/session/NOPE00").status_code == 404


def test_join_rules(client, make_user):
    _, host_headers = make_user("host")
    _, p1_headers = make_user("player1")
    _, p2_headers = make_user("player2")

    code = _create(client, host_headers, maxPlayers=2)

    joined = _join(client, p1_headers, code)
    assert joined.status_code == 200
    assert [p["username"] for p in joined.json()["players"]] == ["host", "player1"]

    again = _join(client, host_headers, code)
    assert again.status_code == 400

    full = _join(client, p2_headers, code)
    assert full.status_code == 400
    assert full.json()["detail"] == "Session is full"

    assert _join(client, p2_headers, "NOPE00").status_code == 404


def test_cannot_join_started_session(client, make_user):
    _, host_headers = make_user("host")
    _, p1_headers = make_user("player1")
    code = _create(client, host_headers)

    client.post(f"/api/multiplayer/start/{code}", json={"questions": QUESTIONS}, headers=host_headers)

    response = _join(client, p1_headers, code)
    assert response.status_code == 400
    assert response.json()["detail"] == "Session already started"


def test_friends_only_session(client, make_user, make_friends):
    host, host_headers = make_user("host")
    friend, friend_headers = make_user("friend")
    _, stranger_headers = make_user("stranger")
    make_friends(host, host_headers, friend, friend_headers)

    code = _create(client, host_headers, visibility="FRIENDS_ONLY")

    assert _join(client, stranger_headers, code).status_code == 403
    assert _join(client, friend_headers, code).status_code == 200


def test_public_sessions_list(client, make_user):
    _, host_headers = make_user("host")
    public_code = _create(client, host_headers, visibility="PUBLIC")
    _create(client, host_headers, visibility="PRIVATE")

    sessions = client.get("/api/multiplayer/public").json()["sessions"]
    assert [s["sessionCode"] for s in sessions] == [public_code]
    assert sessions[0]["hostUsername"] == "host"
    assert sessions[0]["playerCount"] == 1


def test_only_host_can_start(client, make_user):
    _, host_headers = make_user("host")
    _, p1_headers = make_user("player1")
    code = _create(client, host_headers)
    _join(client, p1_headers, code)

    response = client.post(f"/api/multiplayer/start/{code}", json={"questions": QUESTIONS}, headers=p1_headers)
    assert response.status_code == 403


def test_start_with_questions_and_play(client, make_user):
    _, host_headers = make_user("host")
    _, p1_headers = make_user("player1")
    code = _create(client, host_headers)
    _join(client, p1_headers, code)

    started = client.post(f"/api/multiplayer/start/{code}", json={"questions": QUESTIONS}, headers=host_headers)
    assert started.status_code == 200
    assert started.json()["status"] == "IN_PROGRESS"
    assert len(started.json()["questions"]) == 2

    twice = client.post(f"/api/multiplayer/start/{code}", json={"questions": QUESTIONS}, headers=host_headers)
    assert twice.status_code == 400

    # 서버 채점: 보기 텍스트로 판정, 클라이언트 isCorrect는 무시
    first = _answer(client, host_headers, code, 0, answer="4", is_correct=False)
    assert first.json() == {"score": 1, "currentQuestion": 1, "finished": False}

    wrong = _answer(client, p1_headers, code, 0, answer="5", is_correct=True)
    assert wrong.json()["score"] == 0

    repeat = _answer(client, host_headers, code, 0, answer="4")
    assert repeat.status_code == 400
    assert repeat.json()["detail"] == "Question already answered"

    out_of_range = _answer(client, host_headers, code, 5, answer="4")
    assert out_of_range.status_code == 400

    last = _answer(client, host_headers, code, 1, answer="True")
    assert last.json() == {"score": 2, "currentQuestion": 2, "finished": True}

    assert client.get(f"/api/multiplayer/session/{code}").json()["status"] == "IN_PROGRESS"

    _answer(client, p1_headers, code, 1, answer="True")
    detail = client.get(f"/api/multiplayer/session/{code}").json()
    assert detail["status"] == "FINISHED"
    assert detail["finishedAt"] is not None

    leaderboard = client.get(f"/api/multiplayer/session/{code}/leaderboard").json()["leaderboard"]
    assert [(e["username"], e["score"]) for e in leaderboard] == [("host", 2), ("player1", 1)]


def test_answer_uses_client_result_without_options(client, make_user):
    _, host_headers = make_user("host")
    code = _create(client, host_headers)
    client.post(
        f"/api/multiplayer/start/{code}",
        json={"questions": [{"text": "Free answer"}]},
        headers=host_headers,
    )

    response = _answer(client, host_headers, code, 0, is_correct=True)
    assert response.json() == {"score": 1, "currentQuestion": 1, "finished": True}


def test_answer_requires_membership_and_progress(client, make_user):
    _, host_headers = make_user("host")
    _, outsider_headers = make_user("outsider")
    code = _create(client, host_headers)

    not_started = _answer(client, host_headers, code, 0, answer="4")
    assert not_started.status_code == 400
    assert not_started.json()["detail"] == "Session is not in progress"

    outsider = _answer(client, outsider_headers, code, 0, answer="4")
    assert outsider.status_code == 404


def test_start_fetches_questions_from_provider(client, make_user, trivia):
    _, host_headers = make_user("host")
    code = _create(client, host_headers, quizConfig={"source": "opentdb", "amount": 2})

    response = client.post(f"/api/multiplayer/start/{code}", headers=host_headers)
    assert response.status_code == 200
    assert response.json()["questions"] == QUESTIONS
    assert trivia.configs[0]["amount"] == 2


def test_start_provider_failure_keeps_session_waiting(client, make_user, trivia):
    _, host_headers = make_user("host")
    code = _create(client, host_headers)
    trivia.error = TriviaProviderError(504, "Trivia provider timed out")

    response = client.post(f"/api/multiplayer/start/{code}", json={}, headers=host_headers)
    assert response.status_code == 504
    assert client.get(f"/api/multiplayer/session/{code}").json()["status"] == "WAITING"


def test_start_without_questions_fails(client, make_user, trivia):
    _, host_headers = make_user("host")
    code = _create(client, host_headers)
    trivia.questions = []

    response = client.post(f"/api/multiplayer/start/{code}", json={}, headers=host_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Questions are required to start the session"
    assert client.get(f"/api/multiplayer/session/{code}").json()["status"] == "WAITING"


def test_end_session_host_only(client, make_user):
    _, host_headers = make_user("host")
    _, p1_headers = make_user("player1")
    code = _create(client, host_headers)
    _join(client, p1_headers, code)

    assert client.post(f"/api/multiplayer/end/{code}", headers=p1_headers).status_code == 403

    ended = client.post(f"/api/multiplayer/end/{code}", headers=host_headers)
    assert ended.status_code == 200
    assert ended.json()["message"] == "Session ended successfully"
    assert client.get(f"/api/multiplayer/session/{code}").json()["status"] == "FINISHED"


def test_leave_reassigns_host(client, make_user):
    _, host_headers = make_user("host")
    player1, p1_headers = make_user("player1")
    _, p2_headers = make_user("player2")
    code = _create(client, host_headers)
    _join(client, p1_headers, code)
    _join(client, p2_headers, code)

    response = client.post(f"/api/multiplayer/leave/{code}", headers=host_headers)
    assert response.status_code == 200

    detail = client.get(f"/api/multiplayer/session/{code}").json()
    assert detail["hostId"] == player1["id"]
    assert [(p["username"], p["isHost"]) for p in detail["players"]] == [
        ("player1", True),
        ("player2", False),
    ]

    assert client.post(f"/api/multiplayer/leave/{code}", headers=host_headers).status_code == 404


def test_last_player_leaving_finishes_session(client, make_user):
    _, host_headers = make_user("host")
    code = _create(client, host_headers)

    client.post(f"/api/multiplayer/leave/{code}", headers=host_headers)

    detail = client.get(f"/api/multiplayer/session/{code}").json()
    assert detail["players"] == []
    assert detail["status"] == "FINISHED"


def test_invite_friends(client, make_user, make_friends):
    host, host_headers = make_user("host")
    friend, friend_headers = make_user("friend")
    stranger, _ = make_user("stranger")
    make_friends(host, host_headers, friend, friend_headers)
    code = _create(client, host_headers, visibility="FRIENDS_ONLY")

    response = client.post(
        "/api/multiplayer/invite",
        json={"sessionCode": code, "friendIds": [friend["id"], stranger["id"]]},
        headers=host_headers,
    )
    assert response.status_code == 200
    assert response.json()["invitedCount"] == 1

    # 이미 대기 중인 초대는 다시 보내지 않음
    again = client.post(
        "/api/multiplayer/invite",
        json={"sessionCode": code, "friendIds": [friend["id"]]},
        headers=host_headers,
    )
    assert again.json()["invitedCount"] == 0

    invites = client.get("/api/multiplayer/invites", headers=friend_headers).json()["invites"]
    assert [(i["sessionCode"], i["hostUsername"], i["invitedBy"]) for i in invites] == [
        (code, "host", host["id"])
    ]

    assert _join(client, friend_headers, code).status_code == 200
    assert client.get("/api/multiplayer/invites", headers=friend_headers).json()["invites"] == []


def test_invite_requires_membership(client, make_user):
    _, host_headers = make_user("host")
    _, outsider_headers = make_user("outsider")
    code = _create(client, host_headers)

    response = client.post(
        "/api/multiplayer/invite",
        json={"sessionCode": code, "friendIds": [1]},
        headers=outsider_headers,
    )
    assert response.status_code == 403

    empty = client.post(
        "/api/multiplayer/invite",
        json={"sessionCode": code, "friendIds": []},
        headers=host_headers,
    )
    assert empty.status_code == 400


def test_decline_invite(client, make_user, make_friends):
    host, host_headers = make_user("host")
    friend, friend_headers = make_user("friend")
    make_friends(host, host_headers, friend, friend_headers)
    code = _create(client, host_headers)

    client.post(
        "/api/multiplayer/invite",
        json={"sessionCode": code, "friendIds": [friend["id"]]},
        headers=host_headers,
    )

    declined = client.post(f"/api/multiplayer/invites/{code}/decline", headers=friend_headers)
    assert declined.status_code == 200
    assert client.get("/api/multiplayer/invites", headers=friend_headers).json()["invites"] == []

    missing = client.post(f"/api/multiplayer/invites/{code}/decline", headers=friend_headers)
    assert missing.status_code == 404

    # 거절했던 친구도 다시 초대 가능
    reinvite = client.post(
        "/api/multiplayer/invite",
        json={"sessionCode": code, "friendIds": [friend["id"]]},
        headers=host_headers,
    )
    assert reinvite.json()["invitedCount"] == 1


def test_malformed_provider_payload_keeps_session_waiting(client, make_user):
    _, host_headers = make_user("host")
    code = _create(client, host_headers)

    # correct_answer 누락
    payload = {"response_code": 0, "results": [{"question": "q"}]}
    trivia_client = TriviaClient(
        opentdb_url="https://opentdb.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
    )
    fastapi_app.dependency_overrides[get_trivia_client] = lambda: trivia_client
    try:
        response = client.post(f"/api/multiplayer/start/{code}", headers=host_headers)
    finally:
        fastapi_app.dependency_overrides.pop(get_trivia_client, None)

    assert response.status_code == 502
    assert client.get(f"/api/multiplayer/session/{code}").json()["status"] == "WAITING"

    retry = client.post(f"/api/multiplayer/start/{code}", json={"questions": QUESTIONS}, headers=host_headers)
    assert retry.status_code == 200


def test_unfinished_player_leaving_finishes_session(client, make_user):
    _, host_headers = make_user("host")
    _, p1_headers = make_user("player1")
    code = _create(client, host_headers)
    _join(client, p1_headers, code)
    client.post(f"/api/multiplayer/start/{code}", json={"questions": QUESTIONS[:1]}, headers=host_headers)

    assert _answer(client, host_headers, code, 0, answer="4").json()["finished"] is True
    assert client.get(f"/api/multiplayer/session/{code}").json()["status"] == "IN_PROGRESS"

    client.post(f"/api/multiplayer/leave/{code}", headers=p1_headers)

    detail = client.get(f"/api/multiplayer/session/{code}").json()
    assert [p["username"] for p in detail["players"]] == ["host"]
    assert detail["status"] == "FINISHED"
    assert detail["finishedAt"] is not None
