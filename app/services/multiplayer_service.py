"""
멀티플레이어 세션 헬퍼
세션 코드 발급, 응답 직렬화, 답안 채점, 호스트 승계
"""

from typing import Dict, Any, List, Optional
import logging
import random
import string

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.multiplayer import MultiplayerSession, SessionPlayer

logger = logging.getLogger(__name__)

SESSION_CODE_LENGTH = 6
SESSION_CODE_ALPHABET = string.ascii_uppercase + string.digits

DEFAULT_QUIZ_CONFIG = {
    "source": "opentdb",
    "amount": 10,
    "difficulty": "medium",
    "category": None,
}


def _random_code(rng: Optional[random.Random] = None) -> str:
    chooser = rng or random
    return "".join(chooser.choice(SESSION_CODE_ALPHABET) for _ in range(SESSION_CODE_LENGTH))


def generate_session_code(db: Session, rng: Optional[random.Random] = None) -> str:
    """사용 중이지 않은 6자리 세션 코드 발급"""
    while True:
        code = _random_code(rng)
        exists = db.execute(
            select(MultiplayerSession.id).where(MultiplayerSession.session_code == code)
        ).first()
        if exists is None:
            return code
        logger.debug(f"[멀티플레이어] 세션 코드 충돌 {code}, 재발급")


def get_session_by_code(db: Session, session_code: str) -> Optional[MultiplayerSession]:
    result = db.execute(
        select(MultiplayerSession).where(MultiplayerSession.session_code == session_code.upper())
    )
    return result.scalar_one_or_none()


def serialize_player(player: SessionPlayer) -> Dict[str, Any]:
    return {
        "userId": player.user_id,
        "username": player.username,
        "score": player.score,
        "isHost": player.is_host,
        "currentQuestion": player.current_question,
        "finished": player.finished,
        "joinedAt": player.joined_at,
    }


def serialize_session(session: MultiplayerSession) -> Dict[str, Any]:
    return {
        "sessionCode": session.session_code,
        "hostId": session.host_id,
        "players": [serialize_player(p) for p in session.players],
        "status": session.status,
        "maxPlayers": session.max_players,
        "visibility": session.visibility,
        "quizConfig": session.quiz_config or {},
        "questions": session.questions or [],
        "startedAt": session.started_at,
        "finishedAt": session.finished_at,
    }


def leaderboard(session: MultiplayerSession) -> List[Dict[str, Any]]:
    """점수 내림차순 (동점이면 입장 순서)"""
    ranked = sorted(
        enumerate(session.players),
        key=lambda item: (-item[1].score, item[0]),
    )
    return [
        {
            "userId": player.user_id,
            "username": player.username,
            "score": player.score,
            "isHost": player.is_host,
            "finished": player.finished,
            "currentQuestion": player.current_question,
        }
        for _, player in ranked
    ]


def grade_answer(question: Dict[str, Any], answer: Optional[str]) -> Optional[bool]:
    """
    저장된 문제의 보기로 정답 여부 판정

    Returns:
        bool: 판정 가능한 경우 정답 여부, None: 보기 정보가 없어 판정 불가
    """
    if answer is None:
        return None

    options = question.get("options") or []
    correct = [o.get("text") for o in options if isinstance(o, dict) and o.get("isCorrect")]
    if correct:
        return answer in correct

    # 로컬 문제 형식 {"answer": "..."}
    if question.get("answer") is not None:
        return answer == question["answer"]
    return None


def reassign_host(session: MultiplayerSession) -> Optional[SessionPlayer]:
    """호스트가 나간 경우 가장 먼저 입장한 플레이어에게 호스트 승계"""
    if not session.players:
        return None
    new_host = session.players[0]
    session.host_id = new_host.user_id
    new_host.is_host = True
    return new_host
