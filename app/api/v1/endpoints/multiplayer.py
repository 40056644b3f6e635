"""
멀티플레이어 API 엔드포인트
세션 생성/참가/시작/답안/리더보드/종료/나가기, 친구 초대

클라이언트는 GET /session/{code} 를 2-3초 간격으로 폴링해 상태를 동기화합니다.
"""

from fastapi import APIRouter, HTTPException, status, Depends
from sqlalchemy.orm import Session
from sqlalchemy import select
from datetime import datetime, timezone
from typing import Optional
import logging

from app.api.dependencies import get_current_user
from app.core.config import settings
from app.db.database import get_db
from app.models.multiplayer import MultiplayerSession, SessionPlayer, SessionInvite
from app.models.user import User
from app.schemas.multiplayer import (
    SessionCreateRequest,
    SessionCreateResponse,
    SessionJoinRequest,
    SessionJoinResponse,
    SessionDetailResponse,
    PublicSessionListResponse,
    SessionStartRequest,
    SessionStartResponse,
    AnswerRequest,
    AnswerResponse,
    LeaderboardResponse,
    InviteRequest,
    InviteResponse,
    InviteListResponse,
)
from app.schemas.friend import MessageResponse
from app.services import friend_service
from app.services.multiplayer_service import (
    DEFAULT_QUIZ_CONFIG,
    generate_session_code,
    get_session_by_code,
    serialize_player,
    serialize_session,
    leaderboard,
    grade_answer,
    reassign_host,
)
from app.services.trivia_client import TriviaClient, TriviaProviderError, get_trivia_client

logger = logging.getLogger(__name__)

router = APIRouter()


def _session_or_404(db: Session, session_code: str) -> MultiplayerSession:
    session = get_session_by_code(db, session_code)
    if not session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return session


def _host_username(session: MultiplayerSession):
    host = session.find_player(session.host_id)
    return host.username if host else None


@router.post("/create", response_model=SessionCreateResponse)
def create_session(
    request: SessionCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """세션 생성 - 생성자가 호스트이자 첫 번째 플레이어"""
    quiz_config = request.quizConfig.model_dump() if request.quizConfig else dict(DEFAULT_QUIZ_CONFIG)

    session = MultiplayerSession(
        session_code=generate_session_code(db),
        host_id=current_user.id,
        max_players=request.maxPlayers or settings.MULTIPLAYER_MAX_PLAYERS,
        status="WAITING",
        visibility=request.visibility,
        quiz_config=quiz_config,
        questions=[],
    )
    session.players.append(
        SessionPlayer(
            user_id=current_user.id,
            username=current_user.username,
            is_host=True,
            score=0,
            current_question=0,
        )
    )

    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info(f"[멀티플레이어] 세션 {session.session_code} 생성 (호스트: {current_user.username})")

    return SessionCreateResponse(
        sessionCode=session.session_code,
        sessionId=session.id,
        status=session.status,
    )


@router.post("/join", response_model=SessionJoinResponse)
def join_session(
    request: SessionJoinRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """세션 코드로 참가"""
    session = _session_or_404(db, request.sessionCode)

    if session.status != "WAITING":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Session already started")

    if len(session.players) >= session.max_players:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Session is full")

    if session.find_player(current_user.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You are already in this session")

    invite = next((i for i in session.invites if i.user_id == current_user.id), None)

    if session.visibility == "FRIENDS_ONLY":
        invited = invite is not None and invite.status != "DECLINED"
        if not invited and not friend_service.are_friends(db, current_user.id, session.host_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="This session is only open to the host's friends",
            )

    session.players.append(
        SessionPlayer(
            user_id=current_user.id,
            username=current_user.username,
            is_host=False,
            score=0,
            current_question=0,
        )
    )
    if invite is not None:
        invite.status = "ACCEPTED"

    db.commit()
    db.refresh(session)

    logger.info(f"[멀티플레이어] {current_user.username} 세션 {session.session_code} 참가 ({len(session.players)}명)")

    return SessionJoinResponse(
        sessionCode=session.session_code,
        players=[serialize_player(p) for p in session.players],
        status=session.status,
    )


@router.get("/public", response_model=PublicSessionListResponse)
def list_public_sessions(db: Session = Depends(get_db)):
    """참가 가능한 공개 세션 목록"""
    result = db.execute(
        select(MultiplayerSession)
        .where(
            MultiplayerSession.status == "WAITING",
            MultiplayerSession.visibility == "PUBLIC",
        )
        .order_by(MultiplayerSession.created_at.desc(), MultiplayerSession.id.desc())
    )
    sessions = [s for s in result.scalars().all() if len(s.players) < s.max_players]

    return PublicSessionListResponse(
        sessions=[
            {
                "sessionCode": s.session_code,
                "hostUsername": _host_username(s),
                "playerCount": len(s.players),
                "maxPlayers": s.max_players,
                "quizConfig": s.quiz_config or {},
            }
            for s in sessions
        ]
    )


@router.get("/session/{session_code}", response_model=SessionDetailResponse)
def get_session(session_code: str, db: Session = Depends(get_db)):
    """세션 상세 (폴링용)"""
    session = _session_or_404(db, session_code)
    return SessionDetailResponse(**serialize_session(session))


@router.post("/start/{session_code}", response_model=SessionStartResponse)
async def start_session(
    session_code: str,
    request: Optional[SessionStartRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    trivia_client: TriviaClient = Depends(get_trivia_client),
):
    """
    세션 시작 (호스트 전용)

    문제를 함께 보내지 않으면 quizConfig 설정대로 외부 API에서 가져옵니다.
    """
    session = _session_or_404(db, session_code)

    if session.host_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the host can start the session")

    if len(session.players) < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Need at least 1 player to start")

    if session.status != "WAITING":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Session already started")

    questions = request.questions if request else None
    if questions is None:
        session.status = "STARTING"
        db.commit()
        try:
            questions = await trivia_client.fetch_for_config(session.quiz_config or DEFAULT_QUIZ_CONFIG)
        except TriviaProviderError as e:
            logger.error(f"[멀티플레이어] 세션 {session.session_code} 문제 조회 실패: {e.detail}")
            raise HTTPException(status_code=e.status_code, detail=e.detail)
        finally:
            # 조회 실패 시 STARTING에 머물지 않도록 대기 상태로 복구
            if not questions:
                session.status = "WAITING"
                db.commit()

    if not questions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Questions are required to start the session",
        )

    session.status = "IN_PROGRESS"
    session.questions = list(questions)
    session.started_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(session)

    logger.info(f"[멀티플레이어] 세션 {session.session_code} 시작 ({len(session.questions)}문제)")

    return SessionStartResponse(
        sessionCode=session.session_code,
        status=session.status,
        questions=session.questions,
        startedAt=session.started_at,
    )


@router.post("/session/{session_code}/answer", response_model=AnswerResponse)
def submit_answer(
    session_code: str,
    request: AnswerRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    답안 제출

    문제에 보기 정보가 있으면 서버가 채점하고, 없으면 클라이언트의 isCorrect를 사용합니다.
    """
    session = _session_or_404(db, session_code)

    player = session.find_player(current_user.id)
    if not player:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found in session")

    if session.status != "IN_PROGRESS":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Session is not in progress")

    questions = session.questions or []
    if request.questionIndex >= len(questions):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Question index out of range")

    if request.questionIndex < player.current_question:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Question already answered")

    is_correct = grade_answer(questions[request.questionIndex], request.answer)
    if is_correct is None:
        is_correct = bool(request.isCorrect)

    if is_correct:
        player.score += 1
    player.current_question = request.questionIndex + 1

    if player.current_question >= len(questions):
        player.finished = True

    if all(p.finished for p in session.players):
        session.status = "FINISHED"
        session.finished_at = datetime.now(timezone.utc)
        logger.info(f"[멀티플레이어] 세션 {session.session_code} 모든 플레이어 완료")

    db.commit()

    return AnswerResponse(
        score=player.score,
        currentQuestion=player.current_question,
        finished=player.finished,
    )


@router.get("/session/{session_code}/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard(session_code: str, db: Session = Depends(get_db)):
    """세션 리더보드 (점수 내림차순)"""
    session = _session_or_404(db, session_code)
    return LeaderboardResponse(leaderboard=leaderboard(session))


@router.post("/end/{session_code}", response_model=MessageResponse)
def end_session(
    session_code: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """세션 종료 (호스트 전용)"""
    session = _session_or_404(db, session_code)

    if session.host_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the host can end the session")

    session.status = "FINISHED"
    session.finished_at = datetime.now(timezone.utc)
    db.commit()

    logger.info(f"[멀티플레이어] 세션 {session.session_code} 종료")

    return MessageResponse(message="Session ended successfully")


@router.post("/leave/{session_code}", response_model=MessageResponse)
def leave_session(
    session_code: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    세션 나가기

    호스트가 나가면 가장 먼저 들어온 플레이어가 호스트가 되고,
    아무도 남지 않으면 세션을 종료합니다.
    """
    session = _session_or_404(db, session_code)

    player = session.find_player(current_user.id)
    if not player:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found in session")

    session.players.remove(player)

    if not session.players:
        session.status = "FINISHED"
        session.finished_at = datetime.now(timezone.utc)
    else:
        if session.host_id == current_user.id:
            new_host = reassign_host(session)
            logger.info(f"[멀티플레이어] 세션 {session.session_code} 호스트 승계 -> {new_host.username}")

        # 남은 플레이어가 모두 끝났다면 세션도 종료
        if session.status == "IN_PROGRESS" and all(p.finished for p in session.players):
            session.status = "FINISHED"
            session.finished_at = datetime.now(timezone.utc)
            logger.info(f"[멀티플레이어] 세션 {session.session_code} 모든 플레이어 완료")

    db.commit()

    logger.info(f"[멀티플레이어] {current_user.username} 세션 {session.session_code} 나감")

    return MessageResponse(message="Left session successfully")


@router.post("/invite", response_model=InviteResponse)
def invite_friends(
    request: InviteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    친구 초대

    친구가 아니거나, 이미 참가 중이거나, 이미 초대 대기 중인 사용자는 건너뜁니다.
    """
    session = _session_or_404(db, request.sessionCode)

    if not session.find_player(current_user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You are not in this session")

    if session.status != "WAITING":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Session already started")

    friends = friend_service.friend_ids(db, current_user.id)
    existing_invites = {invite.user_id: invite for invite in session.invites}

    invited_count = 0
    for friend_id in dict.fromkeys(request.friendIds):
        if friend_id not in friends or session.find_player(friend_id):
            continue

        invite = existing_invites.get(friend_id)
        if invite is not None:
            if invite.status == "PENDING":
                continue
            # 거절했던 초대는 다시 대기 상태로
            invite.status = "PENDING"
            invite.invited_by = current_user.id
            invite.invited_at = datetime.now(timezone.utc)
        else:
            friend = db.get(User, friend_id)
            if friend is None:
                continue
            session.invites.append(
                SessionInvite(
                    user_id=friend.id,
                    username=friend.username,
                    invited_by=current_user.id,
                    status="PENDING",
                )
            )
        invited_count += 1

    db.commit()

    logger.info(f"[멀티플레이어] 세션 {session.session_code} 친구 {invited_count}명 초대")

    return InviteResponse(message="Invitations sent", invitedCount=invited_count)


@router.get("/invites", response_model=InviteListResponse)
def get_my_invites(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """받은 초대 중 아직 시작 전인 세션"""
    result = db.execute(
        select(SessionInvite)
        .join(MultiplayerSession, SessionInvite.session_id == MultiplayerSession.id)
        .where(
            SessionInvite.user_id == current_user.id,
            SessionInvite.status == "PENDING",
            MultiplayerSession.status == "WAITING",
        )
        .order_by(SessionInvite.id.desc())
    )
    invites = result.scalars().all()

    return InviteListResponse(
        invites=[
            {
                "sessionCode": invite.session.session_code,
                "hostUsername": _host_username(invite.session),
                "invitedBy": invite.invited_by,
                "invitedAt": invite.invited_at,
                "status": invite.status,
            }
            for invite in invites
        ]
    )


@router.post("/invites/{session_code}/decline", response_model=MessageResponse)
def decline_invite(
    session_code: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """초대 거절"""
    session = _session_or_404(db, session_code)

    invite = next(
        (i for i in session.invites if i.user_id == current_user.id and i.status == "PENDING"),
        None,
    )
    if invite is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")

    invite.status = "DECLINED"
    db.commit()

    return MessageResponse(message="Invitation declined")
