"""
멀티플레이어 세션 모델
클라이언트가 2-3초 간격으로 폴링하는 세션 레코드
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base


SESSION_STATUSES = ("WAITING", "STARTING", "IN_PROGRESS", "FINISHED")
SESSION_VISIBILITIES = ("PUBLIC", "PRIVATE", "FRIENDS_ONLY")
INVITE_STATUSES = ("PENDING", "ACCEPTED", "DECLINED")


class MultiplayerSession(Base):
    __tablename__ = "multiplayer_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_code = Column(String(6), unique=True, nullable=False, index=True)
    host_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    max_players = Column(Integer, nullable=False, default=8)
    status = Column(String, nullable=False, default="WAITING", index=True)
    visibility = Column(String, nullable=False, default="PRIVATE", index=True)

    # {"source": "opentdb", "amount": 10, "difficulty": "medium", "category": null}
    quiz_config = Column(JSON, nullable=False)
    questions = Column(JSON, nullable=False, default=list)

    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # 입장 순서대로 정렬 (호스트 승계와 동점 처리 기준)
    players = relationship(
        "SessionPlayer",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionPlayer.id",
    )
    invites = relationship(
        "SessionInvite",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionInvite.id",
    )

    def find_player(self, user_id: int):
        return next((p for p in self.players if p.user_id == user_id), None)

    def __repr__(self):
        return f"<MultiplayerSession(code={self.session_code}, status={self.status})>"


class SessionPlayer(Base):
    __tablename__ = "session_players"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("multiplayer_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    username = Column(String, nullable=False)
    score = Column(Integer, nullable=False, default=0)
    is_host = Column(Boolean, nullable=False, default=False)
    current_question = Column(Integer, nullable=False, default=0)
    finished = Column(Boolean, nullable=False, default=False)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    session = relationship("MultiplayerSession", back_populates="players")

    def __repr__(self):
        return f"<SessionPlayer(user_id={self.user_id}, score={self.score})>"


class SessionInvite(Base):
    __tablename__ = "session_invites"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("multiplayer_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    username = Column(String, nullable=False)
    invited_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String, nullable=False, default="PENDING")
    invited_at = Column(DateTime(timezone=True), server_default=func.now())

    session = relationship("MultiplayerSession", back_populates="invites")

    def __repr__(self):
        return f"<SessionInvite(session_id={self.session_id}, user_id={self.user_id}, status={self.status})>"
