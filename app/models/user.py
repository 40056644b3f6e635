"""
User 모델 - 아이디/비밀번호 기반 사용자 정보
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)

    # 이메일 인증
    email_verified = Column(Boolean, default=False, nullable=False)
    email_verification_token = Column(String(64), nullable=True, index=True)
    email_verification_expires = Column(DateTime, nullable=True)

    # 진행도 (XP, 업적, 일일 챌린지)
    total_xp = Column(Integer, default=0, nullable=False)
    achievements = Column(JSON, default=list, nullable=False)  # List[str] - 달성한 업적 ID
    last_daily_challenge = Column(String(10), nullable=True)  # 마지막으로 완료한 챌린지 날짜 (YYYY-MM-DD)

    # 타임스탬프
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # 관계
    quizzes = relationship("Quiz", back_populates="creator", cascade="all, delete-orphan")
    attempts = relationship("Attempt", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"
