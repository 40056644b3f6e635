"""
Quiz 모델 - 사용자 제작 퀴즈 및 풀이 기록
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base


QUIZ_STATUSES = ("DRAFT", "PUBLISHED", "ARCHIVED")
QUESTION_TYPES = ("MULTIPLE_CHOICE", "MULTI_SELECT", "TRUE_FALSE")


class Quiz(Base):
    """
    퀴즈 모델
    사용자가 직접 만든 퀴즈 (외부 API 문제는 저장하지 않음)
    """
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True, index=True)
    difficulty = Column(String, nullable=True)
    status = Column(String, nullable=False, default="DRAFT", index=True)

    # 문제 데이터 (JSON)
    # Question 구조: {
    #   "id": "...", "text": "...", "type": "MULTIPLE_CHOICE", "order": 1,
    #   "explanation": "...", "options": [{"id": "...", "text": "...", "isCorrect": true}]
    # }
    questions = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # 관계
    creator = relationship("User", back_populates="quizzes")
    # 퀴즈가 삭제돼도 풀이 기록은 진행도 계산에 남음 (quiz_id만 NULL)
    attempts = relationship("Attempt", back_populates="quiz")

    def __repr__(self):
        return f"<Quiz(id={self.id}, title={self.title}, status={self.status})>"


class Attempt(Base):
    """
    퀴즈 풀이 기록
    제작 퀴즈 제출과 외부 API 문제 풀이 결과를 모두 저장 (진행도 계산의 기준)
    """
    __tablename__ = "attempts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="SET NULL"), nullable=True, index=True)

    source = Column(String, nullable=False, default="CUSTOM")  # CUSTOM, OPENTDB, TRIVIA_API, LOCAL ...
    category = Column(String, nullable=True)
    difficulty = Column(String, nullable=True)

    score = Column(Integer, nullable=False, default=0)
    max_score = Column(Integer, nullable=False, default=0)
    max_streak = Column(Integer, nullable=False, default=0)
    duration_ms = Column(Integer, nullable=True)
    first_correct = Column(Boolean, nullable=False, default=False)

    # 문항별 답안: [{"questionId", "selectedOptionIds", "isCorrect", "timeMs"}]
    answers = Column(JSON, nullable=False, default=list)

    started_at = Column(DateTime(timezone=True), nullable=True)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # 관계
    user = relationship("User", back_populates="attempts")
    quiz = relationship("Quiz", back_populates="attempts")

    @property
    def percentage(self) -> float:
        if not self.max_score:
            return 0.0
        return round(self.score / self.max_score * 100, 2)

    def __repr__(self):
        return f"<Attempt(id={self.id}, user_id={self.user_id}, score={self.score}/{self.max_score})>"
