"""
제작 퀴즈 관련 스키마
퀴즈 생성, 조회, 풀이 제출 등의 요청/응답 모델
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional, Literal, Dict, Any
from datetime import datetime


QuestionType = Literal["MULTIPLE_CHOICE", "MULTI_SELECT", "TRUE_FALSE"]
QuizStatus = Literal["DRAFT", "PUBLISHED", "ARCHIVED"]


class OptionCreate(BaseModel):
    text: str = Field(..., min_length=1)
    isCorrect: bool = False


class QuestionCreate(BaseModel):
    """퀴즈 문제 생성 - 보기 규칙 검증 포함"""
    text: str = Field(..., min_length=1, description="문제 내용")
    type: QuestionType = "MULTIPLE_CHOICE"
    explanation: Optional[str] = Field(None, description="정답 해설")
    options: List[OptionCreate]

    @model_validator(mode="after")
    def check_options(self):
        if len(self.options) < 2:
            raise ValueError("Each question needs at least 2 options")

        correct_count = sum(1 for option in self.options if option.isCorrect)
        if correct_count == 0:
            raise ValueError("Each question needs at least one correct option")

        if self.type in ("MULTIPLE_CHOICE", "TRUE_FALSE") and correct_count != 1:
            raise ValueError(f"{self.type} questions need exactly one correct option")

        if self.type == "TRUE_FALSE" and len(self.options) != 2:
            raise ValueError("TRUE_FALSE questions need exactly 2 options")

        return self


class QuizCreateRequest(BaseModel):
    """퀴즈 생성 요청"""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[Literal["easy", "medium", "hard"]] = None
    status: QuizStatus = "DRAFT"
    questions: List[QuestionCreate] = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "World Capitals",
                "category": "Geography",
                "difficulty": "easy",
                "status": "PUBLISHED",
                "questions": [
                    {
                        "text": "What is the capital of Japan?",
                        "type": "MULTIPLE_CHOICE",
                        "options": [
                            {"text": "Tokyo", "isCorrect": True},
                            {"text": "Osaka", "isCorrect": False}
                        ]
                    }
                ]
            }
        }
    )


class QuizUpdateRequest(BaseModel):
    """퀴즈 수정 요청 - 전달된 필드만 변경"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[Literal["easy", "medium", "hard"]] = None
    status: Optional[QuizStatus] = None
    questions: Optional[List[QuestionCreate]] = Field(None, min_length=1)


class QuizResponse(BaseModel):
    """퀴즈 응답 (작성자용: isCorrect 포함)"""
    id: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    status: str
    createdBy: int
    questions: List[Dict[str, Any]]
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class QuizSummary(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    status: str
    questionCount: int
    createdBy: int
    createdAt: Optional[datetime] = None


class QuizListResponse(BaseModel):
    items: List[QuizSummary]
    total: int


class AnswerSubmission(BaseModel):
    questionId: str
    selectedOptionIds: List[str] = Field(default_factory=list)
    timeMs: Optional[int] = Field(None, ge=0)


class AttemptSubmitRequest(BaseModel):
    """퀴즈 풀이 제출"""
    answers: List[AnswerSubmission]
    durationMs: Optional[int] = Field(None, ge=0, description="소요 시간(ms)")
    startedAt: Optional[datetime] = None
    finishedAt: Optional[datetime] = Field(None, description="사용자 로컬 시간대 기준 완료 시각")


class QuestionResult(BaseModel):
    questionId: str
    isCorrect: bool
    selectedOptionIds: List[str]
    correctOptionIds: List[str]
    explanation: Optional[str] = None


class AttemptOut(BaseModel):
    id: int
    quizId: Optional[int] = None
    source: str
    category: Optional[str] = None
    score: int
    maxScore: int
    percentage: float
    maxStreak: int
    durationMs: Optional[int] = None
    createdAt: Optional[datetime] = None


class AttemptListResponse(BaseModel):
    attempts: List[AttemptOut]


class AttemptSubmitResponse(BaseModel):
    """퀴즈 제출 결과"""
    attemptId: int
    score: int
    maxScore: int
    percentage: float
    results: List[QuestionResult]
    progress: Dict[str, Any]
