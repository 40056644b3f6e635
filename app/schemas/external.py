"""
외부 퀴즈 API 응답 스키마
OpenTDB / The Trivia API 문제를 공통 형식으로 변환한 결과
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal


class ExternalOption(BaseModel):
    text: str
    isCorrect: bool


class ExternalQuestion(BaseModel):
    text: str
    type: Literal["MULTIPLE_CHOICE", "TRUE_FALSE"]
    order: int = Field(..., description="1부터 시작하는 문제 순서")
    options: List[ExternalOption]
    category: Optional[str] = None
    difficulty: Optional[str] = None
    source: Literal["OPENTDB", "TRIVIA_API"]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "What is the capital of Australia?",
                "type": "MULTIPLE_CHOICE",
                "order": 1,
                "options": [
                    {"text": "Sydney", "isCorrect": False},
                    {"text": "Canberra", "isCorrect": True},
                    {"text": "Melbourne", "isCorrect": False},
                    {"text": "Perth", "isCorrect": False}
                ],
                "category": "Geography",
                "difficulty": "easy",
                "source": "OPENTDB"
            }
        }
    )


class ExternalQuestionsResponse(BaseModel):
    source: Literal["OPENTDB", "TRIVIA_API"]
    count: int
    questions: List[ExternalQuestion]


class CategoryOut(BaseModel):
    id: int
    name: str


class CategoryListResponse(BaseModel):
    categories: List[CategoryOut]
