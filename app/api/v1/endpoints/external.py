"""
외부 퀴즈 API 프록시 엔드포인트
브라우저가 직접 호출하지 않도록 서버에서 조회 후 공통 형식으로 변환해 반환
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional, Literal
import logging

from app.schemas.external import ExternalQuestionsResponse, CategoryListResponse
from app.services.trivia_client import TriviaClient, TriviaProviderError, get_trivia_client

logger = logging.getLogger(__name__)

router = APIRouter()


def _provider_error(e: TriviaProviderError) -> HTTPException:
    detail = e.detail if e.provider_code is None else {"error": e.detail, "code": e.provider_code}
    return HTTPException(status_code=e.status_code, detail=detail)


@router.get("/opentdb", response_model=ExternalQuestionsResponse)
async def get_opentdb_questions(
    amount: int = Query(10, ge=1, le=50, description="문제 개수"),
    category: Optional[int] = Query(None, description="OpenTDB 카테고리 ID"),
    difficulty: Optional[Literal["easy", "medium", "hard"]] = Query(None),
    type: Optional[Literal["multiple", "boolean"]] = Query(None, description="문제 유형"),
    trivia_client: TriviaClient = Depends(get_trivia_client),
):
    """OpenTDB 문제 조회"""
    try:
        questions = await trivia_client.fetch_opentdb(
            amount=amount,
            category=category,
            difficulty=difficulty,
            question_type=type,
        )
    except TriviaProviderError as e:
        raise _provider_error(e)

    logger.info(f"[외부 API] OpenTDB {len(questions)}문제 반환")
    return ExternalQuestionsResponse(source="OPENTDB", count=len(questions), questions=questions)


@router.get("/opentdb/categories", response_model=CategoryListResponse)
async def get_opentdb_categories(trivia_client: TriviaClient = Depends(get_trivia_client)):
    """OpenTDB 카테고리 목록"""
    try:
        categories = await trivia_client.fetch_opentdb_categories()
    except TriviaProviderError as e:
        raise _provider_error(e)
    return CategoryListResponse(categories=categories)


@router.get("/triviaapi", response_model=ExternalQuestionsResponse)
async def get_trivia_api_questions(
    limit: int = Query(10, ge=1, le=50, description="문제 개수"),
    categories: Optional[str] = Query(None, description="쉼표로 구분된 카테고리 (예: science,history)"),
    difficulty: Optional[Literal["easy", "medium", "hard"]] = Query(None),
    trivia_client: TriviaClient = Depends(get_trivia_client),
):
    """The Trivia API 문제 조회"""
    try:
        questions = await trivia_client.fetch_trivia_api(
            limit=limit,
            categories=categories,
            difficulty=difficulty,
        )
    except TriviaProviderError as e:
        raise _provider_error(e)

    logger.info(f"[외부 API] The Trivia API {len(questions)}문제 반환")
    return ExternalQuestionsResponse(source="TRIVIA_API", count=len(questions), questions=questions)
