"""
퀴즈 API 엔드포인트
사용자 제작 퀴즈 생성, 조회, 수정, 삭제, 풀이 제출
"""

from fastapi import APIRouter, HTTPException, status, Depends, Query, Response
from sqlalchemy.orm import Session
from sqlalchemy import select, func, desc
from typing import Optional, List, Dict, Any
import logging
import uuid

from app.api.dependencies import get_current_user
from app.db.database import get_db
from app.models.quiz import Quiz, Attempt
from app.models.user import User
from app.schemas.quiz import (
    QuestionCreate,
    QuizCreateRequest,
    QuizUpdateRequest,
    QuizResponse,
    QuizListResponse,
    AttemptSubmitRequest,
    AttemptSubmitResponse,
    AttemptListResponse,
)
from app.services.progression import apply_attempt, local_wall_clock

logger = logging.getLogger(__name__)

router = APIRouter()


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _build_questions(questions: List[QuestionCreate]) -> List[Dict[str, Any]]:
    """요청의 문제 목록에 ID와 순서를 부여해 저장 형식으로 변환"""
    return [
        {
            "id": _new_id(),
            "text": question.text,
            "type": question.type,
            "order": index + 1,
            "explanation": question.explanation,
            "options": [
                {"id": _new_id(), "text": option.text, "isCorrect": option.isCorrect}
                for option in question.options
            ],
        }
        for index, question in enumerate(questions)
    ]


def _play_questions(questions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """작성자가 아닌 사용자에게는 정답/해설을 숨김"""
    return [
        {
            "id": q["id"],
            "text": q["text"],
            "type": q["type"],
            "order": q["order"],
            "options": [{"id": o["id"], "text": o["text"]} for o in q.get("options", [])],
        }
        for q in questions
    ]


def _quiz_response(quiz: Quiz, viewer: Optional[User]) -> QuizResponse:
    is_owner = viewer is not None and viewer.id == quiz.created_by
    return QuizResponse(
        id=quiz.id,
        title=quiz.title,
        description=quiz.description,
        category=quiz.category,
        difficulty=quiz.difficulty,
        status=quiz.status,
        createdBy=quiz.created_by,
        questions=quiz.questions if is_owner else _play_questions(quiz.questions),
        createdAt=quiz.created_at,
        updatedAt=quiz.updated_at,
    )


def _quiz_summary(quiz: Quiz) -> Dict[str, Any]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "category": quiz.category,
        "difficulty": quiz.difficulty,
        "status": quiz.status,
        "questionCount": len(quiz.questions or []),
        "createdBy": quiz.created_by,
        "createdAt": quiz.created_at,
    }


def _attempt_out(attempt: Attempt) -> Dict[str, Any]:
    return {
        "id": attempt.id,
        "quizId": attempt.quiz_id,
        "source": attempt.source,
        "category": attempt.category,
        "score": attempt.score,
        "maxScore": attempt.max_score,
        "percentage": attempt.percentage,
        "maxStreak": attempt.max_streak,
        "durationMs": attempt.duration_ms,
        "createdAt": attempt.created_at,
    }


def _get_quiz_or_404(db: Session, quiz_id: int) -> Quiz:
    quiz = db.get(Quiz, quiz_id)
    if not quiz:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return quiz


def _get_visible_quiz(db: Session, quiz_id: int, user: User) -> Quiz:
    """공개된 퀴즈이거나 본인 퀴즈만 접근 가능"""
    quiz = _get_quiz_or_404(db, quiz_id)
    if quiz.status != "PUBLISHED" and quiz.created_by != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return quiz


def _get_owned_quiz(db: Session, quiz_id: int, user: User) -> Quiz:
    quiz = _get_quiz_or_404(db, quiz_id)
    if quiz.created_by != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return quiz


@router.get("", response_model=QuizListResponse)
def list_published_quizzes(
    search: Optional[str] = Query(None, description="제목 검색어"),
    category: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100, description="최대 조회 개수"),
    offset: int = Query(0, ge=0, description="시작 위치"),
    db: Session = Depends(get_db)
):
    """공개된 퀴즈 목록"""
    conditions = [Quiz.status == "PUBLISHED"]
    if search:
        conditions.append(Quiz.title.ilike(f"%{search}%"))
    if category:
        conditions.append(Quiz.category == category)
    if difficulty:
        conditions.append(Quiz.difficulty == difficulty)

    total = db.execute(select(func.count(Quiz.id)).where(*conditions)).scalar()

    result = db.execute(
        select(Quiz)
        .where(*conditions)
        .order_by(desc(Quiz.created_at), desc(Quiz.id))
        .limit(limit)
        .offset(offset)
    )
    quizzes = result.scalars().all()

    return QuizListResponse(items=[_quiz_summary(q) for q in quizzes], total=total)


@router.post("", response_model=QuizResponse, status_code=status.HTTP_201_CREATED)
def create_quiz(
    request: QuizCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """퀴즈 생성"""
    quiz = Quiz(
        created_by=current_user.id,
        title=request.title,
        description=request.description,
        category=request.category,
        difficulty=request.difficulty,
        status=request.status,
        questions=_build_questions(request.questions),
    )

    db.add(quiz)
    db.commit()
    db.refresh(quiz)

    logger.info(f"[퀴즈 생성] 사용자 {current_user.username} 퀴즈 ID {quiz.id} ({len(quiz.questions)}문제)")

    return _quiz_response(quiz, current_user)


@router.get("/mine", response_model=QuizListResponse)
def list_my_quizzes(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """내가 만든 퀴즈 목록 (모든 상태)"""
    result = db.execute(
        select(Quiz)
        .where(Quiz.created_by == current_user.id)
        .order_by(desc(Quiz.created_at), desc(Quiz.id))
    )
    quizzes = result.scalars().all()
    return QuizListResponse(items=[_quiz_summary(q) for q in quizzes], total=len(quizzes))


@router.get("/{quiz_id}", response_model=QuizResponse)
def get_quiz(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """퀴즈 상세 - 작성자가 아니면 정답 정보 제외"""
    quiz = _get_visible_quiz(db, quiz_id, current_user)
    return _quiz_response(quiz, current_user)


@router.patch("/{quiz_id}", response_model=QuizResponse)
def update_quiz(
    quiz_id: int,
    request: QuizUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """퀴즈 수정 (작성자 전용)"""
    quiz = _get_owned_quiz(db, quiz_id, current_user)

    changes = request.model_dump(exclude_unset=True, exclude={"questions"})
    # title/status는 null로 비울 수 없음
    changes = {
        field: value for field, value in changes.items()
        if value is not None or field not in ("title", "status")
    }
    for field, value in changes.items():
        setattr(quiz, field, value)

    if request.questions is not None:
        quiz.questions = _build_questions(request.questions)

    db.commit()
    db.refresh(quiz)

    logger.info(f"[퀴즈 수정] 퀴즈 ID {quiz.id} 수정 ({', '.join(changes) or 'questions'})")

    return _quiz_response(quiz, current_user)


@router.delete("/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quiz(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """퀴즈 삭제 (작성자 전용)"""
    quiz = _get_owned_quiz(db, quiz_id, current_user)

    db.delete(quiz)
    db.commit()

    logger.info(f"[퀴즈 삭제] 퀴즈 ID {quiz_id} 삭제 완료")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{quiz_id}/attempts", response_model=AttemptSubmitResponse)
def submit_attempt(
    quiz_id: int,
    request: AttemptSubmitRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    퀴즈 풀이 제출 및 채점

    선택한 보기 집합이 정답 보기 집합과 정확히 같아야 정답입니다.
    채점 결과는 풀이 기록으로 저장되고 XP/업적에 반영됩니다.
    """
    quiz = _get_visible_quiz(db, quiz_id, current_user)

    submitted = {answer.questionId: answer for answer in request.answers}

    results = []
    stored_answers = []
    streak = 0
    max_streak = 0

    for question in sorted(quiz.questions, key=lambda q: q["order"]):
        answer = submitted.get(question["id"])
        selected = list(answer.selectedOptionIds) if answer else []
        correct_ids = [o["id"] for o in question["options"] if o.get("isCorrect")]
        is_correct = bool(selected) and set(selected) == set(correct_ids)

        streak = streak + 1 if is_correct else 0
        max_streak = max(max_streak, streak)

        results.append({
            "questionId": question["id"],
            "isCorrect": is_correct,
            "selectedOptionIds": selected,
            "correctOptionIds": correct_ids,
            "explanation": question.get("explanation"),
        })
        stored_answers.append({
            "questionId": question["id"],
            "selectedOptionIds": selected,
            "isCorrect": is_correct,
            "timeMs": answer.timeMs if answer else None,
        })

    score = sum(1 for r in results if r["isCorrect"])

    attempt = Attempt(
        user_id=current_user.id,
        quiz_id=quiz.id,
        source="CUSTOM",
        category=quiz.category,
        difficulty=quiz.difficulty,
        score=score,
        max_score=len(results),
        max_streak=max_streak,
        duration_ms=request.durationMs,
        first_correct=bool(results) and results[0]["isCorrect"],
        answers=stored_answers,
        started_at=request.startedAt.replace(tzinfo=None) if request.startedAt else None,
        finished_at=local_wall_clock(request.finishedAt),
    )
    db.add(attempt)
    db.flush()

    progress = apply_attempt(db, current_user, attempt)
    db.commit()

    logger.info(
        f"[퀴즈 제출] 사용자 {current_user.username} 퀴즈 ID {quiz.id} "
        f"점수 {score}/{len(results)} (XP +{progress['xpGained']})"
    )

    return AttemptSubmitResponse(
        attemptId=attempt.id,
        score=score,
        maxScore=len(results),
        percentage=attempt.percentage,
        results=results,
        progress=progress,
    )


@router.get("/{quiz_id}/attempts", response_model=AttemptListResponse)
def list_my_attempts(
    quiz_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """해당 퀴즈의 내 풀이 기록 (최신순)"""
    _get_visible_quiz(db, quiz_id, current_user)

    result = db.execute(
        select(Attempt)
        .where(Attempt.quiz_id == quiz_id, Attempt.user_id == current_user.id)
        .order_by(desc(Attempt.created_at), desc(Attempt.id))
    )
    return AttemptListResponse(attempts=[_attempt_out(a) for a in result.scalars().all()])
