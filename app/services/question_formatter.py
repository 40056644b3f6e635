"""
외부 퀴즈 API 문제를 공통 형식으로 변환
OpenTDB와 The Trivia API의 응답 구조가 달라 하나의 형식으로 맞춤
"""

from typing import List, Dict, Any, Optional
import html
import random


def shuffle_options(items: List[str], rng: Optional[random.Random] = None) -> List[str]:
    """원본을 건드리지 않고 섞은 복사본 반환 (Fisher-Yates)"""
    shuffled = list(items)
    (rng or random).shuffle(shuffled)
    return shuffled


def _build_options(correct: str, incorrect: List[str], rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    return [
        {"text": text, "isCorrect": text == correct}
        for text in shuffle_options([correct, *incorrect], rng)
    ]


def _question_type(raw_type: Optional[str]) -> str:
    return "TRUE_FALSE" if raw_type == "boolean" else "MULTIPLE_CHOICE"


def map_opentdb(results: List[Dict[str, Any]], rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    """
    OpenTDB 결과 변환

    OpenTDB는 문제/보기를 HTML 엔티티로 인코딩해서 내려주므로 디코딩이 필요함
    (예: "Who wrote &quot;Hamlet&quot;?")
    """
    questions = []
    for index, item in enumerate(results):
        correct = html.unescape(item["correct_answer"])
        incorrect = [html.unescape(answer) for answer in item.get("incorrect_answers", [])]

        questions.append({
            "text": html.unescape(item["question"]),
            "type": _question_type(item.get("type")),
            "order": index + 1,
            "options": _build_options(correct, incorrect, rng),
            "category": html.unescape(item["category"]) if item.get("category") else None,
            "difficulty": item.get("difficulty"),
            "source": "OPENTDB",
        })
    return questions


def map_trivia_api(items: List[Dict[str, Any]], rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    """The Trivia API 결과 변환 (이미 평문이라 디코딩 불필요)"""
    questions = []
    for index, item in enumerate(items):
        question = item["question"]
        # v2 응답은 {"text": "..."} 형태, v1은 문자열
        if isinstance(question, dict):
            question = question.get("text", "")

        correct = item["correctAnswer"]
        questions.append({
            "text": question,
            "type": _question_type(item.get("type")),
            "order": index + 1,
            "options": _build_options(correct, list(item.get("incorrectAnswers", [])), rng),
            "category": item.get("category"),
            "difficulty": item.get("difficulty"),
            "source": "TRIVIA_API",
        })
    return questions
