"""
외부 퀴즈 API 호출 서비스
OpenTDB (https://opentdb.com) 와 The Trivia API (https://the-trivia-api.com) 프록시
"""

import httpx
from typing import Optional, Dict, Any, List
import logging

from app.core.config import settings
from app.services.question_formatter import map_opentdb, map_trivia_api

logger = logging.getLogger(__name__)


# OpenTDB response_code 의미
OPENTDB_RESPONSE_CODES = {
    1: "No results",
    2: "Invalid parameter",
    3: "Token not found",
    4: "Token empty",
    5: "Rate limit",
}


class TriviaProviderError(Exception):
    """외부 API 호출 실패 (HTTP 상태 코드와 함께 전달)"""

    def __init__(self, status_code: int, detail: str, provider_code: Optional[int] = None):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.provider_code = provider_code


class TriviaClient:
    """외부 퀴즈 API 통신 서비스"""

    def __init__(
        self,
        opentdb_url: Optional[str] = None,
        trivia_api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.opentdb_url = (opentdb_url or settings.OPENTDB_BASE_URL).rstrip("/")
        self.trivia_api_url = (trivia_api_url or settings.TRIVIA_API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.EXTERNAL_TIMEOUT_SECONDS
        # 테스트에서 httpx.MockTransport 주입용
        self._transport = transport

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        logger.info(f"[외부 API] GET {url} params={params}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
        except httpx.TimeoutException:
            logger.error(f"[외부 API] 요청 타임아웃: {url}")
            raise TriviaProviderError(504, "Trivia provider timed out")
        except httpx.HTTPError as e:
            logger.error(f"[외부 API] 네트워크 오류: {str(e)}")
            raise TriviaProviderError(502, f"Trivia provider unreachable: {str(e)}")

        if response.status_code != 200:
            logger.error(f"[외부 API] 호출 실패 (HTTP {response.status_code}): {response.text[:500]}")
            raise TriviaProviderError(502, f"Trivia provider returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError:
            logger.error(f"[외부 API] JSON 파싱 실패: {response.text[:500]}")
            raise TriviaProviderError(502, "Trivia provider returned invalid JSON")

    @staticmethod
    def _map(mapper, items: Any, provider: str) -> List[Dict[str, Any]]:
        """응답 변환 중 필드 누락/형식 오류는 502로 변환"""
        try:
            return mapper(items)
        except (KeyError, TypeError, AttributeError) as e:
            logger.error(f"[외부 API] {provider} 응답 형식 오류: {type(e).__name__}: {e}")
            raise TriviaProviderError(502, f"{provider} returned a malformed payload")

    async def fetch_opentdb(
        self,
        amount: int = 10,
        category: Optional[int] = None,
        difficulty: Optional[str] = None,
        question_type: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """OpenTDB 문제 조회 후 공통 형식으로 변환"""
        params: Dict[str, Any] = {"amount": amount}
        if category:
            params["category"] = category
        if difficulty:
            params["difficulty"] = difficulty
        if question_type:
            params["type"] = question_type

        data = await self._get_json(f"{self.opentdb_url}/api.php", params)
        if not isinstance(data, dict):
            raise TriviaProviderError(502, "OpenTDB returned an unexpected payload")

        response_code = data.get("response_code")
        if response_code != 0:
            reason = OPENTDB_RESPONSE_CODES.get(response_code, "Unknown error")
            logger.warning(f"[외부 API] OpenTDB 오류 코드 {response_code} ({reason})")
            raise TriviaProviderError(502, f"OpenTDB error: {reason}", provider_code=response_code)

        return self._map(map_opentdb, data.get("results", []), "OpenTDB")

    async def fetch_trivia_api(
        self,
        limit: int = 10,
        categories: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """The Trivia API 문제 조회 후 공통 형식으로 변환"""
        params: Dict[str, Any] = {"limit": limit}
        if categories:
            params["categories"] = categories
        if difficulty:
            params["difficulty"] = difficulty

        items = await self._get_json(f"{self.trivia_api_url}/api/questions", params)
        if not isinstance(items, list):
            raise TriviaProviderError(502, "Trivia API returned an unexpected payload")

        return self._map(map_trivia_api, items, "Trivia API")

    async def fetch_opentdb_categories(self) -> List[Dict[str, Any]]:
        data = await self._get_json(f"{self.opentdb_url}/api_category.php", {})
        return self._map(
            lambda d: [{"id": c["id"], "name": c["name"]} for c in d.get("trivia_categories", [])],
            data,
            "OpenTDB",
        )

    async def fetch_for_config(self, quiz_config: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        멀티플레이어 세션 설정(quizConfig)에 맞춰 문제 조회

        Args:
            quiz_config: {"source", "amount", "difficulty", "category"}
        """
        source = quiz_config.get("source", "opentdb")
        amount = int(quiz_config.get("amount") or 10)
        difficulty = quiz_config.get("difficulty")
        category = quiz_config.get("category")

        if source == "triviaapi":
            return await self.fetch_trivia_api(limit=amount, categories=category, difficulty=difficulty)

        category_id = int(category) if category and str(category).isdigit() else None
        return await self.fetch_opentdb(amount=amount, category=category_id, difficulty=difficulty)


# 싱글톤 인스턴스
_trivia_client: Optional[TriviaClient] = None


def get_trivia_client() -> TriviaClient:
    """TriviaClient 인스턴스 반환 (FastAPI Depends에서 사용)"""
    global _trivia_client
    if _trivia_client is None:
        _trivia_client = TriviaClient()
    return _trivia_client
