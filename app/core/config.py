from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Union, Any
from functools import lru_cache
import json


DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]


class Settings(BaseSettings):
    # Project Settings
    PROJECT_NAME: str = "QuizNerds API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # CORS Settings
    # 쉼표로 구분된 문자열, JSON 배열, 또는 리스트로 받을 수 있음
    BACKEND_CORS_ORIGINS: Union[List[str], str] = DEFAULT_CORS_ORIGINS

    # 개발 모드 여부
    DEBUG: bool = True

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Any) -> Union[List[str], str]:
        """환경 변수에서 받은 값을 그대로 반환 (나중에 파싱)"""
        return v

    def _parse_cors_origins(self) -> List[str]:
        """CORS origins를 파싱하여 리스트로 반환"""
        origins = self.BACKEND_CORS_ORIGINS

        if isinstance(origins, list):
            return origins

        if isinstance(origins, str):
            # JSON 배열인 경우
            if origins.strip().startswith('['):
                try:
                    parsed = json.loads(origins)
                    if isinstance(parsed, list):
                        return parsed
                except json.JSONDecodeError:
                    pass

            # 쉼표로 구분된 문자열인 경우
            parsed_list = [origin.strip() for origin in origins.split(',') if origin.strip()]
            if parsed_list:
                return parsed_list

        return list(DEFAULT_CORS_ORIGINS)

    @property
    def cors_origins(self) -> List[str]:
        """파싱된 CORS origins 반환"""
        return self._parse_cors_origins()

    # Database Settings
    DATABASE_URL: str = "sqlite:///./quiznerds.db"

    # Security Settings
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7일

    # 이메일 인증 링크가 가리키는 프론트엔드 주소
    CLIENT_URL: str = "http://localhost:5173"
    EMAIL_VERIFICATION_EXPIRE_HOURS: int = 24

    # SMTP Settings (비어 있으면 개발 모드: 토큰을 응답에 포함)
    EMAIL_HOST: str = "smtp.gmail.com"
    EMAIL_PORT: int = 587
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""

    # 외부 퀴즈 API
    OPENTDB_BASE_URL: str = "https://opentdb.com"
    TRIVIA_API_BASE_URL: str = "https://the-trivia-api.com"
    EXTERNAL_TIMEOUT_SECONDS: float = 10.0

    # 요청 제한 (0이면 비활성화)
    RATE_LIMIT_PER_MINUTE: int = 120
    MAX_BODY_BYTES: int = 1024 * 1024

    # 멀티플레이어
    MULTIPLAYER_MAX_PLAYERS: int = 8

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def email_enabled(self) -> bool:
        return bool(self.EMAIL_USER and self.EMAIL_PASS)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
