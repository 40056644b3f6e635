"""
비밀번호 해싱 및 JWT 발급/검증
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import secrets

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: int, username: str, email: Optional[str]) -> str:
    """사용자 정보로 JWT 토큰 생성"""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),  # subject: 사용자 ID
        "username": username,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    JWT 토큰 검증 및 디코딩

    Raises:
        JWTError: 서명이 틀렸거나 만료된 경우
    """
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("sub") is None:
        raise JWTError("missing subject")
    return payload


def generate_verification_token() -> str:
    """이메일 인증용 64자리 hex 토큰"""
    return secrets.token_hex(32)
