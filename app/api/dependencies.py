# API dependencies
from fastapi import Header, HTTPException, status, Depends
from jose import JWTError
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import select
import logging

from app.core.security import decode_access_token
from app.db.database import get_db
from app.models.user import User

logger = logging.getLogger(__name__)


def _extract_bearer_token(authorization: Optional[str]) -> str:
    """Authorization 헤더에서 Bearer 토큰 추출"""
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header must be 'Bearer <token>'",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return authorization.replace("Bearer ", "", 1)


def get_current_user_id(authorization: Optional[str] = Header(None)) -> int:
    """
    JWT 토큰에서 현재 사용자 ID를 추출합니다.

    Raises:
        HTTPException: 인증 실패 시
    """
    token = _extract_bearer_token(authorization)

    try:
        payload = decode_access_token(token)
        return int(payload["sub"])
    except (JWTError, ValueError) as e:
        logger.warning(f"JWT 검증 실패: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> User:
    """
    JWT 토큰에서 현재 사용자를 가져옵니다.

    Raises:
        HTTPException: 토큰은 유효하지만 사용자가 삭제된 경우 404
    """
    result = db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    return user


def get_user_or_404(db: Session, user_id: int) -> User:
    result = db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user
