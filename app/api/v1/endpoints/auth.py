"""
이메일 인증 API 엔드포인트
"""

from fastapi import APIRouter, HTTPException, status, Depends, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from sqlalchemy import select
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from app.api.dependencies import get_current_user, get_user_or_404
from app.core.config import settings
from app.core.security import generate_verification_token
from app.db.database import get_db
from app.models.user import User
from app.schemas.auth import (
    VerificationStatusResponse,
    VerificationRequestResponse,
    VerifyTokenRequest,
    VerifyTokenResponse,
    SyncVerificationRequest,
)
from app.services.email_service import build_verification_url, send_verification_email

logger = logging.getLogger(__name__)
router = APIRouter()


ERROR_PAGE = """\
<html>
  <body style="font-family: Arial, sans-serif; text-align: center; padding: 50px;">
    <h2>{title}</h2>
    <p>{message}</p>
    <a href="{client_url}">Go to QuizNerds</a>
  </body>
</html>
"""


def _error_page(title: str, message: str) -> HTMLResponse:
    return HTMLResponse(
        content=ERROR_PAGE.format(title=title, message=message, client_url=settings.CLIENT_URL),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def _find_user_by_token(db: Session, token: str) -> Optional[User]:
    """만료되지 않은 인증 토큰의 사용자"""
    result = db.execute(
        select(User).where(
            User.email_verification_token == token,
            User.email_verification_expires > datetime.now(timezone.utc),
        )
    )
    return result.scalar_one_or_none()


def _mark_verified(user: User) -> None:
    user.email_verified = True
    user.email_verification_token = None
    user.email_verification_expires = None


@router.get("/verification-status/{user_id}", response_model=VerificationStatusResponse)
def get_verification_status(user_id: int, db: Session = Depends(get_db)):
    """이메일 인증 여부 조회"""
    user = get_user_or_404(db, user_id)
    return VerificationStatusResponse(emailVerified=bool(user.email_verified), email=user.email)


@router.post("/request-verification", response_model=VerificationRequestResponse)
def request_verification(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    인증 메일 요청

    SMTP가 설정되지 않은 개발 환경에서는 토큰과 인증 URL을 응답에 포함합니다.
    """
    if current_user.email_verified:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already verified",
        )

    token = generate_verification_token()
    current_user.email_verification_token = token
    current_user.email_verification_expires = datetime.now(timezone.utc) + timedelta(
        hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS
    )
    db.commit()

    verification_url = build_verification_url(token)
    logger.info(f"[이메일 인증] 사용자 {current_user.username} 인증 토큰 발급")

    if settings.email_enabled:
        send_verification_email(current_user.email, current_user.name or current_user.username, verification_url)
        return VerificationRequestResponse(message="Verification email sent. Please check your inbox.")

    logger.info(f"[이메일 인증] 이메일 미설정 - 인증 URL: {verification_url}")
    return VerificationRequestResponse(
        message="Verification email sent. Please check your inbox.",
        token=token,
        verificationUrl=verification_url,
    )


@router.get("/verify-email")
def verify_email_link(token: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """이메일 링크로 인증 (성공 시 프론트엔드로 리다이렉트)"""
    if not token:
        return _error_page("Invalid Verification Link", "No verification token provided.")

    user = _find_user_by_token(db, token)
    if not user:
        return _error_page(
            "Invalid or Expired Token",
            "The verification link is invalid or has expired. Please request a new verification email.",
        )

    _mark_verified(user)
    db.commit()
    logger.info(f"[이메일 인증] 사용자 {user.username} 인증 완료 (링크)")

    return RedirectResponse(
        url=f"{settings.CLIENT_URL.rstrip('/')}/verification-success",
        status_code=status.HTTP_302_FOUND,
    )


@router.post("/verify-email-token", response_model=VerifyTokenResponse)
def verify_email_token(request: VerifyTokenRequest, db: Session = Depends(get_db)):
    """API 호출로 인증"""
    if not request.token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Verification token is required",
        )

    user = _find_user_by_token(db, request.token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired verification token",
        )

    _mark_verified(user)
    db.commit()
    logger.info(f"[이메일 인증] 사용자 {user.username} 인증 완료 (API)")

    return VerifyTokenResponse(message="Email verified successfully", emailVerified=True)


@router.post("/sync-verification", response_model=VerifyTokenResponse)
def sync_verification(
    request: SyncVerificationRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """인증 상태 수동 동기화"""
    if request.emailVerified is not None:
        current_user.email_verified = request.emailVerified
        db.commit()

    return VerifyTokenResponse(
        message="Verification status synced",
        emailVerified=bool(current_user.email_verified),
    )
