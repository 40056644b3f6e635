"""
사용자 API 엔드포인트
회원가입, 로그인, 내 정보, 사용자 조회
"""

from fastapi import APIRouter, HTTPException, status, Depends
from sqlalchemy.orm import Session
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
import logging

from app.api.dependencies import get_current_user, get_user_or_404
from app.core.security import get_password_hash, verify_password, create_access_token
from app.db.database import get_db
from app.models.user import User
from app.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    UserEnvelope,
    PublicUserEnvelope,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _private_user(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "name": user.name,
        "emailVerified": bool(user.email_verified),
    }


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    회원가입

    이메일 또는 사용자 이름이 이미 있으면 400을 반환합니다.
    """
    logger.info(f"[회원가입] username={request.username} 요청")

    result = db.execute(
        select(User).where(or_(User.email == request.email, User.username == request.username))
    )
    existing_user = result.scalars().first()

    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered" if existing_user.email == request.email else "Username already taken",
        )

    user = User(
        username=request.username,
        email=request.email,
        name=request.name or request.username,
        password_hash=get_password_hash(request.password),
        email_verified=False,
        total_xp=0,
        achievements=[],
    )

    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        # 동시에 같은 이름으로 가입한 경우
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username or email already exists",
        )

    logger.info(f"[회원가입] 사용자 ID {user.id} 생성 완료")

    return AuthResponse(
        message="User registered successfully",
        token=create_access_token(user.id, user.username, user.email),
        user=_private_user(user),
    )


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    로그인

    username 자리에 이메일을 넣어도 됩니다.
    """
    result = db.execute(
        select(User).where(or_(User.username == request.username, User.email == request.username))
    )
    user = result.scalars().first()

    if not user or not verify_password(request.password, user.password_hash):
        logger.info(f"[로그인] 실패 - {request.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    logger.info(f"[로그인] 사용자 {user.username} 로그인")

    return AuthResponse(
        message="Login successful",
        token=create_access_token(user.id, user.username, user.email),
        user=_private_user(user),
    )


@router.get("/me", response_model=UserEnvelope)
def get_me(current_user: User = Depends(get_current_user)):
    """현재 로그인한 사용자 정보 조회"""
    return UserEnvelope(user=_private_user(current_user))


@router.get("/{user_id}", response_model=PublicUserEnvelope)
def get_user(user_id: int, db: Session = Depends(get_db)):
    """사용자 조회 (친구 기능용)"""
    user = get_user_or_404(db, user_id)
    return PublicUserEnvelope(
        user={
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "name": user.name,
        }
    )
