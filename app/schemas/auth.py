from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    """회원가입 요청"""
    username: str = Field(..., min_length=3, max_length=30, description="사용자 이름 (3-30자)")
    email: str = Field(..., pattern=EMAIL_PATTERN, description="이메일 주소")
    password: str = Field(..., min_length=6, description="비밀번호 (6자 이상)")
    name: Optional[str] = Field(None, description="표시 이름 (없으면 username 사용)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "quizfan",
                "email": "quizfan@example.com",
                "password": "secret123",
                "name": "Quiz Fan"
            }
        }
    )


class LoginRequest(BaseModel):
    """로그인 요청 - username 자리에 이메일도 허용"""
    username: str = Field(..., min_length=1, description="사용자 이름 또는 이메일")
    password: str = Field(..., min_length=1)


class UserPublic(BaseModel):
    """다른 사용자에게 노출되는 사용자 정보"""
    id: int
    username: str
    email: Optional[str] = None
    name: Optional[str] = None


class UserPrivate(UserPublic):
    """본인에게 반환하는 사용자 정보"""
    emailVerified: bool = False


class AuthResponse(BaseModel):
    """회원가입/로그인 응답"""
    message: str
    token: str = Field(..., description="JWT 토큰")
    user: UserPrivate


class UserEnvelope(BaseModel):
    user: UserPrivate


class PublicUserEnvelope(BaseModel):
    user: UserPublic


class VerificationStatusResponse(BaseModel):
    emailVerified: bool
    email: Optional[str] = None


class VerificationRequestResponse(BaseModel):
    """인증 메일 요청 응답 - SMTP 미설정 시 token/verificationUrl 포함"""
    message: str
    token: Optional[str] = None
    verificationUrl: Optional[str] = None


class VerifyTokenRequest(BaseModel):
    token: Optional[str] = Field(None, description="이메일로 받은 인증 토큰")


class VerifyTokenResponse(BaseModel):
    message: str
    emailVerified: bool


class SyncVerificationRequest(BaseModel):
    emailVerified: Optional[bool] = None
