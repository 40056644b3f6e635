"""
이메일 발송 서비스 (인증 메일)
EMAIL_USER/EMAIL_PASS가 없으면 발송하지 않고 개발 모드로 동작
"""

from email.message import EmailMessage
import logging
import smtplib

from app.core.config import settings

logger = logging.getLogger(__name__)


VERIFICATION_TEMPLATE = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #9333ea;">Email Verification</h2>
  <p>Hello {name},</p>
  <p>Please verify your email address by clicking the button below:</p>
  <a href="{url}" style="display: inline-block; padding: 12px 24px; background-color: #9333ea; color: white; text-decoration: none; border-radius: 6px; margin: 20px 0;">Verify Email</a>
  <p>Or copy and paste this link into your browser:</p>
  <p style="color: #666; word-break: break-all;">{url}</p>
  <p style="color: #999; font-size: 12px;">This link will expire in {hours} hours.</p>
  <p style="color: #999; font-size: 12px;">If you didn't request this, please ignore this email.</p>
</div>
"""


def build_verification_url(token: str) -> str:
    return f"{settings.CLIENT_URL.rstrip('/')}/verify-email?token={token}"


def send_verification_email(to_address: str, name: str, verification_url: str) -> bool:
    """
    인증 메일 발송

    Returns:
        bool: 실제로 발송했으면 True (SMTP 미설정 또는 발송 실패 시 False)
    """
    if not settings.email_enabled:
        logger.info(f"[인증 메일] SMTP 미설정 - 발송 생략 (URL: {verification_url})")
        return False

    message = EmailMessage()
    message["Subject"] = "Verify Your Email - QuizNerds"
    message["From"] = settings.EMAIL_USER
    message["To"] = to_address
    message.set_content(f"Verify your email address: {verification_url}")
    message.add_alternative(
        VERIFICATION_TEMPLATE.format(
            name=name,
            url=verification_url,
            hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS,
        ),
        subtype="html",
    )

    try:
        with smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=10) as smtp:
            smtp.starttls()
            smtp.login(settings.EMAIL_USER, settings.EMAIL_PASS)
            smtp.send_message(message)
        logger.info(f"[인증 메일] {to_address} 발송 완료")
        return True
    except (smtplib.SMTPException, OSError) as e:
        # 발송 실패는 기록만 하고 요청은 성공 처리
        logger.error(f"[인증 메일] 발송 실패: {str(e)}")
        return False
