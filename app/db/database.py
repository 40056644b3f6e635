"""
데이터베이스 연결 설정
SQLAlchemy Session을 사용한 동기 연결
Lazy initialization으로 환경 변수가 없을 때도 앱이 시작될 수 있도록 함
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from app.core.config import settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# 전역 변수 (lazy initialization)
_engine: Optional[any] = None
_SessionLocal: Optional[sessionmaker] = None

# Base 클래스 (모든 모델의 부모 클래스)
Base = declarative_base()


def get_engine():
    """
    데이터베이스 엔진을 lazy하게 생성
    처음 호출될 때만 엔진을 생성하여 환경 변수 오류를 지연시킴
    """
    global _engine
    if _engine is None:
        database_url = settings.DATABASE_URL
        if not database_url:
            raise RuntimeError(
                "Failed to initialize database: DATABASE_URL is empty.\n"
                "This error occurs when database environment variables are not configured."
            )

        if database_url.startswith("sqlite"):
            # SQLite는 스레드 간 연결 공유를 허용해야 함 (FastAPI 스레드풀)
            _engine = create_engine(
                database_url,
                echo=False,
                connect_args={"check_same_thread": False},
            )
        else:
            _engine = create_engine(
                database_url,
                echo=settings.DEBUG,  # SQL 쿼리 로깅 (개발 환경)
                pool_pre_ping=True,  # 연결 상태 확인
            )
    return _engine


def get_session_local():
    """세션 팩토리를 lazy하게 생성"""
    global _SessionLocal
    if _SessionLocal is None:
        engine = get_engine()
        _SessionLocal = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
    return _SessionLocal


def get_db() -> Session:
    """
    데이터베이스 세션 의존성
    FastAPI Depends에서 사용
    """
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db():
    """
    데이터베이스 초기화 (테이블 생성)
    개발 환경에서만 사용 - 프로덕션에서는 Alembic 사용
    """
    import app.models  # noqa: F401  모든 모델을 metadata에 등록

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("데이터베이스 테이블 생성 완료")
