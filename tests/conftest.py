import os
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# settings는 import 시점에 만들어지므로 먼저 설정
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "false"
os.environ["RATE_LIMIT_PER_MINUTE"] = "0"
os.environ["EMAIL_USER"] = ""
os.environ["EMAIL_PASS"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.db.database import Base, get_db
from app.main import app as fastapi_app


@pytest.fixture
def engine():
    """테스트마다 새 in-memory SQLite"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def client(db_session_factory):
    def override_get_db():
        db = db_session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """회원가입 후 (사용자 정보, 인증 헤더) 반환"""

    def _make_user(username, password="secret123", email=None, name=None):
        response = client.post(
            "/api/users/register",
            json={
                "username": username,
                "email": email or f"{username}@example.com",
                "password": password,
                "name": name,
            },
        )
        assert response.status_code == 201, response.text
        data = response.json()
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _make_user


@pytest.fixture
def make_friends(client):
    """두 사용자를 친구로 만듦"""

    def _make_friends(user_a, headers_a, user_b, headers_b):
        response = client.post(
            "/api/friends/request",
            json={"friendId": user_b["id"]},
            headers=headers_a,
        )
        assert response.status_code == 200, response.text
        accepted = client.post(
            "/api/friends/accept",
            json={"requestId": response.json()["requestId"]},
            headers=headers_b,
        )
        assert accepted.status_code == 200, accepted.text

    return _make_friends
