"""Shared fixtures: isolated in-memory database and a TestClient bound to it."""

import unittest
from collections.abc import Generator

import httpx
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from nhatroso.core.config import get_settings
from nhatroso.core.database import engine_options, get_db
from nhatroso.main import app
from nhatroso.models import Base, User
from nhatroso.schemas.auth import RegisterRequest

PASSWORD = "Abcdef12"


def make_session_factory() -> tuple[Engine, sessionmaker]:
    """Fresh in-memory SQLite database with all tables, shared across threads."""
    engine = create_engine("sqlite://", **engine_options("sqlite://"))
    Base.metadata.create_all(engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


def register_body(email: str = "a@b.com", password: str = PASSWORD, **overrides: object) -> RegisterRequest:
    data = {
        "email": email,
        "password": password,
        "confirm_password": password,
        "full_name": "A B",
        "phone": "123",
    }
    data.update(overrides)
    return RegisterRequest(**data)


class DatabaseTestCase(unittest.TestCase):
    """Gives each test its own empty database and an open session."""

    def setUp(self) -> None:
        self.engine, self.SessionLocal = make_session_factory()
        self.db: Session = self.SessionLocal()
        self.settings = get_settings()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def fetch_user(self, email: str) -> User:
        """Read the raw row, including soft-deleted users, in a separate session."""
        with self.SessionLocal() as s:
            user = s.query(User).filter(User.email == email).one()
            s.expunge(user)
            return user


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient whose get_db points at the test database."""

    prefix = "/api/v1"

    def setUp(self) -> None:
        super().setUp()

        def override_get_db() -> Generator[Session, None, None]:
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.state.rate_limiter = None
        self.client = TestClient(app)

    def tearDown(self) -> None:
        self.client.close()
        app.dependency_overrides.clear()
        app.state.rate_limiter = None
        super().tearDown()

    def register(
        self,
        email: str = "a@b.com",
        password: str = PASSWORD,
        **overrides: object,
    ) -> httpx.Response:
        body = {
            "email": email,
            "password": password,
            "confirmPassword": password,
            "fullName": "A B",
            "phone": "123",
        }
        body.update(overrides)
        return self.client.post(f"{self.prefix}/auth/register", json=body)

    def login(self, email: str = "a@b.com", password: str = PASSWORD) -> httpx.Response:
        return self.client.post(
            f"{self.prefix}/auth/login", json={"email": email, "password": password}
        )

    def refresh(self, refresh_token: str) -> httpx.Response:
        return self.client.post(
            f"{self.prefix}/auth/refresh", json={"refreshToken": refresh_token}
        )

    @staticmethod
    def bearer(access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}
