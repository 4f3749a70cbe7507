from __future__ import annotations

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


ROOT = Path(__file__).resolve().parents[2]

# Ensure `backend/` packages are importable as top-level `dashboard` / `budgeting`.
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from dashboard.core.base import Base  # noqa: E402
import dashboard.models as _models  # noqa: F401,E402
from dashboard.models.expense import ExpenseRecord  # noqa: E402


JWT_SECRET = "test-secret"


@pytest.fixture(autouse=True)
def _auth_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("EXP_JWT_SECRET", JWT_SECRET)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    eng = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Generator[Session, None, None]:
    SessionLocal = sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def add_expense(db_session: Session):
    """Insert an expense the way the upstream expense service would."""
    counter = {"n": 0}

    def _add(company_id: str, category: str, amount: Any, on: date) -> ExpenseRecord:
        counter["n"] += 1
        r = ExpenseRecord(
            id=f"exp-{counter['n']}",
            company_id=company_id,
            category=category,
            amount=Decimal(str(amount)),
            date=on,
        )
        db_session.add(r)
        db_session.commit()
        return r

    return _add


def make_jwt(claims: dict, secret: str = JWT_SECRET, *, exp: int | None = None) -> str:
    """HS256 JWT generator for API tests (no external dependency)."""
    import base64, hashlib, hmac, json  # noqa: E401

    def b64url(raw: bytes) -> str:
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    header = {"alg": "HS256", "typ": "JWT"}
    payload = dict(claims)
    if exp is not None:
        payload["exp"] = exp

    header_b64 = b64url(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = b64url(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{b64url(sig)}"


def auth_header(global_role: str, company_roles: list[tuple[str, str]] | None = None, *, sub: str = "u-1") -> dict[str, str]:
    claims = {
        "sub": sub,
        "email": f"{sub}@example.test",
        "global_role": global_role,
        "company_roles": [{"company_id": c, "role": r} for c, r in (company_roles or [])],
    }
    return {"Authorization": f"Bearer {make_jwt(claims)}"}


@pytest.fixture()
def client(db_session: Session):
    """API client whose request sessions are the test session."""
    from fastapi.testclient import TestClient

    from dashboard.core.db import get_db_session
    from dashboard.main import app

    def _override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = _override
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db_session, None)
