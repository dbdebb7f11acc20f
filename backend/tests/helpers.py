"""Time, user and session helpers shared by the test modules."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from blocklog.core.security import hash_password
from blocklog.models.user import User

T0 = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def at(ms: int = 0, base: datetime = T0) -> datetime:
    """Instant ``ms`` milliseconds after ``base``."""
    return base + timedelta(milliseconds=ms)


def make_user(db: Session, email: str = "ada@example.com") -> User:
    user = User(
        email=email,
        password_hash=hash_password("secret123", iterations=1000),
        first_name="Ada",
        last_name="Lovelace",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def register(client: TestClient, email: str = "ada@example.com", password: str = "secret123") -> dict:
    resp = client.post(
        "/auth/register",
        json={"email": email, "password": password, "first_name": "Ada", "last_name": "Lovelace"},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def write_before_next_flush(db: Session, statement) -> None:
    """Run ``statement`` just ahead of the session's next flush.

    This lands a row between a service's existence check and its own insert,
    the way a concurrent request would.
    """

    def write(session, flush_context, instances):
        session.connection().execute(statement)

    event.listen(db, "before_flush", write, once=True)


def fail_next_flush(db: Session) -> None:
    def fail(session, flush_context, instances):
        raise OperationalError("UPDATE blocks", {}, Exception("disk I/O error"))

    event.listen(db, "before_flush", fail, once=True)
