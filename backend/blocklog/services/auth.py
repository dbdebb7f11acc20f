import logging
import uuid

from jose import JWTError
from sqlalchemy import select
from sqlalchemy.orm import Session

from blocklog.core.config import settings
from blocklog.core.errors import ConflictError, UnauthorizedError
from blocklog.core.revocation import token_revocations
from blocklog.core.security import create_access_token, decode_access_token, hash_password, verify_password
from blocklog.db.session import commit
from blocklog.models.user import User
from blocklog.schemas.user import UserLogin, UserRegister, UserUpdate
from blocklog.services.duration import as_utc

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists"


def serialize_user(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "is_active": user.is_active,
        "created_at": as_utc(user.created_at),
        "updated_at": as_utc(user.updated_at),
    }


def _issue(user: User) -> dict:
    token = create_access_token(str(user.id), user.email, settings.JWT_SECRET, settings.JWT_EXPIRES_MINUTES)
    return {"user": serialize_user(user), "access_token": token}


def _email_taken(db: Session, email: str) -> bool:
    return db.execute(select(User.id).where(User.email == email)).first() is not None


def register(db: Session, payload: UserRegister) -> dict:
    email = payload.email.strip().lower()
    if _email_taken(db, email):
        raise ConflictError(EMAIL_TAKEN)

    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    db.add(user)
    commit(db, EMAIL_TAKEN)
    db.refresh(user)
    logger.info("user registered id=%s", user.id)
    return _issue(user)


def login(db: Session, payload: UserLogin) -> dict:
    email = payload.email.strip().lower()
    stmt = select(User).where(User.email == email, User.is_active.is_(True))
    user = db.execute(stmt).scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning("login failed")
        raise UnauthorizedError("Invalid credentials")
    return _issue(user)


def authenticate(db: Session, token: str) -> User:
    """Resolve a bearer token to its active user."""
    if token_revocations.is_revoked(token):
        raise UnauthorizedError("Token has been revoked")

    try:
        payload = decode_access_token(token, settings.JWT_SECRET)
        user_id = uuid.UUID(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise UnauthorizedError("invalid session")

    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise UnauthorizedError("User not found")
    return user


def logout(token: str) -> None:
    token_revocations.revoke(token)
    logger.info("token revoked; revocation store size=%d", token_revocations.size())


def update_profile(db: Session, user: User, payload: UserUpdate) -> dict:
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in updates:
        updates["email"] = updates["email"].strip().lower()
        if updates["email"] != user.email and _email_taken(db, updates["email"]):
            raise ConflictError(EMAIL_TAKEN)
    if "password" in updates:
        updates["password_hash"] = hash_password(updates.pop("password"))

    for key, value in updates.items():
        setattr(user, key, value)
    commit(db, EMAIL_TAKEN)
    db.refresh(user)
    return serialize_user(user)
