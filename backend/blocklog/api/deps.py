from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from blocklog.core.errors import UnauthorizedError
from blocklog.db.session import get_db
from blocklog.models.user import User
from blocklog.services import auth as auth_service

bearer = HTTPBearer(auto_error=False)


def get_token(credentials: HTTPAuthorizationCredentials | None = Depends(bearer)) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthorizedError("not authenticated")
    return credentials.credentials


def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(get_token),
) -> User:
    return auth_service.authenticate(db, token)
