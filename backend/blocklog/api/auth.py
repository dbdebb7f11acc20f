from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blocklog.api.deps import get_current_user, get_token
from blocklog.db.session import get_db
from blocklog.models.user import User
from blocklog.schemas.user import AuthOut, UserLogin, UserOut, UserRegister, UserUpdate
from blocklog.services import auth as auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthOut)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    return auth_service.register(db, payload)


@router.post("/login", response_model=AuthOut)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    return auth_service.login(db, payload)


@router.get("/profile", response_model=UserOut)
def get_profile(user: User = Depends(get_current_user)):
    return auth_service.serialize_user(user)


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return auth_service.update_profile(db, user, payload)


@router.post("/logout")
def logout(
    token: str = Depends(get_token),
    user: User = Depends(get_current_user),
):
    auth_service.logout(token)
    return {"ok": True}
