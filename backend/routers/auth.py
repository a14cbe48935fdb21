from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.db import get_db
from backend.db_models import UserORM
from backend.deps import get_current_user
from backend.schemas import LoginRequest, RegisterRequest, Token, UserRead
from backend.security import create_access_token, hash_password, verify_password

router = APIRouter(prefix="/auth", tags=["auth"])


def _ensure_email_unique(db: Session, email: str) -> None:
    existing = db.query(UserORM).filter(UserORM.email == email).first()
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already registered with this email.")


def build_user_read(user: UserORM) -> UserRead:
    return UserRead(id=user.id, email=user.email, full_name=user.full_name, is_active=bool(user.is_active))


@router.post("/register", response_model=Token)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> Token:
    email = payload.email.lower()
    _ensure_email_unique(db, email)

    user = UserORM(
        email=email,
        hashed_password=hash_password(payload.password),
        full_name=payload.full_name,
        is_active=1,
    )
    db.add(user)
    db.commit()

    return Token(access_token=create_access_token(user.id, user.email))


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> Token:
    email = payload.email.lower()
    user = db.query(UserORM).filter(UserORM.email == email).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password.")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is disabled.")
    return Token(access_token=create_access_token(user.id, user.email))


@router.get("/me", response_model=UserRead)
def me(user: UserORM = Depends(get_current_user)) -> UserRead:
    return build_user_read(user)
