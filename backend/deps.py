from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from sqlalchemy.orm import Session

from backend.db import get_db
from backend.db_models import DocumentORM, TaxReturnORM, UserORM
from backend.security import decode_token, hash_password

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

DEMO_USER_ID = "demo-user"
DEMO_USER_EMAIL = "demo@taxdocs.local"


def _auth_bypass() -> bool:
    return os.getenv("AUTH_BYPASS", "false").lower() == "true"


def ensure_demo_user(db: Session) -> UserORM:
    user = db.query(UserORM).filter(UserORM.id == DEMO_USER_ID).first()
    if not user:
        user = UserORM(
            id=DEMO_USER_ID,
            email=DEMO_USER_EMAIL,
            hashed_password=hash_password("password"),
            full_name="Demo User",
            is_active=1,
        )
        db.add(user)
        db.commit()
    return user


def _verify_firebase(token: str) -> Dict[str, Any]:
    project_id = os.getenv("FIREBASE_PROJECT_ID")
    if not project_id:
        raise ValueError("Firebase verification not configured")
    decoded = id_token.verify_firebase_token(token, google_requests.Request(), audience=project_id)
    if not decoded:
        raise ValueError("Invalid Firebase token")
    return decoded


def get_token_payload(token: Optional[str] = Depends(oauth2_scheme)) -> Dict[str, Any]:
    """Decode an internal JWT, falling back to Firebase ID tokens for federated clients."""
    if _auth_bypass():
        return {"sub": DEMO_USER_ID, "email": DEMO_USER_EMAIL}
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_token(token)
    except ValueError:
        pass
    try:
        decoded = _verify_firebase(token)
    except Exception as exc:
        logger.warning("JWT verification failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    return {"email": decoded.get("email"), "firebase": True}


def get_current_user(
    payload: Dict[str, Any] = Depends(get_token_payload),
    db: Session = Depends(get_db),
) -> UserORM:
    if _auth_bypass():
        return ensure_demo_user(db)

    user: Optional[UserORM] = None
    if payload.get("sub"):
        user = db.query(UserORM).filter(UserORM.id == payload["sub"]).first()
    elif payload.get("email"):
        user = db.query(UserORM).filter(UserORM.email == str(payload["email"]).lower()).first()
    else:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload.")
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive or missing user.")
    return user


def require_tax_return(db: Session, tax_return_id: str, user: UserORM) -> TaxReturnORM:
    tax_return = (
        db.query(TaxReturnORM)
        .filter(TaxReturnORM.id == tax_return_id, TaxReturnORM.user_id == user.id)
        .first()
    )
    if not tax_return:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tax return not found")
    return tax_return


def require_document(db: Session, document_id: str, user: UserORM) -> DocumentORM:
    document = (
        db.query(DocumentORM)
        .join(TaxReturnORM, TaxReturnORM.id == DocumentORM.tax_return_id)
        .filter(DocumentORM.id == document_id, TaxReturnORM.user_id == user.id)
        .first()
    )
    if not document:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document
