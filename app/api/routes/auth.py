# app/api/routes/auth.py
import logging
from datetime import datetime
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_db, get_mailer, get_token_store
from app.api.schemas.user import ForgotPasswordRequest, ResetPasswordRequest, UserCreate, UserOut
from app.config import Settings, get_settings
from app.core.security import hash_password
from app.database import FileBackedDB
from app.models.user import User
from app.services.email_service import Mailer
from app.services.tokens import ResetTokenStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

FORGOT_PASSWORD_MESSAGE = "If an account exists for that email, a reset link has been sent"


def _find_user_by_email(db: FileBackedDB, email: str):
    row = db.get_record("users", "email", email.strip().lower())
    return User.from_dict(row) if row else None


@router.post("/register", response_model=UserOut)
def register(payload: UserCreate, db: FileBackedDB = Depends(get_db)):
    """
    Create a storefront account. Emails are stored lower-cased and must be unique.
    """
    email = str(payload.email).strip().lower()
    if _find_user_by_email(db, email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        full_name=payload.full_name,
        created_at=datetime.utcnow(),
    )
    data = user.to_dict()
    data.pop("id", None)
    row = db.create_record("users", data, id_field="id")
    return User.from_dict(row).mask_secret()


@router.post("/forgot-password")
def forgot_password(
    payload: ForgotPasswordRequest,
    db: FileBackedDB = Depends(get_db),
    tokens: ResetTokenStore = Depends(get_token_store),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    """
    Start a password reset. The response is identical whether or not the email
    is registered; known accounts receive a single-use link by email.
    """
    user = _find_user_by_email(db, str(payload.email))
    if user is None:
        logger.info("Password reset requested for unknown email")
        return {"message": FORGOT_PASSWORD_MESSAGE}

    token = tokens.issue(user.id)
    reset_link = f"{settings.frontend_base}/reset-password?token={quote(token)}"
    sent = mailer.send_password_reset(
        to=user.email,
        reset_link=reset_link,
        expires_minutes=settings.RESET_TOKEN_EXPIRE_MINUTES,
        store_name=settings.STORE_NAME,
    )
    if not sent:
        logger.error("Password reset email could not be delivered to user %s", user.id)
    return {"message": FORGOT_PASSWORD_MESSAGE}


@router.post("/reset-password")
def reset_password(
    payload: ResetPasswordRequest,
    db: FileBackedDB = Depends(get_db),
    tokens: ResetTokenStore = Depends(get_token_store),
):
    user_id = tokens.consume(payload.token)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired token")

    updated = db.update_record("users", "id", user_id, {"password_hash": hash_password(payload.new_password)})
    if not updated:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired token")
    return {"message": "Password updated successfully"}
