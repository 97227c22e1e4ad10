# app/services/tokens.py
import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from app.database import FileBackedDB

logger = logging.getLogger(__name__)


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _is_expired(row: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    expires_at = row.get("expires_at")
    if not expires_at:
        return True
    try:
        exp_dt = datetime.fromisoformat(str(expires_at))
    except ValueError:
        return True
    return (now or datetime.utcnow()) > exp_dt


class ResetTokenStore:
    """
    Single-use password-reset tokens. Only a SHA-256 digest is persisted;
    the raw token is returned once by `issue` and travels in the reset email.
    Stored fields: token_hash, user_id, created_at (ISO), expires_at (ISO)
    """

    def __init__(self, db: FileBackedDB, expire_minutes: int = 30, table: str = "reset_tokens"):
        self.db = db
        self.expire_minutes = expire_minutes
        self.table = table

    def issue(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        now = datetime.utcnow()
        expires_at = now + timedelta(minutes=self.expire_minutes)
        self.db.create_record(
            self.table,
            {
                "token_hash": _digest(token),
                "user_id": str(user_id),
                "created_at": now.isoformat(sep=" "),
                "expires_at": expires_at.isoformat(sep=" "),
            },
            id_field="id",
        )
        return token

    def consume(self, token: str) -> Optional[str]:
        """
        Redeem a token. Returns the owning user id, or None when the token is
        unknown or expired. The row is deleted either way, so a token works once.
        """
        if not token:
            return None
        token_hash = _digest(token)
        row = self.db.get_record(self.table, "token_hash", token_hash)
        if not row:
            return None
        # losing the delete race means another request already redeemed it
        if not self.db.delete_record(self.table, "token_hash", token_hash):
            return None
        if _is_expired(row):
            logger.info("Rejected expired reset token for user %s", row.get("user_id"))
            return None
        return row.get("user_id") or None
