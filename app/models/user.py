# app/models/user.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Dict, Any


@dataclass
class User:
    """
    Storefront account. Only the fields password reset needs are kept.
    The FileBackedDB stores values as strings; these helpers normalize/convert types.
    """
    email: str
    password_hash: str
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "User":
        if d is None:
            raise ValueError("Cannot construct User from None")
        created_at_raw = d.get("created_at")
        created_at = None
        if created_at_raw:
            if isinstance(created_at_raw, datetime):
                created_at = created_at_raw
            else:
                try:
                    created_at = datetime.fromisoformat(str(created_at_raw))
                except ValueError:
                    created_at = None

        return cls(
            email=str(d.get("email") or ""),
            password_hash=str(d.get("password_hash") or ""),
            full_name=d.get("full_name") or None,
            created_at=created_at,
            id=d.get("id") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to plain dict suitable for writing back to CSV/Excel.
        Note: password_hash is included (necessary for persistence); strip in APIs.
        """
        out = asdict(self)
        if self.created_at and isinstance(self.created_at, datetime):
            out["created_at"] = self.created_at.isoformat(sep=" ")
        else:
            out["created_at"] = ""
        return out

    def mask_secret(self) -> Dict[str, Any]:
        """
        Return a representation safe to expose on API responses (no password_hash).
        """
        d = self.to_dict()
        d.pop("password_hash", None)
        return d
