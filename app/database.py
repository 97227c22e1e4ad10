# app/database.py
"""
Simple file-backed record store using CSV (preferred) or Excel (xlsx) as storage.
Provides basic CRUD primitives per table name. Uses file locking to avoid
simultaneous writes corrupting files.

Tables used by the storefront:
    products      - catalog rows (id, title, price, file_path, ...); the price authority
    users         - accounts that can request a password reset
    reset_tokens  - hashed password-reset tokens with expiry

Usage:
    from app.database import db
    db.get_records("products", "id", ["p1", "p2"])
    db.create_record("users", {"email": "b@x.com", "password_hash": "..."})
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
import pandas as pd
import uuid
from filelock import FileLock
from app.config import settings

DATA_DIR = Path(settings.DATA_DIR)
if not DATA_DIR.exists():
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def _clean_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (None if pd.isna(v) else v) for k, v in row.items()}


class FileBackedDB:
    """
    Manages CSV / Excel files inside data_dir.
    Table name corresponds to a file name in settings (or you may pass full filename).
    """

    def __init__(self, data_dir: Path = DATA_DIR):
        self.data_dir = Path(data_dir)

    def _file_path(self, table: str) -> Path:
        """
        Resolve table -> file path. If table looks like a filename (has .csv/.xlsx),
        use it directly (relative to data_dir). Otherwise try config mapping,
        else fallback to table + .csv
        """
        if table.endswith(".csv") or table.endswith(".xlsx"):
            return self.data_dir / Path(table)

        mapping = {
            "users": settings.USERS_FILE,
            "products": settings.PRODUCTS_FILE,
            "reset_tokens": settings.RESET_TOKENS_FILE,
        }
        filename = mapping.get(table, f"{table}.csv")
        return self.data_dir / Path(filename)

    def _lock_for(self, path: Path) -> FileLock:
        return FileLock(str(path) + ".lock")

    def _read_df(self, table: str) -> pd.DataFrame:
        path = self._file_path(table)
        if not path.exists():
            return pd.DataFrame()
        if path.suffix.lower() in (".xls", ".xlsx"):
            return pd.read_excel(path, dtype=str).fillna("")
        return pd.read_csv(path, dtype=str).fillna("")

    def _write_df_nolock(self, table: str, df: pd.DataFrame) -> None:
        """
        Write DataFrame for `table` WITHOUT acquiring the file lock.
        Use this only when the caller already holds the lock.
        """
        path = self._file_path(table)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() in (".xls", ".xlsx"):
            df.to_excel(path, index=False)
        else:
            df.to_csv(path, index=False)

    # --- high-level CRUD primitives ---

    def list_records(self, table: str) -> List[Dict[str, Any]]:
        df = self._read_df(table)
        if df.empty:
            return []
        return df.where(pd.notnull(df), None).to_dict(orient="records")

    def get_record(self, table: str, key: str, value: Any) -> Optional[Dict[str, Any]]:
        df = self._read_df(table)
        if df.empty or key not in df.columns:
            return None
        # treat everything as string for comparison simplicity
        mask = df[key].astype(str) == str(value)
        if not mask.any():
            return None
        return _clean_row(df[mask].iloc[0].to_dict())

    def get_records(self, table: str, key: str, values: Iterable[Any]) -> List[Dict[str, Any]]:
        """
        Bulk lookup: every row whose `key` column matches one of `values`.
        Values that match nothing are simply absent from the result.
        """
        wanted = {str(v) for v in values}
        if not wanted:
            return []
        df = self._read_df(table)
        if df.empty or key not in df.columns:
            return []
        matched = df[df[key].astype(str).isin(wanted)]
        return [_clean_row(row) for row in matched.to_dict(orient="records")]

    def create_record(self, table: str, data: Dict[str, Any], id_field: str = "id") -> Dict[str, Any]:
        """
        Create a new record. If id_field not present in `data`, one will be generated (uuid4 hex).
        Returns the saved record (with id).
        """
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            if df.empty:
                df = pd.DataFrame(columns=list(data.keys()) + ([id_field] if id_field not in data else []))
            if id_field not in data or not data.get(id_field):
                data[id_field] = uuid.uuid4().hex
            new_row = {k: ("" if v is None else v) for k, v in data.items()}
            df = pd.concat([df, pd.DataFrame([new_row])], ignore_index=True, sort=False)
            self._write_df_nolock(table, df)
        return data

    def update_record(self, table: str, key: str, value: Any, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update rows where df[key] == value with fields in updates. Returns the updated first row dict or None.
        """
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            if df.empty or key not in df.columns:
                return None
            mask = df[key].astype(str) == str(value)
            if not mask.any():
                return None
            for k, v in updates.items():
                if k not in df.columns:
                    df[k] = ""
                df.loc[mask, k] = "" if v is None else str(v)
            self._write_df_nolock(table, df)
            return _clean_row(df[mask].iloc[0].to_dict())

    def delete_record(self, table: str, key: str, value: Any) -> bool:
        """
        Delete all records where df[key] == value. Returns True if any rows were removed.
        """
        path = self._file_path(table)
        with self._lock_for(path):
            df = self._read_df(table)
            if df.empty or key not in df.columns:
                return False
            orig_len = len(df)
            df = df[df[key].astype(str) != str(value)]
            if len(df) == orig_len:
                return False
            self._write_df_nolock(table, df)
            return True


# module-level singleton for convenience
db = FileBackedDB()
