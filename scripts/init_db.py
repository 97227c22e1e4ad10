"""Creates the data directory and empty catalog / account tables."""
import os
import sys

import pandas as pd

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.database import db  # noqa: E402

TABLES = {
    "products": ["id", "title", "description", "price", "file_path", "image_url", "created_at"],
    "users": ["id", "email", "password_hash", "full_name", "created_at"],
    "reset_tokens": ["id", "token_hash", "user_id", "created_at", "expires_at"],
}


for table, columns in TABLES.items():
    path = db._file_path(table)
    if path.exists():
        print(f"{path} already exists")
        continue
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(columns=columns).to_csv(path, index=False)
    print(f"Created {path}")
