from pathlib import Path
import sqlite3

from .schema import MAIN_SCHEMA, TAG_SCHEMA


def init_db_if_needed(db_path: Path):
    db_path = Path(db_path)
    if db_path.parent and not db_path.parent.exists():
        db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    try:
        conn.execute("PRAGMA foreign_keys=ON;")
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.executescript(MAIN_SCHEMA)
        conn.executescript(TAG_SCHEMA)
        conn.commit()
    finally:
        conn.close()
