import logging
import os
import sqlite3
from utils.constants import DB_FILE, PUSH_TARGET_KEY

logger = logging.getLogger(__name__)


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            if self.db_path != ":memory:":
                self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self):
        """Create schema and seed defaults."""
        conn = self.get_connection()
        self._create_schema(conn)
        self._seed_defaults(conn)
        conn.commit()

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS recurring_schedules (
                id                  TEXT PRIMARY KEY,
                owner_id            TEXT NOT NULL,
                amount              TEXT NOT NULL,
                description         TEXT NOT NULL DEFAULT '',
                category            TEXT NOT NULL DEFAULT '',
                kind                TEXT NOT NULL CHECK(kind IN ('income','expense')),
                account_ref         TEXT NOT NULL,
                frequency           TEXT NOT NULL
                                    CHECK(frequency IN ('weekly','monthly','quarterly','yearly')),
                day_of_week         INTEGER,
                day_of_month        INTEGER,
                start_date          TEXT NOT NULL,
                end_date            TEXT,
                is_active           INTEGER NOT NULL DEFAULT 1,
                next_due_date       TEXT NOT NULL,
                last_generated_date TEXT,
                notes               TEXT NOT NULL DEFAULT '',
                tags                TEXT NOT NULL DEFAULT '[]',
                created_at          TEXT NOT NULL,
                updated_at          TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS transactions (
                id           TEXT PRIMARY KEY,
                account_ref  TEXT NOT NULL,
                kind         TEXT NOT NULL CHECK(kind IN ('income','expense')),
                amount       TEXT NOT NULL,
                category     TEXT NOT NULL DEFAULT '',
                description  TEXT NOT NULL DEFAULT '',
                date         TEXT NOT NULL,
                recurring_id TEXT,
                tags         TEXT NOT NULL DEFAULT '[]',
                notes        TEXT NOT NULL DEFAULT '',
                created_at   TEXT NOT NULL DEFAULT (datetime('now')),
                UNIQUE(recurring_id, date)
            );
            CREATE INDEX IF NOT EXISTS idx_schedules_owner          ON recurring_schedules(owner_id);
            CREATE INDEX IF NOT EXISTS idx_transactions_date        ON transactions(date);
            CREATE INDEX IF NOT EXISTS idx_transactions_recurring   ON transactions(recurring_id);
            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
            CREATE TABLE IF NOT EXISTS sent_reminders (
                key     TEXT PRIMARY KEY,
                expires TEXT NOT NULL
            );
        """)

    def _seed_defaults(self, conn: sqlite3.Connection):
        defaults = [
            ("currency_symbol", "$"),
            (PUSH_TARGET_KEY, "desktop"),
        ]
        for key, value in defaults:
            conn.execute(
                "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )

    def get_setting(self, key: str, default: str = "") -> str:
        conn = self.get_connection()
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def set_setting(self, key: str, value: str):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    @staticmethod
    def open(db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: opens (creating if needed) the schedule database.
        db_folder: if provided, the DB file is stored in that directory instead of CWD.
        """
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
            path = os.path.join(db_folder, DB_FILE)
        else:
            path = DB_FILE
        db = DatabaseManager(path)
        db.initialize()
        logger.info("Opened database %s", path)
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
