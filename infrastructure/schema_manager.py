"""
Schema and migration management for SQLite database.
"""

import logging
import sqlite3

logger = logging.getLogger("bolao.schema")


class SchemaManager:
    """
    Owns schema creation and migrations.

    Call initialize() to ensure schema is present and migrations are applied.
    """

    def __init__(self, db_path: str, use_uri: bool = False):
        self.db_path = db_path
        self.use_uri = use_uri

    def initialize(self) -> None:
        """Create base schema and apply migrations."""
        logger.info(f"Initializing database schema: {self.db_path}")
        with self._connect() as conn:
            cursor = conn.cursor()
            self._create_base_schema(cursor)
            self._create_schema_migrations_table(cursor)
            self._run_migrations(cursor)
            conn.commit()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, uri=self.use_uri)
        conn.row_factory = sqlite3.Row
        if not self.use_uri:  # Skip WAL for in-memory databases
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA busy_timeout=5000")
        return conn

    def _create_base_schema(self, cursor) -> None:
        # Balances in integer cents; version drives the optimistic debit
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS wallets (
                user_id INTEGER PRIMARY KEY,
                balance_cents INTEGER NOT NULL DEFAULT 0 CHECK (balance_cents >= 0),
                version INTEGER NOT NULL DEFAULT 0,
                updated_at INTEGER
            )
            """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS contests (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                month_year TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'open' CHECK (status IN ('open', 'closed')),
                bet_price_cents INTEGER NOT NULL,
                closing_at INTEGER NOT NULL,
                draw_date TEXT,
                total_collected_cents INTEGER NOT NULL DEFAULT 0,
                num_bets INTEGER NOT NULL DEFAULT 0,
                winning_numbers TEXT,
                created_at INTEGER NOT NULL,
                closed_at INTEGER
            )
            """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS bets (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                contest_id INTEGER NOT NULL,
                user_id INTEGER NOT NULL,
                chosen_numbers TEXT NOT NULL,
                amount_cents INTEGER NOT NULL,
                hits INTEGER,
                prize_amount_cents INTEGER,
                prize_paid INTEGER NOT NULL DEFAULT 0,
                created_at INTEGER NOT NULL,
                FOREIGN KEY (contest_id) REFERENCES contests(id),
                UNIQUE (contest_id, user_id)
            )
            """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS transactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                type TEXT NOT NULL CHECK (type IN ('deposit', 'withdrawal', 'bet', 'prize')),
                amount_cents INTEGER NOT NULL,
                status TEXT NOT NULL CHECK (status IN ('pending', 'completed', 'failed')),
                description TEXT,
                payment_id TEXT UNIQUE,
                contest_id INTEGER,
                bet_id INTEGER,
                created_at INTEGER NOT NULL,
                updated_at INTEGER
            )
            """
        )

    # --- Migration helpers ---

    def _add_column_if_not_exists(self, cursor, table: str, column: str, column_type: str) -> None:
        try:
            cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_type}")
        except sqlite3.OperationalError:
            pass

    def _create_schema_migrations_table(self, cursor) -> None:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                name TEXT PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

    def _run_migrations(self, cursor) -> None:
        applied = {row["name"] for row in cursor.execute("SELECT name FROM schema_migrations")}
        for name, action in self._get_migrations():
            if name in applied:
                continue
            logger.info(f"Applying migration: {name}")
            action(cursor)
            cursor.execute(
                "INSERT INTO schema_migrations (name) VALUES (?)",
                (name,),
            )

    def _get_migrations(self):
        return [
            ("add_indexes_v1", self._migration_add_indexes_v1),
            ("one_pending_withdrawal_per_user", self._migration_one_pending_withdrawal_per_user),
            ("create_tier_config_table", self._migration_create_tier_config_table),
            ("create_profiles_table", self._migration_create_profiles_table),
            ("add_contest_settlement_columns", self._migration_add_contest_settlement_columns),
            ("create_notifications_table", self._migration_create_notifications_table),
        ]

    # --- Migrations ---

    def _migration_add_indexes_v1(self, cursor) -> None:
        """
        Indexes for the common lookups (history listings, contest scoring).
        Safe to run multiple times due to IF NOT EXISTS.
        """
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_bets_contest_id ON bets(contest_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_bets_user_id ON bets(user_id)")
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_transactions_user_created ON transactions(user_id, created_at)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_transactions_type_status ON transactions(type, status)"
        )
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_contests_status ON contests(status)")

    def _migration_one_pending_withdrawal_per_user(self, cursor) -> None:
        cursor.execute(
            """
            CREATE UNIQUE INDEX IF NOT EXISTS idx_transactions_one_pending_withdrawal
            ON transactions(user_id)
            WHERE type = 'withdrawal' AND status = 'pending'
            """
        )

    def _migration_create_tier_config_table(self, cursor) -> None:
        # Single-row table; id is pinned to 1
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS tier_config (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                house_share TEXT NOT NULL,
                six_hits_share TEXT NOT NULL,
                five_hits_share TEXT NOT NULL,
                updated_by INTEGER,
                updated_at INTEGER
            )
            """
        )

    def _migration_create_profiles_table(self, cursor) -> None:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS profiles (
                user_id INTEGER PRIMARY KEY,
                username TEXT,
                pix_key TEXT,
                updated_at INTEGER
            )
            """
        )

    def _migration_add_contest_settlement_columns(self, cursor) -> None:
        self._add_column_if_not_exists(cursor, "contests", "winners6", "INTEGER")
        self._add_column_if_not_exists(cursor, "contests", "winners5", "INTEGER")
        self._add_column_if_not_exists(cursor, "contests", "prize_value_cents", "INTEGER")
        self._add_column_if_not_exists(cursor, "contests", "carryover_cents", "INTEGER")
        self._add_column_if_not_exists(
            cursor, "contests", "payout_status", "TEXT NOT NULL DEFAULT 'unsettled'"
        )

    def _migration_create_notifications_table(self, cursor) -> None:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS notifications (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER,
                target_role TEXT,
                type TEXT NOT NULL,
                title TEXT NOT NULL,
                message TEXT NOT NULL,
                data TEXT,
                read INTEGER NOT NULL DEFAULT 0,
                created_at INTEGER NOT NULL
            )
            """
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_notifications_user_id ON notifications(user_id, read)"
        )
