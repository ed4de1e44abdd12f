"""
Backend store for TastyTray application.

Exposes a small table API (insert, select, update, delete, upsert) over the
user-scoped tables, shaped after the hosted backend's query builder. The
SQLite implementation lives here and backs local development and tests; the
hosted PostgreSQL (Supabase) implementation is in postgresql_service.
"""

import json
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from utils import get_logger
from .errors import StoreError

logger = get_logger(__name__)

# (column, operator, value)
Filter = Tuple[str, str, Any]
# (column, ascending)
Order = Tuple[str, bool]

TABLE_COLUMNS: Dict[str, List[str]] = {
    'users': ['id', 'email', 'password_hash', 'name', 'created_at', 'updated_at', 'last_login'],
    'sessions': ['id', 'user_id', 'token', 'expires_at', 'created_at'],
    'profiles': ['id', 'user_id', 'name', 'email', 'dietary_restrictions', 'cuisine_preferences',
                 'allergies', 'nutritional_goals', 'created_at', 'updated_at'],
    'favorites': ['id', 'user_id', 'recipe_id', 'recipe_title', 'recipe_image', 'created_at'],
    'pantry_items': ['id', 'user_id', 'ingredient_name', 'quantity', 'unit', 'expiry_date',
                     'created_at', 'updated_at'],
    'shopping_list': ['id', 'user_id', 'ingredient_name', 'quantity', 'unit', 'is_completed',
                      'created_at', 'updated_at'],
    'meal_plans': ['id', 'user_id', 'date', 'meal_type', 'recipe_id', 'recipe_title',
                   'recipe_image', 'servings', 'created_at'],
}

JSON_COLUMNS: Dict[str, Tuple[str, ...]] = {
    'profiles': ('dietary_restrictions', 'cuisine_preferences', 'allergies', 'nutritional_goals'),
}

USER_TABLES = ('favorites', 'pantry_items', 'shopping_list', 'meal_plans')

OPERATORS = {
    'eq': '=',
    'neq': '!=',
    'gte': '>=',
    'lte': '<=',
}

SQLITE_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    name TEXT DEFAULT '',
    created_at TEXT NOT NULL,
    updated_at TEXT,
    last_login TEXT
);

CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    token TEXT UNIQUE NOT NULL,
    expires_at TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    user_id TEXT UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name TEXT DEFAULT '',
    email TEXT DEFAULT '',
    dietary_restrictions TEXT DEFAULT '[]',
    cuisine_preferences TEXT DEFAULT '[]',
    allergies TEXT DEFAULT '[]',
    nutritional_goals TEXT DEFAULT '{}',
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS favorites (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    recipe_id TEXT NOT NULL,
    recipe_title TEXT NOT NULL,
    recipe_image TEXT,
    created_at TEXT NOT NULL,
    UNIQUE(user_id, recipe_id)
);

CREATE TABLE IF NOT EXISTS pantry_items (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    ingredient_name TEXT NOT NULL,
    quantity REAL,
    unit TEXT,
    expiry_date TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS shopping_list (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    ingredient_name TEXT NOT NULL,
    quantity REAL,
    unit TEXT,
    is_completed INTEGER DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS meal_plans (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    date TEXT NOT NULL,
    meal_type TEXT NOT NULL,
    recipe_id TEXT NOT NULL,
    recipe_title TEXT NOT NULL,
    recipe_image TEXT,
    servings INTEGER DEFAULT 1,
    created_at TEXT NOT NULL,
    UNIQUE(user_id, date, meal_type)
);

CREATE INDEX IF NOT EXISTS idx_pantry_user ON pantry_items(user_id);
CREATE INDEX IF NOT EXISTS idx_shopping_user ON shopping_list(user_id);
CREATE INDEX IF NOT EXISTS idx_meal_plans_user_date ON meal_plans(user_id, date);
"""


def now_iso() -> str:
    """Timestamp format used for every created_at/updated_at column"""
    return datetime.now().isoformat(timespec='microseconds')


class BackendStore:
    """
    Table store shared by the SQLite and PostgreSQL backends.

    Subclasses provide ``get_connection()`` and the parameter placeholder;
    everything else (SQL building, identifier checks, row decoding) is here.
    Every failure surfaces as ``StoreError``.
    """

    placeholder = "?"
    backend_name = "base"

    @contextmanager
    def get_connection(self):
        raise NotImplementedError

    # Table API

    def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row, filling id and timestamps, and return it"""
        row = self._prepare_row(table, values)
        columns = list(row)
        sql = (f"INSERT INTO {table} ({', '.join(columns)}) "
               f"VALUES ({', '.join([self.placeholder] * len(columns))})")
        self._execute(sql, [self._encode_value(table, c, row[c]) for c in columns],
                      action=f"insert into {table}")
        return row

    def upsert(self, table: str, values: Dict[str, Any],
               conflict_columns: Sequence[str]) -> Dict[str, Any]:
        """
        Insert a row or update the row already holding ``conflict_columns``.

        Relies on a unique constraint over the conflict columns, so two writers
        racing on the same key still end with exactly one row.
        """
        self._check_columns(table, conflict_columns)
        row = self._prepare_row(table, values)
        columns = list(row)
        updatable = [c for c in columns if c not in conflict_columns and c not in ('id', 'created_at')]
        set_clause = ", ".join(f"{c} = excluded.{c}" for c in updatable)
        sql = (f"INSERT INTO {table} ({', '.join(columns)}) "
               f"VALUES ({', '.join([self.placeholder] * len(columns))}) "
               f"ON CONFLICT ({', '.join(conflict_columns)}) DO UPDATE SET {set_clause}")
        self._execute(sql, [self._encode_value(table, c, row[c]) for c in columns],
                      action=f"upsert into {table}")

        stored = self.select_one(table, [(c, 'eq', row[c]) for c in conflict_columns])
        return stored if stored is not None else row

    def select(self, table: str, filters: Optional[Iterable[Filter]] = None,
               order_by: Optional[Iterable[Order]] = None,
               limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Select rows matching all filters, in the given order"""
        self._check_table(table)
        where, params = self._build_where(table, filters)
        sql = f"SELECT * FROM {table}{where}"

        order_parts = []
        for column, ascending in order_by or []:
            self._check_columns(table, [column])
            order_parts.append(f"{column} {'ASC' if ascending else 'DESC'}")
        if order_parts:
            sql += " ORDER BY " + ", ".join(order_parts)
        if limit is not None:
            sql += f" LIMIT {int(limit)}"

        rows = self._execute(sql, params, fetch=True, action=f"select from {table}")
        return [self._decode_row(table, dict(r)) for r in rows]

    def select_one(self, table: str, filters: Iterable[Filter]) -> Optional[Dict[str, Any]]:
        rows = self.select(table, filters, limit=1)
        return rows[0] if rows else None

    def update(self, table: str, filters: Iterable[Filter],
               values: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Update matching rows and return them as stored afterwards"""
        filters = list(filters)
        if not filters:
            raise StoreError(f"Refusing to update every row of {table}", table)
        values = dict(values)
        if 'updated_at' in TABLE_COLUMNS.get(table, []) and 'updated_at' not in values:
            values['updated_at'] = now_iso()
        self._check_columns(table, values)

        set_clause = ", ".join(f"{c} = {self.placeholder}" for c in values)
        where, params = self._build_where(table, filters)
        sql = f"UPDATE {table} SET {set_clause}{where}"
        self._execute(sql, [self._encode_value(table, c, v) for c, v in values.items()] + params,
                      action=f"update {table}")
        return self.select(table, filters)

    def delete(self, table: str, filters: Iterable[Filter]) -> int:
        """Delete matching rows, returning how many were removed"""
        filters = list(filters)
        if not filters:
            raise StoreError(f"Refusing to delete every row of {table}", table)
        where, params = self._build_where(table, filters)
        return self._execute(f"DELETE FROM {table}{where}", params, action=f"delete from {table}")

    # Maintenance

    def get_database_stats(self) -> Dict[str, int]:
        """Row counts for every known table"""
        stats = {}
        for table in TABLE_COLUMNS:
            rows = self._execute(f"SELECT COUNT(*) AS total FROM {table}", [], fetch=True,
                                 action=f"count {table}")
            stats[table] = int(dict(rows[0])['total'])
        return stats

    def check_tables(self) -> Dict[str, bool]:
        """Report which expected tables are reachable"""
        results = {}
        for table in TABLE_COLUMNS:
            try:
                self._execute(f"SELECT 1 FROM {table} LIMIT 1", [], fetch=True, action=f"check {table}")
                results[table] = True
            except StoreError as e:
                logger.warning(f"Table {table} check failed: {e}")
                results[table] = False
        return results

    # Internals

    def _execute(self, sql: str, params: Sequence[Any], fetch: bool = False, action: str = "query"):
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(sql, list(params))
                result = cursor.fetchall() if fetch else cursor.rowcount
                conn.commit()
                return result
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"{self.backend_name} {action} failed: {e}")
            raise StoreError(f"Failed to {action}: {e}") from e

    def _prepare_row(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        self._check_table(table)
        row = {k: v for k, v in values.items()}
        columns = TABLE_COLUMNS[table]
        row.setdefault('id', str(uuid.uuid4()))
        timestamp = now_iso()
        if 'created_at' in columns:
            row.setdefault('created_at', timestamp)
        if 'updated_at' in columns:
            row.setdefault('updated_at', timestamp)
        self._check_columns(table, row)
        return row

    def _build_where(self, table: str, filters: Optional[Iterable[Filter]]) -> Tuple[str, List[Any]]:
        clauses = []
        params: List[Any] = []
        for column, operator, value in filters or []:
            self._check_columns(table, [column])
            if operator not in OPERATORS:
                raise StoreError(f"Unsupported filter operator: {operator}", table)
            clauses.append(f"{column} {OPERATORS[operator]} {self.placeholder}")
            params.append(self._encode_value(table, column, value))
        return (" WHERE " + " AND ".join(clauses) if clauses else ""), params

    def _check_table(self, table: str):
        if table not in TABLE_COLUMNS:
            raise StoreError(f"Unknown table: {table}", table)

    def _check_columns(self, table: str, columns: Iterable[str]):
        self._check_table(table)
        unknown = [c for c in columns if c not in TABLE_COLUMNS[table]]
        if unknown:
            raise StoreError(f"Unknown columns for {table}: {', '.join(unknown)}", table)

    def _encode_value(self, table: str, column: str, value: Any) -> Any:
        if column in JSON_COLUMNS.get(table, ()) and value is not None:
            return json.dumps(value)
        if isinstance(value, bool):
            return int(value)
        return value

    def _decode_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        for column in JSON_COLUMNS.get(table, ()):
            if isinstance(row.get(column), str):
                try:
                    row[column] = json.loads(row[column])
                except json.JSONDecodeError:
                    logger.warning(f"Unreadable JSON in {table}.{column}; using empty value")
                    row[column] = None
        return row


class DatabaseService(BackendStore):
    """
    SQLite-backed store.

    In-memory databases keep one persistent connection; access to it is
    serialized with a lock because the app context loads tables from worker
    threads.
    """

    backend_name = "sqlite"

    def __init__(self, db_path: str = "tastytray.db"):
        self.db_path = db_path
        self._lock = threading.RLock()
        self._persistent_conn = None
        if db_path == ":memory:":
            self._persistent_conn = self._connect()
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.initialize_database()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False, timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def get_connection(self):
        """Context manager for database connections with proper cleanup"""
        if self._persistent_conn is not None:
            with self._lock:
                try:
                    yield self._persistent_conn
                except Exception:
                    self._persistent_conn.rollback()
                    raise
        else:
            conn = self._connect()
            try:
                yield conn
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()

    def initialize_database(self):
        """Create tables and indexes if they don't exist"""
        try:
            with self.get_connection() as conn:
                conn.executescript(SQLITE_SCHEMA)
                conn.commit()
            logger.info(f"SQLite store ready: {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Failed to initialize database: {e}")
            raise StoreError(f"Failed to initialize database: {e}") from e


# Global database service instance
_database_service: Optional[DatabaseService] = None


def get_database_service(db_path: str = "tastytray.db") -> DatabaseService:
    """Get singleton database service instance"""
    global _database_service
    if _database_service is None:
        _database_service = DatabaseService(db_path)
    return _database_service
