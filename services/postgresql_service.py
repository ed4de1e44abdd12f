"""
PostgreSQL backend store for TastyTray application.

Talks to the hosted Supabase Postgres database through psycopg2. Shares the
table API and SQL building of the SQLite store; only connection handling,
parameter style, schema and value adaptation differ.
"""

import os
from contextlib import contextmanager
from typing import Any, Optional

import psycopg2
import psycopg2.extras
import streamlit as st

from utils import get_logger
from .database_service import BackendStore, JSON_COLUMNS
from .errors import StoreError

logger = get_logger(__name__)

POSTGRES_SCHEMA = """
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
    dietary_restrictions JSONB DEFAULT '[]',
    cuisine_preferences JSONB DEFAULT '[]',
    allergies JSONB DEFAULT '[]',
    nutritional_goals JSONB DEFAULT '{}',
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
    quantity DOUBLE PRECISION,
    unit TEXT,
    expiry_date TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS shopping_list (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    ingredient_name TEXT NOT NULL,
    quantity DOUBLE PRECISION,
    unit TEXT,
    is_completed BOOLEAN DEFAULT false,
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


class PostgreSQLService(BackendStore):
    """
    PostgreSQL store with Supabase integration.
    Opens one connection per operation, like the hosted client's request model.
    """

    placeholder = "%s"
    backend_name = "postgresql"

    def __init__(self, database_url: Optional[str] = None):
        """Initialize PostgreSQL service with connection URL"""
        self.database_url = database_url or self._get_database_url()
        self._test_connection()
        self._ensure_schema_exists()
        logger.info("PostgreSQL service initialized successfully")

    def _get_database_url(self) -> str:
        """Get database URL from environment or Streamlit secrets"""
        url = os.getenv('DATABASE_URL')
        if url:
            return url

        try:
            if 'DATABASE_URL' in st.secrets:
                return st.secrets['DATABASE_URL']
        except FileNotFoundError:
            # no secrets.toml outside Streamlit Cloud
            pass

        raise StoreError("DATABASE_URL is not configured for the supabase backend")

    def _test_connection(self):
        try:
            rows = self._execute("SELECT 1 AS ok", [], fetch=True, action="test connection")
            if dict(rows[0])['ok'] != 1:
                raise StoreError("Connection test returned an unexpected result")
            logger.info("PostgreSQL connection successful")
        except StoreError as e:
            logger.error(f"PostgreSQL connection failed: {e}")
            raise

    @contextmanager
    def get_connection(self):
        """Get database connection with automatic cleanup"""
        conn = None
        try:
            conn = psycopg2.connect(
                self.database_url,
                cursor_factory=psycopg2.extras.RealDictCursor
            )
            yield conn
        except Exception:
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                conn.close()

    def _ensure_schema_exists(self):
        """Create database schema if it doesn't exist"""
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(POSTGRES_SCHEMA)
                conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Failed to create PostgreSQL schema: {e}")
            raise StoreError(f"Failed to create schema: {e}") from e

    def _encode_value(self, table: str, column: str, value: Any) -> Any:
        if column in JSON_COLUMNS.get(table, ()) and value is not None:
            return psycopg2.extras.Json(value)
        return value


def get_postgresql_service(database_url: Optional[str] = None) -> PostgreSQLService:
    """Get PostgreSQL service instance"""
    return PostgreSQLService(database_url)
