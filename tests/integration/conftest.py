import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest
from psycopg import sql

from docingest.config.settings import Settings
from docingest.database.connection import close_pool, get_connection, init_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docingest_test")
    return Settings(db_chunks_table=f"chunks_test_{uuid.uuid4().hex[:8]}")


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute("SELECT 1")
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture(scope="session")
def chunks_table(
    integration_pool: None, test_settings: Settings
) -> Generator[str, None, None]:
    table = sql.Identifier(test_settings.db_chunks_table)
    try:
        with get_connection() as conn:
            conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
            conn.execute(
                sql.SQL(
                    """
                    CREATE TABLE {table} (
                        id BIGSERIAL PRIMARY KEY,
                        document_id TEXT NOT NULL,
                        content TEXT NOT NULL,
                        embedding vector(3) NOT NULL,
                        metadata JSONB NOT NULL,
                        chunk_index INTEGER NOT NULL
                    )
                    """
                ).format(table=table)
            )
    except psycopg.Error as e:
        pytest.skip(f"pgvector not available: {e}")
    try:
        yield test_settings.db_chunks_table
    finally:
        with get_connection() as conn:
            conn.execute(sql.SQL("DROP TABLE IF EXISTS {table}").format(table=table))


@pytest.fixture
def db_conn(chunks_table: str) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn
