import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from heatsync.config.settings import Settings
from heatsync.database.connection import close_pool, get_connection, init_pool
from heatsync.database.exceptions import CacheUnavailableError
from heatsync.database.migrations import run_migrations


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "heatsync_test")
    return Settings(llm_provider="example", openai_model_name="gpt-4o")


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute("SELECT 1")
    except (CacheUnavailableError, psycopg.Error) as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a scratch database"
        )
    run_migrations()
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def checksum_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    """Collects pdf_files checksums to delete; dependent rows cascade."""
    checksums: list[str] = []
    yield checksums
    if not checksums:
        return
    with get_connection() as conn:
        conn.execute("DELETE FROM pdf_files WHERE checksum = ANY(%s)", (checksums,))
        conn.commit()


@pytest.fixture
def unique_checksum(checksum_cleanup: list[str]) -> str:
    checksum = uuid.uuid4().hex
    checksum_cleanup.append(checksum)
    return checksum
