"""
Integration fixtures: a real SQLite database per test.
"""

from typing import AsyncGenerator

import pytest_asyncio

from accueil.infrastructure.persistence.database import Database


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """
    Create a file-backed SQLite database with fresh tables.

    Each test gets a clean database.
    """
    db = Database(database_url=f"sqlite+aiosqlite:///{tmp_path / 'accueil.db'}")
    await db.connect()
    await db.create_tables()

    yield db

    await db.drop_tables()
    await db.disconnect()
