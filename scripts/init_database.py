"""
Database initialization script.

Creates the Accueil database (PostgreSQL only) and the profiles and
wallets tables from the SQLAlchemy models.
"""

import asyncio
import sys

import asyncpg
from sqlalchemy import inspect
from sqlalchemy.engine import make_url

from accueil.config.settings import get_settings
from accueil.infrastructure.persistence.database import Database

EXPECTED_TABLES = ["profiles", "wallets"]


async def create_database_if_not_exists(database_url: str) -> None:
    """Create the target PostgreSQL database if it doesn't exist."""
    url = make_url(database_url)
    if not url.drivername.startswith("postgresql"):
        print(f"Skipping database creation for {url.drivername}")
        return

    print("Checking if database exists...")
    conn = await asyncpg.connect(
        host=url.host,
        port=url.port or 5432,
        user=url.username,
        password=url.password,
        database="postgres",
    )
    try:
        exists = await conn.fetchval(
            "SELECT 1 FROM pg_database WHERE datname = $1",
            url.database,
        )
        if exists:
            print(f"Database '{url.database}' already exists")
        else:
            print(f"Creating database '{url.database}'...")
            await conn.execute(f'CREATE DATABASE "{url.database}"')
            print("Database created successfully")
    finally:
        await conn.close()


async def create_tables(database: Database) -> None:
    """Create tables from the models."""
    print("\nCreating tables...")
    await database.create_tables()
    print("Tables created")


async def verify_tables(database: Database) -> bool:
    """Verify all tables were created."""
    print("\nVerifying tables...")

    async with database.engine.connect() as conn:
        tables = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).get_table_names()
        )

    print(f"Found tables: {', '.join(sorted(tables))}")

    missing = set(EXPECTED_TABLES) - set(tables)
    if missing:
        print(f"Missing tables: {', '.join(sorted(missing))}")
        return False

    print("All tables created successfully")
    return True


async def main() -> None:
    """Run database initialization."""
    settings = get_settings()

    print("Accueil Database Initialization")
    print("=" * 50)
    print(f"Database URL: {make_url(settings.DATABASE_URL)!r}")
    print("=" * 50)

    database = Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

    try:
        await create_database_if_not_exists(settings.DATABASE_URL)
        await database.connect()
        await create_tables(database)
        success = await verify_tables(database)
    except Exception as e:
        print("\n" + "=" * 50)
        print(f"Database initialization failed: {e}")
        print("=" * 50)
        sys.exit(1)
    finally:
        await database.disconnect()

    print("\n" + "=" * 50)
    if success:
        print("Database initialization completed successfully!")
    else:
        print("Database initialization completed with warnings")
        sys.exit(1)
    print("=" * 50)


if __name__ == "__main__":
    asyncio.run(main())
