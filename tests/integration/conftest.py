"""
Integration test configuration with testcontainers.

Provides a session-scoped PostgreSQL 16 container with the integrity schema
applied, and a per-test session factory. Tables are truncated after every
test so tests stay independent.

Usage:
    @pytest.mark.integration
    async def test_example(session_factory: async_sessionmaker[AsyncSession]) -> None:
        repository = PostgresCertificateRepository(session_factory)
        ...

Note: Docker must be running for these fixtures to work.
"""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from certengine.bootstrap.database import to_async_url

MIGRATIONS_DIR = Path(__file__).parent.parent.parent / "migrations"


def _migration_statements() -> list[str]:
    statements: list[str] = []
    for path in sorted(MIGRATIONS_DIR.glob("*.sql")):
        lines = [
            line
            for line in path.read_text().splitlines()
            if not line.strip().startswith("--")
        ]
        statements.extend(
            chunk.strip() for chunk in "\n".join(lines).split(";") if chunk.strip()
        )
    return statements


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container.

    The container is started once and reused across all integration tests.
    """
    with PostgresContainer("postgres:16-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Get the asyncpg connection URL of the container."""
    return to_async_url(postgres_container.get_connection_url())


@pytest.fixture
async def db_engine(postgres_async_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Per-test engine on a migrated database, truncated afterwards."""
    engine = create_async_engine(postgres_async_url, echo=False)

    async with engine.begin() as conn:
        for statement in _migration_statements():
            await conn.exec_driver_sql(statement)

    yield engine

    async with engine.begin() as conn:
        await conn.execute(text("TRUNCATE verifications, audit_entries, certificates"))
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the per-test engine."""
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
