"""
Smoke tests to verify all critical dependencies are installed correctly.

These tests confirm that:
1. Python 3.11+ is installed
2. All core dependencies are importable
3. Project version is accessible

Run with: pytest tests/unit/test_smoke.py -v
"""

import sys


class TestPythonVersion:
    """Verify Python version requirements."""

    def test_python_311_or_higher(self) -> None:
        """Python 3.11+ is required (asyncio.TaskGroup, datetime.UTC)."""
        assert sys.version_info >= (3, 11), (
            f"Python 3.11+ required, "
            f"got {sys.version_info.major}.{sys.version_info.minor}"
        )


class TestLedgerStack:
    """Verify web3 for the certificate registry contract."""

    def test_async_web3_import(self) -> None:
        """AsyncWeb3 must be importable."""
        from web3 import AsyncWeb3, Web3

        assert AsyncWeb3 is not None
        assert Web3.keccak(b"") is not None


class TestDatabase:
    """Verify database dependencies for persistence."""

    def test_sqlalchemy_async(self) -> None:
        """SQLAlchemy 2.0+ async mode must be available."""
        from sqlalchemy import __version__ as sa_version
        from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

        major_version = int(sa_version.split(".")[0])
        assert major_version >= 2, f"SQLAlchemy 2.0+ required, got {sa_version}"
        assert AsyncSession is not None
        assert create_async_engine is not None

    def test_asyncpg_import(self) -> None:
        """asyncpg driver must be importable."""
        import asyncpg

        assert asyncpg is not None

    def test_uuid7_available(self) -> None:
        """uuid6 must provide time-ordered UUIDv7 ids."""
        from uuid6 import uuid7

        assert uuid7().version == 7


class TestObservability:
    """Verify structured logging and metrics."""

    def test_structlog_configuration(self) -> None:
        """structlog can be bound with context."""
        import structlog

        logger = structlog.get_logger()
        bound_logger = logger.bind(component="ledger", operation="test")
        assert bound_logger is not None

    def test_prometheus_import(self) -> None:
        """prometheus_client must be importable."""
        from prometheus_client import CollectorRegistry, Counter

        assert CollectorRegistry is not None
        assert Counter is not None


class TestProjectVersion:
    """Verify project metadata is accessible."""

    def test_version_accessible(self, project_version: str) -> None:
        """Project version must be accessible from the package."""
        assert isinstance(project_version, str)
        assert len(project_version) > 0

    def test_version_format(self, project_version: str) -> None:
        """Version must be in semver format."""
        parts = project_version.split(".")
        assert len(parts) >= 2, f"Version must be semver format, got {project_version}"
