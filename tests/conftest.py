"""Pytest configuration and shared fixtures.

This module provides fixtures for testing the cloudleaf application,
including in-memory databases, seeded sample data, a fixed clock and a
fake text generator.
"""

import os
from datetime import datetime, timezone
from typing import Generator

import pytest

from cloudleaf.auth import AuthManager, BcryptHasher
from cloudleaf.config import Config, reset_config
from cloudleaf.db.sqlite import Database, reset_db
from cloudleaf.lending import LendingManager
from cloudleaf.seed import seed_demo_data
from cloudleaf.wishlist import WishlistManager


# ============================================================================
# Global State
# ============================================================================


@pytest.fixture(autouse=True)
def clean_globals() -> Generator[None, None, None]:
    """Reset global db/config and keep the tests off real env settings."""
    reset_db()
    reset_config()
    saved = {k: os.environ.pop(k) for k in list(os.environ) if k.startswith("CLOUDLEAF_")}
    saved_key = os.environ.pop("GEMINI_API_KEY", None)

    yield

    reset_db()
    reset_config()
    for k in [k for k in os.environ if k.startswith("CLOUDLEAF_")]:
        del os.environ[k]
    os.environ.update(saved)
    if saved_key is not None:
        os.environ["GEMINI_API_KEY"] = saved_key


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def config() -> Config:
    """Test configuration with the default lending rules."""
    return Config(
        db_path=":memory:",
        loan_days=14,
        sweep_interval=60.0,
        default_trust_score=4.0,
        password_hasher="bcrypt",
        gemini_api_key=None,
        summary_model="gemini-2.5-flash",
        summary_timeout=30,
        log_level="WARNING",
        default_wishlist=["The Great Gatsby", "1984"],
    )


@pytest.fixture
def hasher() -> BcryptHasher:
    """A fast bcrypt hasher for tests (minimum cost)."""
    return BcryptHasher(rounds=4)


@pytest.fixture
def now() -> datetime:
    """A fixed reference time."""
    return datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db() -> Database:
    """Create an empty in-memory database for testing."""
    database = Database(":memory:")
    database.create_tables()
    return database


@pytest.fixture
def seeded_db(db: Database, hasher, config, now) -> Database:
    """In-memory database loaded with the sample users and books."""
    seed_demo_data(db, hasher=hasher, config=config, now=now)
    return db


@pytest.fixture
def lending(seeded_db: Database, config) -> LendingManager:
    """LendingManager on the seeded database."""
    return LendingManager(seeded_db, config)


@pytest.fixture
def wishlist(seeded_db: Database, config) -> WishlistManager:
    """WishlistManager on the seeded database."""
    return WishlistManager(seeded_db, config)


@pytest.fixture
def auth(seeded_db: Database, config, hasher, wishlist) -> AuthManager:
    """AuthManager on the seeded database."""
    return AuthManager(seeded_db, config, hasher=hasher, wishlist=wishlist)


@pytest.fixture
def users(seeded_db: Database) -> dict:
    """Seeded users by name."""
    return {u.name: u for u in seeded_db.list_users()}


# ============================================================================
# Text Generation
# ============================================================================


class FakeGenerator:
    """Records prompts and replays canned results (text or exceptions)."""

    def __init__(self, *results):
        self.results = list(results) or ["A summary."]
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def fake_generator() -> FakeGenerator:
    """A generator that always answers with the same summary."""
    return FakeGenerator("A whale of a tale.")


@pytest.fixture
def make_generator():
    """Factory for generators with custom canned results."""
    return FakeGenerator
