"""Shared fixtures for the admin console test suite.

Every test gets its own in-memory SQLite database: each DatabaseManager
creates a separate engine, so nothing leaks between tests.
"""
import random
from datetime import date, datetime

import pytest

from database import DatabaseManager


@pytest.fixture
def temp_db():
    """Yield a fresh, empty in-memory DatabaseManager."""
    manager = DatabaseManager(database_url="sqlite://")
    manager.create_tables()
    try:
        yield manager
    finally:
        manager.close()


@pytest.fixture
def seeded_db(temp_db):
    """Yield a DatabaseManager loaded with the deterministic demo data."""
    temp_db.seed(random.Random(20250901))
    return temp_db


@pytest.fixture
def sample_date():
    """Stable date value for deterministic tests."""
    return date(2024, 9, 20)


@pytest.fixture
def sample_datetime():
    """Stable datetime value for deterministic tests."""
    return datetime(2024, 9, 20, 10, 0, 0)


def make_partner(db, name="テストパートナー", **fields):
    """Helper: create a partner and return it."""
    defaults = {
        "name": name,
        "contact_email": "partner@example.com",
        "lp_url": "https://fp-match.example.com/lp/test",
    }
    defaults.update(fields)
    return db.partners.add(**defaults)


def make_fp(db, name="テストFP", **fields):
    """Helper: create an FP and return it."""
    defaults = {
        "name": name,
        "email": "fp@example.com",
        "fp_type": "個人",
        "join_date": date(2024, 1, 1),
        "monthly_limit": 10,
    }
    defaults.update(fields)
    return db.fps.add(**defaults)


def make_user(db, name="テストユーザー", **fields):
    """Helper: create an end user and return it."""
    defaults = {
        "name": name,
        "email": "user@example.com",
        "registration_date": date(2024, 9, 1),
    }
    defaults.update(fields)
    return db.users.add(**defaults)
