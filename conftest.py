import os

# In-memory SQLite for the IV store. Must be set BEFORE config.py is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BLOCKLIST_URL", "")
os.environ.setdefault("BLOCKED_SEEDS", "")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base
from generator import AdminGenerator
from models import LicenseStructParameters

# The documented example seed
SEED = bytes([5, 100, 42, 69, 3, 90])


@pytest.fixture
def params():
    return LicenseStructParameters(seed_length=6, payload_length=10, chunk_size=2)


# Fixed IVs keep 2-byte chunk comparisons deterministic across runs
FIXED_IVS = [bytes((i * 37 + j) % 256 for j in range(10 + i % 6)) for i in range(10)]


@pytest.fixture
def generator(params):
    return AdminGenerator(params, FIXED_IVS)


@pytest.fixture
def license(generator):
    return generator.generate_license(SEED)


@pytest.fixture
def session_factory():
    """Fresh in-memory database per test."""
    # StaticPool: one shared connection, so every session sees the same in-memory db
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
