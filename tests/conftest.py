# conftest.py

import os
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# --- Environment Configuration ---

def pytest_configure(config):
    """
    Forcefully sets the environment variables for the entire test session,
    before any application module reads them.
    """
    os.environ["DATABASE_URL"] = "sqlite://"
    os.environ["NEO4J_URI"] = "neo4j://localhost:7687"
    os.environ["NEO4J_USERNAME"] = "neo4j"
    os.environ["NEO4J_PASSWORD"] = "testpassword"
    os.environ["SECRET_KEY"] = "testsecretkey"
    os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"


FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


# --- Builders ---

@pytest.fixture
def make_skill():
    """Factory for small test skills; only the id is required."""
    from skill_system.models import Requirement, Skill

    def _make(skill_id, category="Push", level=1, sets=3, reps=10, prerequisites=()):
        return Skill(
            id=skill_id,
            title=skill_id.replace("-", " ").title(),
            category=category,
            level=level,
            requirement=Requirement(sets=sets, reps=reps),
            prerequisites=tuple(prerequisites),
        )

    return _make


@pytest.fixture
def chain_catalog(make_skill):
    """A -> B -> C in Push, plus an independent root D in Core."""
    from skill_system.models import SkillCatalog

    return SkillCatalog(
        [
            make_skill("a", level=1, sets=3, reps=10),
            make_skill("b", level=2, prerequisites=["a"]),
            make_skill("c", level=3, prerequisites=["b"]),
            make_skill("d", category="Core", level=1, sets=2, reps=5),
        ]
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


# --- Database ---

@pytest.fixture
def db_engine():
    """In-memory SQLite shared by every connection of a test."""
    from api.database import metadata

    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_conn(db_engine):
    with db_engine.connect() as conn:
        yield conn


# --- Application ---

@pytest.fixture
def mock_user():
    from api.schemas import User

    return User(id=1, email="athlete@example.com", is_active=True)


@pytest.fixture
def admin_user():
    from api.schemas import User

    return User(id=2, email="coach@example.com", is_active=True, is_admin=True)


@pytest.fixture
def mock_graph_driver():
    """Neo4j driver whose transactions run the graph_crud function against a MagicMock tx."""
    mock_driver = MagicMock()
    mock_session = MagicMock()
    mock_tx = MagicMock()

    mock_session.execute_write.side_effect = lambda func, *args, **kwargs: func(mock_tx, *args, **kwargs)
    mock_session.execute_read.side_effect = lambda func, *args, **kwargs: func(mock_tx, *args, **kwargs)
    mock_driver.session.return_value.__enter__.return_value = mock_session
    mock_driver.tx = mock_tx
    return mock_driver


@pytest.fixture
def app_factory(db_engine, mock_graph_driver):
    """Builds an app wired to the test database and the mocked graph driver."""
    from api.main import create_app
    from api.database import get_db, get_graph_db_driver

    def override_get_db():
        with db_engine.connect() as conn:
            yield conn

    def _build():
        app = create_app()
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_graph_db_driver] = lambda: mock_graph_driver
        return app

    return _build


@pytest.fixture
def client(app_factory, chain_catalog, mock_user):
    """TestClient for an authenticated user, serving `chain_catalog`."""
    from api.routers.auth import get_current_user
    from api.routers.skills import get_catalog

    app = app_factory()
    app.dependency_overrides[get_current_user] = lambda: mock_user
    app.dependency_overrides[get_catalog] = lambda: chain_catalog
    yield TestClient(app)
    app.dependency_overrides.clear()
