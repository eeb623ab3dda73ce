"""Pytest configuration and shared fixtures."""

import shutil
from pathlib import Path
from typing import Callable, Dict, Generator, Tuple

import pytest
from alembic import command
from alembic.config import Config
from fastapi import FastAPI
from fastapi.testclient import TestClient

from linkfolio.config import AppConfig, DatabaseConfig, LinkFolioConfig, ServerConfig
from linkfolio.main import create_app
from linkfolio.repositories.interfaces import RepositoryContainer
from linkfolio.repositories.memory_impl import create_memory_container

PROJECT_ROOT = Path(__file__).resolve().parents[1]

TEST_JWT_SECRET = "test-secret-7f3a9c1e5b2d8f4a6c0e9b1d3f5a7c9e"
TEST_PASSWORD = "Sup3rSecret"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without a database")
    config.addinivalue_line("markers", "integration: full app against a SQLite database")


def _run_alembic_migrations(db_url: str) -> None:
    """Run Alembic migrations programmatically for a test database."""
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(alembic_cfg, "head")


@pytest.fixture(scope="session")
def migrated_db_template(tmp_path_factory) -> Path:
    """A SQLite file with the schema applied, copied for each test."""
    path = tmp_path_factory.mktemp("schema") / "template.db"
    _run_alembic_migrations(f"sqlite:///{path}")
    return path


@pytest.fixture
def test_config(tmp_path, migrated_db_template) -> LinkFolioConfig:
    """Configuration pointing at a fresh migrated database."""
    db_path = tmp_path / "linkfolio.db"
    shutil.copyfile(migrated_db_template, db_path)
    return LinkFolioConfig(
        app=AppConfig(
            jwt_secret_key=TEST_JWT_SECRET,
            password_hash_iterations=1_000,
            log_dir=str(tmp_path / "logs"),
        ),
        server=ServerConfig(),
        database=DatabaseConfig(url=f"sqlite:///{db_path}"),
    )


@pytest.fixture
def app(test_config) -> FastAPI:
    return create_app(test_config)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app):
    """A session on the app's database for arranging and inspecting rows."""
    session = app.state.context.session_factory()
    yield session
    session.close()


@pytest.fixture
def memory_repos() -> RepositoryContainer:
    return create_memory_container()


@pytest.fixture
def signup(client) -> Callable[..., Tuple[Dict, Dict[str, str]]]:
    """
    Create an account through the API.

    Returns the session user and Bearer headers for it. The client's cookie
    jar is cleared so several accounts can be used in one test.
    """

    def _signup(
        username: str = "alice",
        email: str = None,
        password: str = TEST_PASSWORD,
        name: str = None,
    ) -> Tuple[Dict, Dict[str, str]]:
        body = {
            "email": email or f"{username}@example.com",
            "password": password,
            "username": username,
        }
        if name is not None:
            body["name"] = name
        response = client.post("/api/auth/signup", json=body)
        assert response.status_code == 200, response.text
        token = response.cookies["auth-token"]
        client.cookies.clear()
        return response.json()["user"], {"Authorization": f"Bearer {token}"}

    return _signup
