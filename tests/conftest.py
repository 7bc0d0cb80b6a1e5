import importlib
import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from alembic import command
from alembic.config import Config

from tests.db_utils import create_postgres_test_database

TEST_SECRET_KEY = "test-secret"


def _sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+pysqlite:///{tmp_path / 'branchstock.db'}"


def _run_migrations(database_url: str) -> None:
    os.environ["DATABASE_URL"] = database_url
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


def _setup_app(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    os.environ["SECRET_KEY"] = TEST_SECRET_KEY

    import app.branchstock.core.config as config
    import app.branchstock.db.session as session
    import app.main as main

    # Modules that did ``from config import settings`` keep the previous object,
    # so only values read through ``config.settings`` pick up the new URL.
    importlib.reload(config)
    importlib.reload(session)
    importlib.reload(main)

    return main.create_app(), session


@pytest.fixture()
def client(tmp_path: Path):
    from app.branchstock.core.metrics import metrics

    database_url = os.getenv("DATABASE_URL", "")
    cleanup = None
    if database_url.startswith("postgres"):
        database_url, cleanup = create_postgres_test_database(database_url)
    else:
        database_url = _sqlite_url(tmp_path)

    _run_migrations(database_url)
    app, session = _setup_app(database_url)
    metrics.reset()

    with TestClient(app) as test_client:
        yield test_client

    session.engine.dispose()
    if cleanup:
        cleanup()


@pytest.fixture()
def db_session(client):
    from app.branchstock.db.session import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
