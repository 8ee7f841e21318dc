import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

from config import Settings
from database.conexion import Database
from main import create_app


@pytest.fixture
def database():
    db = Database("sqlite://", seed_rates=True).open()
    yield db
    db.close()


@pytest.fixture
def session(database):
    db = database.session()
    yield db
    db.close()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        guest_docs_path=str(tmp_path / "Guest_Docs"),
        admin_password="frontdesk",
        seed_default_rates=True,
        ota_feed_url="",
    )


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
