import pytest
from fastapi.testclient import TestClient

from filedrop.main import create_app
from filedrop.shared.config import Settings

@pytest.fixture
def settings(tmp_path):
    return Settings(
        UPLOAD_DIR=str(tmp_path / "uploads"),
        DB_URL=f"sqlite:///{(tmp_path / 'db' / 'test.db').as_posix()}",
    )

@pytest.fixture
def app(settings):
    return create_app(settings)

@pytest.fixture
def client(app):
    # context manager runs the startup hook (upload dir + tables)
    with TestClient(app) as c:
        yield c

@pytest.fixture
def upload_dir(settings):
    from pathlib import Path
    return Path(settings.UPLOAD_DIR)
