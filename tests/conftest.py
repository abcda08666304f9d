import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from portal.app import create_app
from portal.auth.store import CredentialStore
from portal.config import PortalConfig

TEST_KEY = b"0123456789abcdef0123456789abcdef"


@pytest.fixture()
def config(tmp_path: Path) -> PortalConfig:
    return PortalConfig(port=3000, session_key=TEST_KEY, db_name=str(tmp_path / "users.db"))


@pytest.fixture()
def store(config: PortalConfig) -> CredentialStore:
    """Bootstrapped store seeded with alice/wonderland and bob/builder."""
    s = CredentialStore(config.db_name)
    s.bootstrap()
    return s


@pytest.fixture()
def client(config, store) -> TestClient:
    return TestClient(create_app(config), follow_redirects=False)
