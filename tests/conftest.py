import pytest
from fastapi.testclient import TestClient


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch):
    """Run every test with no secondary key and a fresh settings cache."""
    monkeypatch.setenv("OPENCAGE_API_KEY", "")
    monkeypatch.delenv("DEFAULT_COUNTRY", raising=False)

    from app.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client() -> TestClient:
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
