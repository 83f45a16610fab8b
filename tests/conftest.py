import pytest

from walkreach.config.settings import get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    # Settings are lru_cached; keep env-driven tests from leaking into each other.
    for name in ("WALKREACH_CONFIG_PATH", "WALKREACH_LOG_LEVEL", "WALKREACH_CATALOG_PATH", "MAPBOX_ACCESS_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    base = get_settings()
    mapbox = base.mapbox.model_copy(update={"access_token": "test-token", "base_url": "https://mapbox.test"})
    return base.model_copy(update={"mapbox": mapbox})
