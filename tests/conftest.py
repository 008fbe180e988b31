import os
import pytest
from hypothesis import HealthCheck, settings
from rasterband.config import get_settings

# el reseteo de settings es seguro entre ejemplos de hypothesis
settings.register_profile("rasterband", suppress_health_check=[HealthCheck.function_scoped_fixture])
settings.load_profile("rasterband")

def pytest_configure():
    os.environ.setdefault("RASTERBAND_BOUNDS_POLICY", "legacy")

@pytest.fixture(autouse=True)
def _reset_settings_cache():
    # evita fuga de estado entre tests
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()

def pytest_collection_modifyitems(items):
    for item in items:
        if "integration" in item.keywords and os.environ.get("CI") == "true":
            item.add_marker(pytest.mark.slow)
