import pytest

from sonatalab.cipher.engine import clear_table_cache
from sonatalab.config import load_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    load_settings.cache_clear()
    clear_table_cache()
    yield
    load_settings.cache_clear()
    clear_table_cache()
