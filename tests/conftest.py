"""
Test Configuration Module
"""

import pytest

from missing_headers.config import get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings for every test so environment changes take effect"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
