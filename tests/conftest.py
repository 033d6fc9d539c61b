"""
Pytest fixtures for formlayout tests.

Provides:
1. Data accessor mocks
2. Settings isolation

Plain data factories live in tests/helpers/factories.py.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from formlayout.config import get_settings


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; reset around each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_accessor():
    """DataAccessor mock; set get_collection_length.return_value / side_effect per test."""
    accessor = MagicMock()
    accessor.get_collection_length = AsyncMock(return_value=0)
    accessor.get_model_data = AsyncMock(return_value=None)
    accessor.list_data_elements_of_type = MagicMock(
        side_effect=lambda instance, type_id: instance.data_elements_of_type(type_id)
    )
    return accessor
