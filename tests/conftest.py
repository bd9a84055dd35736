"""
Pytest configuration and fixtures for capcompose tests.
"""

from __future__ import annotations

import os
from typing import Dict, Generator
from unittest.mock import MagicMock, patch

import pytest

from capcompose.composite.manifest import ManifestLoader
from capcompose.config import reset_config


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def test_env() -> Dict[str, str]:
    """Test environment variables."""
    return {
        "CAPCOMPOSE_SERVICE_NAME": "capcompose-test",
        "CAPCOMPOSE_METHOD_ORDER": "declaration",
        "CAPCOMPOSE_LOG_FORMAT": "json",
        "CAPCOMPOSE_EMIT_SPAN_EVENTS": "true",
    }


@pytest.fixture(autouse=True)
def set_test_env(test_env: Dict[str, str]) -> Generator[None, None, None]:
    """Set test environment variables and reset cached state for each test."""
    original = {}
    for key, value in test_env.items():
        original[key] = os.environ.get(key)
        os.environ[key] = value
    reset_config()
    ManifestLoader.clear_cache()

    yield

    for key, value in original.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
    reset_config()
    ManifestLoader.clear_cache()


# ============================================================================
# OTel Fixtures
# ============================================================================


@pytest.fixture
def mock_span() -> MagicMock:
    """Create a mock OTel span that is recording."""
    span = MagicMock()
    span.is_recording.return_value = True
    return span


@pytest.fixture
def mock_otel(mock_span: MagicMock) -> Generator[MagicMock, None, None]:
    """Patch OTel to return our mock span."""
    with patch("capcompose._otel_helpers.otel_trace") as mock_trace:
        mock_trace.get_current_span.return_value = mock_span
        yield mock_span
