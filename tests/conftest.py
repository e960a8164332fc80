"""Pytest configuration and shared fixtures."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
import pytest_asyncio


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Reset logging state before each test."""
    from findip.logging import reset_logging

    reset_logging()
    yield
    reset_logging()


@pytest_asyncio.fixture(autouse=True, loop_scope="function")
async def cleanup_aiohttp_sessions():
    """Give aiohttp sessions time to clean up their connectors.

    aiohttp's ClientSession.close() doesn't wait for the underlying
    connector to fully close. This can cause "Unclosed client session"
    warnings when the event loop closes before cleanup completes.
    """
    yield
    await asyncio.sleep(0)


@pytest.fixture
def make_response():
    """Factory for mocked aiohttp response context managers.

    Pass ``error`` to make entering the context raise instead.
    """

    def _make(status: int = 200, text: str = "", error: Exception | None = None):
        response = MagicMock()
        response.status = status
        response.text = AsyncMock(return_value=text)

        cm = MagicMock()
        if error is not None:
            cm.__aenter__ = AsyncMock(side_effect=error)
        else:
            cm.__aenter__ = AsyncMock(return_value=response)
        cm.__aexit__ = AsyncMock(return_value=None)
        return cm

    return _make


@pytest.fixture
def mock_session():
    """Create a mock aiohttp session."""
    return MagicMock(spec=aiohttp.ClientSession)
