"""
Global pytest configuration and fixtures.
"""

import pytest

from brightspace_auth import BrightspaceStrategy
from tests.auth.provider_adapter_testkit import FakeAsyncHttpClient, patch_http_client


def _noop_verify(access_token, refresh_token, profile):
    return None


@pytest.fixture
def strategy() -> BrightspaceStrategy:
    return BrightspaceStrategy(
        {
            "host": "https://api.brightspace.im",
            "client_id": "ABC123",
            "client_secret": "secret",
        },
        _noop_verify,
    )


@pytest.fixture
def fake_client(monkeypatch) -> FakeAsyncHttpClient:
    """A fake HTTP client answering every request with an empty JSON object."""
    client = FakeAsyncHttpClient()
    patch_http_client(monkeypatch, client)
    return client
