"""
Pytest configuration and shared fixtures.

No network: every VapiClient gets a MagicMock(spec=httpx.Client) whose
``request`` returns canned httpx.Response objects.
"""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from vapi_provider.client import VapiClient

BASE_URL = "https://api.vapi.test"
TOKEN = "test-token-123456"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep the developer's VAPI_* variables and .env file out of tests."""
    for name in ("VAPI_URL", "VAPI_API_KEY", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def mock_http() -> MagicMock:
    return MagicMock(spec=httpx.Client)


@pytest.fixture
def vapi_client(mock_http: MagicMock) -> VapiClient:
    return VapiClient(base_url=BASE_URL, token=TOKEN, http_client=mock_http)


@pytest.fixture
def respond(mock_http: MagicMock):
    """Make the next request on ``mock_http`` return the given response."""

    def _respond(status_code: int, body: Any = None, text: str | None = None) -> None:
        if text is not None:
            mock_http.request.return_value = httpx.Response(status_code=status_code, text=text)
        elif body is not None:
            mock_http.request.return_value = httpx.Response(status_code=status_code, json=body)
        else:
            mock_http.request.return_value = httpx.Response(status_code=status_code)

    return _respond


@pytest.fixture
def last_request(mock_http: MagicMock):
    """Method, URL, decoded JSON body and headers of the last request."""

    def _last_request() -> tuple[str, str, dict[str, Any] | None, dict[str, str]]:
        call_args = mock_http.request.call_args
        method, url = call_args[0][0], call_args[0][1]
        content = call_args[1].get("content")
        body = json.loads(content) if content else None
        return method, url, body, call_args[1]["headers"]

    return _last_request
