"""
Shared fixtures for the status proxy tests.

Upstream HTTP is faked with httpx.MockTransport; the proxy handler is driven
with a controllable clock and a scripted fetcher (see tests/helpers.py).
"""

from __future__ import annotations

from typing import Any

import pytest

from statusproxy.app.config import Settings
from statusproxy.app.models import JsonOutcome, StatusPayload

from tests.helpers import FakeClock, make_document


@pytest.fixture
def settings() -> Settings:
    return Settings(UPSTREAM_URL="https://status.example.test/index.json")


@pytest.fixture
def document() -> dict[str, Any]:
    return make_document()


@pytest.fixture
def payload(document: dict[str, Any]) -> StatusPayload:
    return StatusPayload(data=document["data"], included=document["included"])


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def json_outcome(payload: StatusPayload) -> JsonOutcome:
    return JsonOutcome(payload)
