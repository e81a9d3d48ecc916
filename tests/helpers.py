"""
Test helpers: payload builders, HTML fixtures, a fake clock and a scripted fetcher.
"""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any, Optional

from statusproxy.app.models import UpstreamOutcome

# one canonical escape per character, for building escaped HTML fixtures
_ESCAPES: dict[str, str] = {
    "&": "&amp;",
    '"': "&quot;",
    "<": "&lt;",
    ">": "&gt;",
    "'": "&#39;",
    "/": "&#x2F;",
}
_ESCAPE_RE = re.compile("[" + re.escape("".join(_ESCAPES)) + "]")


def encode_html_entities(text: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(0)], text)


def make_resource(name: str = "Relayer - Testnet", status: str = "operational",
                  availability: float = 0.999, rid: str = "1") -> dict[str, Any]:
    return {
        "id": rid,
        "type": "status_page_resource",
        "attributes": {
            "public_name": name,
            "status": status,
            "availability": availability,
            "status_history": [],
        },
    }


def make_document(*resources: dict[str, Any]) -> dict[str, Any]:
    return {
        "data": {"id": "42", "type": "status_page", "attributes": {"company_name": "Zama"}},
        "included": list(resources) if resources else [make_resource()],
    }


def next_data_html(tree: Any, escape_quotes: bool = False) -> str:
    blob = json.dumps(tree)
    if escape_quotes:
        blob = blob.replace('"', "&quot;")
    return (
        "<!DOCTYPE html><html><head><title>Status</title></head><body>"
        '<div id="__next"></div>'
        f'<script id="__NEXT_DATA__" type="application/json">{blob}</script>'
        "</body></html>"
    )


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """Returns scripted outcomes in order; the last one repeats."""

    def __init__(self, *outcomes: UpstreamOutcome, gate: Optional[asyncio.Event] = None):
        self.outcomes = list(outcomes)
        self.calls = 0
        self.gate = gate

    async def fetch(self, url: Optional[str] = None, timeout: Optional[float] = None) -> UpstreamOutcome:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if len(self.outcomes) > 1:
            return self.outcomes.pop(0)
        return self.outcomes[0]


