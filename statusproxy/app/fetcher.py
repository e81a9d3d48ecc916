import asyncio
import json
import logging
import time
from typing import Any, Optional, Tuple

import httpx

from .config import Settings
from .extractor import extract_with_source, has_known_marker, loads_strict
from .models import (FailureKind, FailureOutcome, HtmlFallbackOutcome, JsonOutcome,
                     StatusPayload, UpstreamOutcome)

logger = logging.getLogger(__name__)

INVALID_FORMAT_MESSAGE = "Invalid JSON received from upstream API"


def _top_level_payload(value: Any) -> Optional[StatusPayload]:
    if isinstance(value, dict):
        data, included = value.get("data"), value.get("included")
        if isinstance(data, dict) and isinstance(included, list):
            return StatusPayload(data=data, included=included)
    return None


class UpstreamFetcher:
    """GETs the status document and classifies what came back.

    Dispatch is on the body, not the Content-Type header: the provider has been
    seen labelling JSON as HTML and the other way round.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def _total(self, total: Optional[float]) -> float:
        return self.settings.TOTAL_TIMEOUT_S if total is None else total

    def _timeout(self, total: float) -> httpx.Timeout:
        s = self.settings
        return httpx.Timeout(total,
                             connect=min(s.CONNECT_TIMEOUT_S, total),
                             read=min(s.READ_TIMEOUT_S, total))

    async def _get(self, url: str, total: float) -> Tuple[httpx.Response, str]:
        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.get(
                url,
                headers={"User-Agent": self.settings.UA, "Accept": "application/json"},
                follow_redirects=True,
                timeout=self._timeout(total),
            )
            if not response.encoding or response.encoding == "ISO-8859-1":
                response.encoding = "utf-8"
            return response, response.text

    async def fetch(self, url: Optional[str] = None, timeout: Optional[float] = None) -> UpstreamOutcome:
        url = url or self.settings.UPSTREAM_URL
        total = self._total(timeout)
        started = time.monotonic()
        try:
            # httpx.Timeout limits each step; wait_for bounds the whole call
            response, body = await asyncio.wait_for(self._get(url, total), total)
        except asyncio.TimeoutError:
            cause = f"Upstream did not respond within {total:g}s"
            self._log("NetworkError", None, started, url)
            return FailureOutcome(FailureKind.NETWORK_ERROR, {"cause": cause}, cause)
        except httpx.HTTPError as e:
            cause = str(e) or type(e).__name__
            self._log("NetworkError", None, started, url)
            return FailureOutcome(FailureKind.NETWORK_ERROR, {"cause": cause}, cause)

        if not response.is_success:
            logger.error(f"Upstream HTTP error! status: {response.status_code}")
            self._log("HttpError", response.status_code, started, url)
            return FailureOutcome(FailureKind.HTTP_ERROR, {"status": response.status_code},
                                  f"HTTP error! status: {response.status_code}")

        outcome = self.classify(body, response.headers.get("content-type", ""))
        self._log(type(outcome).__name__, response.status_code, started, url)
        return outcome

    def classify(self, body: str, content_type: str = "") -> UpstreamOutcome:
        if "application/json" not in content_type.lower():
            logger.warning(f"Unexpected content type: {content_type or 'unknown'}. Attempting HTML fallback.")

        preview = body[:self.settings.BODY_PREVIEW_CHARS]
        try:
            payload = _top_level_payload(loads_strict(body))
        except (ValueError, RecursionError) as e:
            logger.error(f"Failed to parse upstream JSON: {e}")
            logger.error(f"Response preview: {preview}")
            payload = None
        if payload is not None:
            return JsonOutcome(payload)

        hit = extract_with_source(body, self.settings.MAX_SEARCH_DEPTH)
        if hit is not None:
            logger.warning(f"Extracted payload from HTML fallback ({hit[1]}).")
            return HtmlFallbackOutcome(*hit)

        return FailureOutcome(
            FailureKind.INVALID_UPSTREAM_FORMAT,
            {
                "contentType": content_type,
                "bodyLength": len(body),
                "bodyPreview": preview,
                "hasKnownMarker": has_known_marker(body),
            },
            INVALID_FORMAT_MESSAGE,
        )

    def _log(self, outcome: str, http: Optional[int], started: float, url: str) -> None:
        logger.info(json.dumps({
            "outcome": outcome,
            "http": http,
            "elapsed_ms": int((time.monotonic() - started) * 1000),
            "url": url,
        }))
