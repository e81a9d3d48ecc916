import datetime
import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from .cache import ResponseCache, SingleFlight
from .config import Settings
from .fetcher import UpstreamFetcher
from .models import (CachedResponse, FailureOutcome, HtmlFallbackOutcome, JsonOutcome,
                     UpstreamOutcome)

logger = logging.getLogger(__name__)

ERROR_TITLE = "Failed to fetch service status"

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

Response = Tuple[Optional[Dict[str, Any]], Dict[str, str], int]


class StatusProxy:
    """Serves the upstream status document through a short-lived cache."""

    def __init__(self, fetcher: UpstreamFetcher, settings: Settings,
                 cache: Optional[ResponseCache] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.fetcher = fetcher
        self.settings = settings
        self.cache = cache if cache is not None else ResponseCache(clock)
        self.flight: SingleFlight[UpstreamOutcome] = SingleFlight()
        self.started_at = clock()
        self.clock = clock

    @property
    def cache_key(self) -> str:
        return self.settings.UPSTREAM_URL

    def _success_headers(self, entry: CachedResponse, cache_status: str) -> Dict[str, str]:
        ttl = entry.ttl_seconds
        headers = dict(CORS_HEADERS)
        headers["Cache-Control"] = f"public, s-maxage={ttl}, stale-while-revalidate={ttl * 2}"
        headers["X-Cache-Status"] = cache_status
        if entry.fallback_source:
            headers["X-Proxy-Fallback"] = "html"
            headers["X-Proxy-Fallback-Source"] = entry.fallback_source
        else:
            headers["X-Proxy-Fallback"] = "none"
        return headers

    def _error(self, message: str, details: Optional[Dict[str, Any]] = None) -> Response:
        body: Dict[str, Any] = {"error": ERROR_TITLE, "message": message}
        if details:
            body["details"] = details
        headers = {"Access-Control-Allow-Origin": "*", "Cache-Control": "no-cache"}
        return body, headers, 500

    async def _refresh(self) -> UpstreamOutcome:
        outcome = await self.fetcher.fetch(self.settings.UPSTREAM_URL, self.settings.TOTAL_TIMEOUT_S)
        if isinstance(outcome, (JsonOutcome, HtmlFallbackOutcome)):
            source = outcome.source if isinstance(outcome, HtmlFallbackOutcome) else None
            self.cache.put(self.cache_key, CachedResponse(
                payload=outcome.payload,
                fetched_at=self.clock(),
                ttl_seconds=self.settings.CACHE_TTL_S,
                fallback_source=source,
            ))
        return outcome

    async def handle_status_request(self) -> Response:
        started = time.monotonic()
        entry = self.cache.get_fresh(self.cache_key)
        if entry is not None:
            self._log("HIT", entry.fallback_source, 200, started)
            return entry.payload.to_dict(), self._success_headers(entry, "HIT"), 200

        try:
            outcome = await self.flight.do(self.cache_key, self._refresh)
        except Exception as e:
            logger.exception("Error fetching status")
            self._log("MISS", None, 500, started)
            return self._error(str(e) or type(e).__name__)

        if isinstance(outcome, FailureOutcome):
            logger.error(f"Error fetching status: {outcome.kind.value}: {outcome.message}")
            self._log("MISS", None, 500, started)
            return self._error(outcome.message or outcome.kind.value, outcome.details)

        # build from the outcome; a concurrent refresh may already have replaced the entry
        source = outcome.source if isinstance(outcome, HtmlFallbackOutcome) else None
        entry = CachedResponse(outcome.payload, self.clock(), self.settings.CACHE_TTL_S, source)
        self._log("MISS", source, 200, started)
        return outcome.payload.to_dict(), self._success_headers(entry, "MISS"), 200

    def handle_options(self) -> Response:
        return None, dict(CORS_HEADERS), 200

    def handle_health(self) -> Response:
        uptime = int(self.clock() - self.started_at)
        body = {
            "status": "healthy",
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "service": self.settings.SERVICE_NAME,
            "version": self.settings.SERVICE_VERSION,
            "uptime": f"{uptime}s",
        }
        return body, {"Cache-Control": "no-cache"}, 200

    def _log(self, cache: str, fallback: Optional[str], http: int, started: float) -> None:
        logger.info(json.dumps({
            "route": "/api/status",
            "cache": cache,
            "fallback": fallback or "none",
            "http": http,
            "elapsed_ms": int((time.monotonic() - started) * 1000),
        }))
