import asyncio
import datetime
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

import httpx

from .errors import ServiceNotFound
from .models import ServiceResource, ServiceStatus, ServiceStatusData

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_NAME = "Relayer - Testnet"


def find_service(document: Dict[str, Any], service_name: str) -> ServiceResource:
    if not isinstance(document, dict) or not isinstance(document.get("included"), list):
        raise ValueError("Unexpected API response shape")
    for item in document["included"]:
        if not isinstance(item, dict) or item.get("type") != "status_page_resource":
            continue
        if (item.get("attributes") or {}).get("public_name") == service_name:
            return ServiceResource.from_dict(item)
    raise ServiceNotFound(service_name)


class ServiceStatusClient:
    """Tracks one named service through the proxy's /api/status route.

    `refresh()` coalesces: callers arriving while a request is out wait for
    that request instead of starting another.
    """

    def __init__(self, api_url: str, service_name: str = DEFAULT_SERVICE_NAME,
                 on_status_change: Optional[Callable[[ServiceStatus], None]] = None,
                 timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = api_url
        self.service_name = service_name
        self.on_status_change = on_status_change
        self.timeout = timeout
        self.transport = transport
        self.data = ServiceStatusData(service_name=service_name)
        self._previous: ServiceStatus = ServiceStatus.OPERATIONAL
        self._inflight: Optional[asyncio.Task] = None

    async def refresh(self) -> ServiceStatusData:
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._fetch())
        await asyncio.shield(self._inflight)
        return self.data

    async def _fetch(self) -> None:
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                r = await client.get(self.api_url)
            if not r.is_success:
                raise RuntimeError(f"HTTP error! status: {r.status_code}")
            service = find_service(r.json(), self.service_name)
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError,
                RuntimeError, ServiceNotFound) as e:
            message = str(e) or "Failed to fetch service status"
            logger.error(f"[{self.service_name}] {message}")
            self.data = replace(self.data, is_loading=False, error=message)
            return

        self.data = ServiceStatusData(
            service_name=self.service_name,
            status=service.status,
            availability=service.availability,
            last_updated=datetime.datetime.now(datetime.timezone.utc),
            is_loading=False,
            error=None,
        )
        if service.status != self._previous and self.on_status_change is not None:
            self.on_status_change(service.status)
        self._previous = service.status
