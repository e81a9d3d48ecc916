#!/usr/bin/env python3
"""
One-shot status check for a single service behind the proxy.

Usage:
    python check_status.py [service name] [proxy status url]
    python check_status.py  # "Relayer - Testnet" on http://localhost:8000/api/status
"""

import asyncio
import sys
from typing import List

from statusproxy.app.client import DEFAULT_SERVICE_NAME, ServiceStatusClient
from statusproxy.app.models import ServiceStatus, ServiceStatusData
from statusproxy.app.status_mapper import (format_availability, format_timestamp,
                                           get_status_color, get_status_text)

DEFAULT_API_URL = "http://localhost:8000/api/status"

STATUS_ICONS = {
    ServiceStatus.OPERATIONAL: "[OK]",
    ServiceStatus.DEGRADED: "[WARN]",
    ServiceStatus.DOWNTIME: "[FAIL]",
    ServiceStatus.MAINTENANCE: "[MAINT]",
}


def render(data: ServiceStatusData) -> List[str]:
    if data.error:
        return [f"[ERROR] {data.service_name}: {data.error}"]
    lines = [
        f"{STATUS_ICONS[data.status]} {data.service_name}: {get_status_text(data.status)} "
        f"({get_status_color(data.status)})",
        f"   Availability: {format_availability(data.availability)}",
    ]
    if data.last_updated:
        lines.append(f"   Last updated: {format_timestamp(data.last_updated)}")
    return lines


async def check(service_name: str, api_url: str) -> int:
    data = await ServiceStatusClient(api_url, service_name).refresh()
    for line in render(data):
        print(line)
    if data.error:
        return 2
    return 0 if data.status == ServiceStatus.OPERATIONAL else 1


if __name__ == "__main__":
    name = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_SERVICE_NAME
    url = sys.argv[2] if len(sys.argv) > 2 else DEFAULT_API_URL
    sys.exit(asyncio.run(check(name, url)))
