import datetime
from typing import Dict, Union

from .models import ServiceStatus

STATUS_COLORS: Dict[ServiceStatus, str] = {
    ServiceStatus.OPERATIONAL: "green",
    ServiceStatus.DEGRADED: "yellow",
    ServiceStatus.DOWNTIME: "red",
    ServiceStatus.MAINTENANCE: "gray",
}

STATUS_HEX: Dict[ServiceStatus, str] = {
    ServiceStatus.OPERATIONAL: "#10b981",
    ServiceStatus.DEGRADED: "#f59e0b",
    ServiceStatus.DOWNTIME: "#ef4444",
    ServiceStatus.MAINTENANCE: "#6b7280",
}

STATUS_TEXT: Dict[ServiceStatus, str] = {
    ServiceStatus.OPERATIONAL: "Operational",
    ServiceStatus.DEGRADED: "Degraded",
    ServiceStatus.DOWNTIME: "Down",
    ServiceStatus.MAINTENANCE: "Maintenance",
}


def _status(status: Union[ServiceStatus, str]) -> ServiceStatus:
    # ValueError on anything outside the enum
    return ServiceStatus(status)


def get_status_color(status: Union[ServiceStatus, str]) -> str:
    return STATUS_COLORS[_status(status)]


def get_status_color_hex(status: Union[ServiceStatus, str]) -> str:
    return STATUS_HEX[_status(status)]


def get_status_text(status: Union[ServiceStatus, str]) -> str:
    return STATUS_TEXT[_status(status)]


def format_availability(availability: float) -> str:
    """0.99912 -> '99.91%'"""
    return f"{availability * 100:.2f}%"


def format_timestamp(ts: datetime.datetime) -> str:
    """'Oct 19, 2026, 02:26:00 PM'"""
    return f"{ts:%b} {ts.day}, {ts:%Y, %I:%M:%S %p}"
