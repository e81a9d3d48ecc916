import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class ServiceStatus(str, Enum):
    OPERATIONAL = "operational"
    DEGRADED = "degraded"
    DOWNTIME = "downtime"
    MAINTENANCE = "maintenance"


class FailureKind(str, Enum):
    HTTP_ERROR = "HttpError"
    NETWORK_ERROR = "NetworkError"
    INVALID_UPSTREAM_FORMAT = "InvalidUpstreamFormat"


@dataclass(frozen=True)
class HistoryEntry:
    day: str
    status: ServiceStatus
    downtime_duration: int = 0
    maintenance_duration: int = 0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            day=raw["day"],
            status=ServiceStatus(raw["status"]),
            downtime_duration=int(raw.get("downtime_duration", 0)),
            maintenance_duration=int(raw.get("maintenance_duration", 0)),
        )


@dataclass(frozen=True)
class ServiceResource:
    id: str
    type: str
    public_name: str
    status: ServiceStatus
    availability: float
    status_history: List[HistoryEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ServiceResource":
        """Build from an `included` entry; raises ValueError on an unknown status or bad shape."""
        try:
            attrs = raw.get("attributes") or {}
            return cls(
                id=str(raw.get("id", "")),
                type=raw.get("type", ""),
                public_name=attrs.get("public_name", ""),
                status=ServiceStatus(attrs.get("status")),
                availability=float(attrs.get("availability", 0.0)),
                status_history=[HistoryEntry.from_dict(h) for h in attrs.get("status_history") or []],
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed status resource: {type(e).__name__}: {e}") from e


@dataclass(frozen=True)
class StatusPayload:
    """The `{data, included}` document served by the status provider.

    `included` entries stay as parsed JSON so the proxy hands the upstream
    document back unchanged.
    """
    data: Dict[str, Any]
    included: List[Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"data": self.data, "included": self.included}


@dataclass(frozen=True)
class JsonOutcome:
    payload: StatusPayload


@dataclass(frozen=True)
class HtmlFallbackOutcome:
    payload: StatusPayload
    source: str  # "next-data" | "json-script"


@dataclass(frozen=True)
class FailureOutcome:
    kind: FailureKind
    details: Dict[str, Any] = field(default_factory=dict)
    message: str = ""


UpstreamOutcome = Union[JsonOutcome, HtmlFallbackOutcome, FailureOutcome]


@dataclass(frozen=True)
class CachedResponse:
    payload: StatusPayload
    fetched_at: float
    ttl_seconds: int
    fallback_source: Optional[str] = None

    def is_fresh(self, now: float) -> bool:
        return now - self.fetched_at < self.ttl_seconds


@dataclass(frozen=True)
class ServiceStatusData:
    service_name: str
    status: ServiceStatus = ServiceStatus.OPERATIONAL
    availability: float = 1.0
    last_updated: Optional[datetime.datetime] = None
    is_loading: bool = True
    error: Optional[str] = None
