import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "res" / "proxy.yaml"

# yaml key -> Settings field
_YAML_KEYS = {
    "upstream_url": "UPSTREAM_URL",
    "user_agent": "UA",
    "cache_ttl_s": "CACHE_TTL_S",
    "service_name": "SERVICE_NAME",
    "service_version": "SERVICE_VERSION",
    "body_preview_chars": "BODY_PREVIEW_CHARS",
    "max_search_depth": "MAX_SEARCH_DEPTH",
    "log_level": "LOG_LEVEL",
}
_YAML_TIMEOUT_KEYS = {
    "connect_s": "CONNECT_TIMEOUT_S",
    "read_s": "READ_TIMEOUT_S",
    "total_s": "TOTAL_TIMEOUT_S",
}


@dataclass(frozen=True)
class Settings:
    UPSTREAM_URL: str = "https://status.zama.ai/index.json"
    UA: str = "Zama-Status-Proxy/1.0"
    CACHE_TTL_S: int = 30
    CONNECT_TIMEOUT_S: float = 5.0
    READ_TIMEOUT_S: float = 8.0
    TOTAL_TIMEOUT_S: float = 10.0
    SERVICE_NAME: str = "zama-status-proxy"
    SERVICE_VERSION: str = "1.0.0"
    BODY_PREVIEW_CHARS: int = 2000
    MAX_SEARCH_DEPTH: int = 50
    LOG_LEVEL: str = "INFO"


def _coerce(name: str, raw: Any, kind: type) -> Any:
    try:
        return kind(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be {kind.__name__}, got {raw!r}")


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Flatten the YAML file into Settings field names."""
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    out: Dict[str, Any] = {}
    for key, field_name in _YAML_KEYS.items():
        if key in data:
            out[field_name] = data[key]
    timeouts = data.get("timeouts") or {}
    for key, field_name in _YAML_TIMEOUT_KEYS.items():
        if key in timeouts:
            out[field_name] = timeouts[key]
    return out


def load_settings(path: Optional[str] = None, env: Optional[Dict[str, str]] = None) -> Settings:
    """Defaults, then the YAML file, then SP_* environment variables."""
    env = os.environ if env is None else env
    cfg_path = Path(path or env.get("SP_CONFIG_PATH") or DEFAULT_CONFIG_PATH)

    values: Dict[str, Any] = {}
    if cfg_path.exists():
        values.update(_read_yaml(cfg_path))
    for f in fields(Settings):
        raw = env.get(f"SP_{f.name}")
        if raw is not None and raw != "":
            values[f.name] = raw

    types = {f.name: type(f.default) for f in fields(Settings)}
    coerced = {name: _coerce(name, raw, types[name]) for name, raw in values.items()}
    settings = replace(Settings(), **coerced)

    if not settings.UPSTREAM_URL.strip():
        raise ConfigError("UPSTREAM_URL must not be empty")
    if settings.CACHE_TTL_S <= 0:
        raise ConfigError("CACHE_TTL_S must be positive")
    if min(settings.CONNECT_TIMEOUT_S, settings.READ_TIMEOUT_S, settings.TOTAL_TIMEOUT_S) <= 0:
        raise ConfigError("timeouts must be positive")
    return settings
