"""Recover the status payload from an HTML page.

The provider sometimes answers the JSON URL with its rendered status page.
That page still carries the API document, buried at an unpredictable key path
inside a framework bootstrap blob, so the payload is found by shape: the first
object holding an object-valued `data` and a list-valued `included`.
"""
import json
import logging
import re
from typing import Any, Iterator, Optional, Tuple

from .entities import decode_html_entities
from .models import StatusPayload

logger = logging.getLogger(__name__)

SOURCE_NEXT_DATA = "next-data"
SOURCE_JSON_SCRIPT = "json-script"
DEFAULT_MAX_DEPTH = 50

NEXT_DATA_MARKER = "__NEXT_DATA__"
_NEXT_DATA_RE = re.compile(
    r"<script\b[^>]*\bid\s*=\s*[\"']__NEXT_DATA__[\"'][^>]*>(.*?)</script\s*>",
    flags=re.IGNORECASE | re.DOTALL,
)
_SCRIPT_RE = re.compile(r"<script\b([^>]*)>(.*?)</script\s*>", flags=re.IGNORECASE | re.DOTALL)
_JSON_TYPE_RE = re.compile(
    r"\btype\s*=\s*[\"']application/(?:[\w.\-]+\+)?json[\"']", flags=re.IGNORECASE
)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def loads_strict(text: str) -> Any:
    """json.loads without the NaN / Infinity extensions."""
    return json.loads(text, parse_constant=_reject_constant)


def find_payload(value: Any, max_depth: int = DEFAULT_MAX_DEPTH, _depth: int = 0) -> Optional[StatusPayload]:
    """Depth-first search for the first `{data, included}` shaped object."""
    if _depth > max_depth:
        return None
    if isinstance(value, dict):
        data, included = value.get("data"), value.get("included")
        if isinstance(data, dict) and isinstance(included, list):
            return StatusPayload(data=data, included=included)
        children = value.values()
    elif isinstance(value, list):
        children = value
    else:
        return None
    for child in children:
        found = find_payload(child, max_depth, _depth + 1)
        if found is not None:
            return found
    return None


def _parse_fragment(raw: str, where: str) -> Tuple[bool, Any]:
    try:
        return True, loads_strict(decode_html_entities(raw))
    except (ValueError, RecursionError) as e:
        logger.debug(f"Skipping unparseable {where} script: {e}")
        return False, None


def _json_scripts(html: str) -> Iterator[str]:
    for m in _SCRIPT_RE.finditer(html):
        if _JSON_TYPE_RE.search(m.group(1)):
            yield m.group(2)


def extract_with_source(html: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[Tuple[StatusPayload, str]]:
    """Return the payload and which stage found it, or None."""
    m = _NEXT_DATA_RE.search(html)
    if m and m.group(1).strip():
        ok, tree = _parse_fragment(m.group(1), NEXT_DATA_MARKER)
        if ok:
            found = find_payload(tree, max_depth)
            if found is not None:
                return found, SOURCE_NEXT_DATA

    for body in _json_scripts(html):
        if not body.strip():
            continue
        ok, tree = _parse_fragment(body, "application/json")
        if not ok:
            continue
        found = find_payload(tree, max_depth)
        if found is not None:
            return found, SOURCE_JSON_SCRIPT
    return None


def extract_payload(html: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[StatusPayload]:
    hit = extract_with_source(html, max_depth)
    return hit[0] if hit else None


def has_known_marker(html: str) -> bool:
    return NEXT_DATA_MARKER in html
