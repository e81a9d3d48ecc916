import re
from typing import Dict

# Only this closed set is reversed; anything else passes through untouched.
HTML_ENTITIES: Dict[str, str] = {
    "&quot;": '"',
    "&#34;": '"',
    "&amp;": "&",
    "&#38;": "&",
    "&lt;": "<",
    "&#60;": "<",
    "&gt;": ">",
    "&#62;": ">",
    "&#39;": "'",
    "&#x27;": "'",
    "&#x2F;": "/",
}

_ENTITY_RE = re.compile("|".join(re.escape(e) for e in HTML_ENTITIES))


def decode_html_entities(text: str) -> str:
    """Single left-to-right pass, so `&amp;quot;` decodes to `&quot;`, not `"`."""
    return _ENTITY_RE.sub(lambda m: HTML_ENTITIES[m.group(0)], text)