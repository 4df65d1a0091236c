"""HTML entity decoding for the closed set of entities share pages emit."""

from __future__ import annotations

import re

_ENTITIES: dict[str, str] = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&apos;": "'",
    "&nbsp;": " ",
}

_ENTITY_RE = re.compile(r"&(?:amp|lt|gt|quot|#39|apos|nbsp);")


def decode_entities(text: str) -> str:
    """Replace the supported named/numeric entities in *text* in one pass.

    Entities outside the supported set are left as-is.
    """
    if not text or "&" not in text:
        return text
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], text)
