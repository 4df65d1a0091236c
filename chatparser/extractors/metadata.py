"""Document-level metadata: conversation title and participant names.

Both extractors scan the whole document with a single regular expression and
fall back to a default rather than failing.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from chatparser import settings
from chatparser.items import Participants

from .entities import decode_entities
from .scanner import ATTRS, strip_tags

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(rf"<title\b{ATTRS}>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)

# "This is a copy of a chat between Claude and Jane. Content may include …"
_PARTICIPANTS_RE = re.compile(
    r"copy\s+of\s+a\s+chat\s+between\s+([^<>]+?)\s+and\s+([^<>]+?)\s*(?:\.(?=\s|<|$)|<|$)",
    re.IGNORECASE,
)


def extract_title(
    html: str,
    suffixes: Iterable[str] = settings.TITLE_SUFFIXES,
    default: str = settings.UNTITLED_TITLE,
) -> str:
    """Return the first ``<title>`` text with any product suffix removed.

    Falls back to *default* when there is no title or nothing is left after
    stripping the suffix.
    """
    m = _TITLE_RE.search(html or "")
    if not m:
        return default

    # Leading space keeps " | Claude" matching a title that is only the suffix.
    title = " " + " ".join(decode_entities(strip_tags(m.group(1))).split())
    for suffix in suffixes:
        if suffix and title.endswith(suffix):
            title = title[: -len(suffix)]
            break
    return title.strip() or default


def extract_participants(
    html: str,
    brand: str = settings.ASSISTANT_BRAND,
) -> Participants | None:
    """Find "a chat between X and Y" and map the names onto roles.

    The name matching *brand* (case-insensitive) is the assistant.  When
    neither name matches, the first name is taken as the assistant.
    """
    m = _PARTICIPANTS_RE.search(html or "")
    if not m:
        return None

    first = _clean_name(m.group(1))
    second = _clean_name(m.group(2))
    if not first or not second:
        logger.debug("Participant sentence matched with an empty name: %r", m.group(0))
        return None

    brand_key = brand.casefold()
    if second.casefold() == brand_key and first.casefold() != brand_key:
        return Participants(user=first, assistant=second)
    return Participants(user=second, assistant=first)


def _clean_name(raw: str) -> str:
    return " ".join(decode_entities(raw).split())
