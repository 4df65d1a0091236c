"""chatparser.query - turn a share page's HTML into a :class:`Transcript`.

Pure function, no network access::

    from chatparser.query import extract

    transcript = extract(html, "https://claude.ai/share/abc123")
    print(transcript.title, transcript.message_count)

    # camelCase JSON for the storage layer
    data = transcript.to_json_dict()

``extract`` never raises on bad input: each step (title, participants,
messages) is isolated and degrades to its empty value with a warning.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from chatparser.extractors.messages import extract_messages
from chatparser.extractors.metadata import extract_participants, extract_title
from chatparser.items import Message, Participants, Transcript
from chatparser.profiles import DEFAULT_PROFILE, ExtractionProfile

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits: list[str] = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id(url: str, source: str = DEFAULT_PROFILE.source) -> str:
    """Return a deterministic id for *url*, e.g. ``claude-web-1x3k9z``.

    A 32-bit signed rolling hash (``h = h * 31 + c``) over the UTF-16 code
    units of *url*; the absolute value is rendered in base 36.  Ids produced
    elsewhere with the same scheme match exactly.
    """
    # Lone surrogates hash as ordinary code units.
    data = (url or "").encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return f"{source}-{_to_base36(abs(h))}"


def count_words(messages: Iterable[Message]) -> int:
    """Count whitespace-separated tokens across every segment of *messages*."""
    return sum(len(segment.content.split()) for message in messages for segment in message.content)


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def extract(
    html: str,
    url: str,
    *,
    profile: ExtractionProfile | None = None,
) -> Transcript:
    """Extract a :class:`~chatparser.items.Transcript` from *html*.

    Args:
        html:    Raw HTML of the share page (any string, possibly malformed).
        url:     Original share URL; echoed verbatim and used for the id.
        profile: Marker names and title rules.  Defaults to
                 :data:`~chatparser.profiles.DEFAULT_PROFILE`.

    Returns:
        A fully-formed transcript.  A page with no recognisable structure
        yields zero messages and the sentinel title, not an error.
    """
    profile = profile or DEFAULT_PROFILE
    html = html if isinstance(html, str) else ""
    url = url if isinstance(url, str) else ""
    fetched_at = datetime.now(UTC)

    try:
        title = extract_title(html, profile.title_suffixes, profile.untitled_title)
    except Exception as exc:
        logger.warning("title extraction failed for %s: %s", url, exc)
        title = profile.untitled_title

    participants: Participants | None
    try:
        participants = extract_participants(html, profile.assistant_brand)
    except Exception as exc:
        logger.warning("participant extraction failed for %s: %s", url, exc)
        participants = None

    messages: list[Message]
    try:
        messages = extract_messages(html, profile)
    except Exception as exc:
        logger.warning("message extraction failed for %s: %s", url, exc)
        messages = []

    if not messages:
        logger.info("No messages found in %s (%d chars of HTML)", url or "<no url>", len(html))

    return Transcript(
        id=generate_id(url, profile.source),
        source=profile.source,
        source_url=url,
        title=title,
        fetched_at=fetched_at,
        message_count=len(messages),
        word_count=count_words(messages),
        messages=messages,
        participants=participants,
    )


def parse(html: str, url: str) -> Transcript:
    """Parse *html* with whichever registered parser claims *url*.

    Falls back to the built-in share-page parser (default profile) when no
    parser claims the URL, so this never raises either.
    """
    from chatparser.plugins import find_parser

    plugin = find_parser(url)
    if plugin is None:
        logger.debug("No parser claims %s; using default profile", url)
        return extract(html, url)
    return plugin.parse(html, url)


def extract_file(
    path: str | Path,
    url: str,
    *,
    profile: ExtractionProfile | None = None,
) -> Transcript:
    """Read a saved share page from *path* and extract it.

    Raises:
        OSError: If *path* cannot be read.
    """
    html = Path(path).read_text(encoding="utf-8", errors="replace")
    return extract(html, url, profile=profile)
