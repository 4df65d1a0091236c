"""Split one message's HTML into typed content segments (prose and code)."""

from __future__ import annotations

import logging
import re

from chatparser.items import ContentSegment

from .entities import decode_entities
from .markdown import html_to_text
from .scanner import ATTRS, get_class, strip_tags

logger = logging.getLogger(__name__)

_CODE_BLOCK_RE = re.compile(
    rf"<pre\b{ATTRS}>\s*<code\b({ATTRS})>(.*?)</code\s*>\s*</pre\s*>",
    re.IGNORECASE | re.DOTALL,
)
_LANGUAGE_RE = re.compile(r"(?:^|\s)language-([\w#+.-]+)")

# What a lifted code block leaves behind: an empty block, so the prose on
# either side stays separated.
_LIFTED_CODE = "<pre></pre>"


def extract_code_blocks(fragment: str) -> list[ContentSegment]:
    """Return a ``code`` segment for every ``<pre><code>`` region, in order.

    Code text keeps its indentation; blocks with no visible code are skipped.
    """
    blocks: list[ContentSegment] = []
    for m in _CODE_BLOCK_RE.finditer(fragment):
        segment = _code_segment(m)
        if segment is not None:
            blocks.append(segment)
    return blocks


def segment_content(fragment: str) -> list[ContentSegment]:
    """Segment *fragment* into one leading ``text`` segment plus ``code`` segments.

    Code blocks are cut out of the HTML where they occur, so prose that
    happens to repeat a snippet keeps it.  Always returns at least one
    segment.
    """
    code_segments: list[ContentSegment] = []

    def lift(m: re.Match[str]) -> str:
        segment = _code_segment(m)
        if segment is not None:
            code_segments.append(segment)
        return _LIFTED_CODE

    prose = html_to_text(_CODE_BLOCK_RE.sub(lift, fragment))
    if code_segments:
        logger.debug("Lifted %d code block(s) out of message text", len(code_segments))

    segments: list[ContentSegment] = []
    if prose or not code_segments:
        segments.append(ContentSegment(type="text", content=prose))
    segments.extend(code_segments)
    return segments


def _code_segment(m: re.Match[str]) -> ContentSegment | None:
    code = decode_entities(strip_tags(m.group(2))).strip("\n")
    if not code.strip():
        return None
    return ContentSegment(type="code", content=code, language=_code_language(m.group(1)))


def _code_language(attrs: str) -> str | None:
    m = _LANGUAGE_RE.search(get_class(attrs))
    return m.group(1) if m else None
