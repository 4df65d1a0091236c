"""Split a share page into ordered per-message HTML blocks.

Two document shapes are supported, tried in order:

``render_count``
    Server-rendered pages: every turn starts with a ``<div>`` carrying the
    render-count attribute.  The document is cut at each such div; a block
    is a user turn if it contains the user marker class.

``class_markers``
    Client-rendered pages without render-count markers: user and assistant
    elements are found independently by class, then merged by document
    offset to recover conversational order.

The first strategy that yields any block wins.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import NamedTuple

from chatparser.items import Message, MessageRole
from chatparser.profiles import DEFAULT_PROFILE, ExtractionProfile

from .markdown import html_to_text
from .scanner import OPEN_TAG_RE, find_element_end, get_class
from .segments import segment_content

logger = logging.getLogger(__name__)

_BODY_END_RE = re.compile(r"</body\s*>", re.IGNORECASE)


class RawBlock(NamedTuple):
    """One message's HTML before segmentation."""

    offset: int
    role: MessageRole
    html: str


# ---------------------------------------------------------------------------
# Strategy A: render-count markers
# ---------------------------------------------------------------------------

def _render_count_re(attr: str) -> re.Pattern[str]:
    # Lazily walk the attribute section so a match can only begin on a real
    # attribute name, never inside a quoted value.
    return re.compile(
        rf"""<div\b(?:[^>"']|"[^"]*"|'[^']*')*?\s{re.escape(attr)}\s*=""",
        re.IGNORECASE,
    )


def blocks_by_render_count(html: str, profile: ExtractionProfile) -> list[RawBlock]:
    starts = [m.start() for m in _render_count_re(profile.render_count_attr).finditer(html)]
    if not starts:
        return []

    body_end = _BODY_END_RE.search(html, starts[-1])
    stop = body_end.start() if body_end else len(html)
    bounds = [*starts[1:], stop]

    blocks: list[RawBlock] = []
    for start, end in zip(starts, bounds):
        fragment = html[start:end]
        if not html_to_text(fragment):
            continue
        role: MessageRole = "user" if profile.user_marker in fragment else "assistant"
        blocks.append(RawBlock(offset=start, role=role, html=fragment))
    return blocks


# ---------------------------------------------------------------------------
# Strategy B: class markers merged by offset
# ---------------------------------------------------------------------------

def _elements_with_class(html: str, marker: str) -> list[tuple[int, str]]:
    """Return ``(offset, inner_html)`` for outermost elements whose class contains *marker*."""
    if not marker or marker not in html:
        return []

    found: list[tuple[int, str]] = []
    covered_until = -1
    for m in OPEN_TAG_RE.finditer(html):
        if m.start() < covered_until:
            continue
        if marker not in get_class(m.group(2)):
            continue
        inner_end, outer_end = find_element_end(html, m.group(1), m.end())
        found.append((m.start(), html[m.end():inner_end]))
        covered_until = outer_end
    return found


def blocks_by_class(html: str, profile: ExtractionProfile) -> list[RawBlock]:
    blocks: list[RawBlock] = []

    for offset, inner in _elements_with_class(html, profile.user_marker):
        if html_to_text(inner):
            blocks.append(RawBlock(offset=offset, role="user", html=inner))

    for offset, inner in _elements_with_class(html, profile.assistant_marker):
        if len(html_to_text(inner)) >= max(profile.min_assistant_chars, 1):
            blocks.append(RawBlock(offset=offset, role="assistant", html=inner))

    # The two passes each return document order; sort to interleave them.
    blocks.sort(key=lambda b: b.offset)
    return blocks


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

Strategy = Callable[[str, ExtractionProfile], list[RawBlock]]

STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("render_count", blocks_by_render_count),
    ("class_markers", blocks_by_class),
)


def extract_raw_blocks(
    html: str,
    profile: ExtractionProfile = DEFAULT_PROFILE,
) -> tuple[str | None, list[RawBlock]]:
    """Run the strategies in order; return the first non-empty result.

    Returns ``(strategy_name, blocks)``, or ``(None, [])`` when nothing
    matched.
    """
    if not html:
        return None, []
    for name, strategy in STRATEGIES:
        blocks = strategy(html, profile)
        if blocks:
            logger.debug("Strategy %s matched %d block(s)", name, len(blocks))
            return name, blocks
        logger.debug("Strategy %s matched nothing", name)
    return None, []


def extract_messages(
    html: str,
    profile: ExtractionProfile = DEFAULT_PROFILE,
) -> list[Message]:
    """Extract ordered :class:`~chatparser.items.Message` objects from *html*."""
    _, blocks = extract_raw_blocks(html, profile)
    return [
        Message(id=f"msg-{index}", index=index, role=block.role, content=segment_content(block.html))
        for index, block in enumerate(blocks)
    ]
