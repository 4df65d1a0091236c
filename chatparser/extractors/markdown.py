"""Rebuild lightweight Markdown structure from message HTML.

Structural and inline elements are rewritten into Markdown *before* the
remaining tags are stripped, so headings, lists, quotes, emphasis and links
survive as text.  ``<pre>`` regions are passed through untouched; the
segmenter lifts them out as code.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from .entities import decode_entities
from .scanner import ATTRS, parse_attrs, remove_script_style, strip_tags

if TYPE_CHECKING:
    from chatparser.items import Transcript

logger = logging.getLogger(__name__)

_PRE_RE = re.compile(rf"<pre\b{ATTRS}>.*?</pre\s*>", re.IGNORECASE | re.DOTALL)
# Stand-in for a <pre> region while the rest of the fragment is rewritten.
_PRE_MARK = "\ue000"
_PRE_TOKEN_RE = re.compile(rf"{_PRE_MARK}(\d+){_PRE_MARK}")
_WHITESPACE_RE = re.compile(r"\s+")

_BLOCKQUOTE_RE = re.compile(
    rf"<blockquote\b{ATTRS}>((?:(?!<blockquote\b).)*?)</blockquote\s*>",
    re.IGNORECASE | re.DOTALL,
)
_HEADING_RE = re.compile(rf"<h([1-6])\b{ATTRS}>(.*?)</h\1\s*>", re.IGNORECASE | re.DOTALL)
_LIST_START_RE = re.compile(r"<(?:ul|ol)\b", re.IGNORECASE)
_LIST_TOKEN_RE = re.compile(rf"<(/?)(ul|ol|li)\b({ATTRS})>", re.IGNORECASE)
_ITEM_BREAK_RE = re.compile(rf"</?p\b{ATTRS}>|<br\b{ATTRS}>", re.IGNORECASE)

_PARAGRAPH_END_RE = re.compile(r"</p\s*>", re.IGNORECASE)
_LINE_BREAK_RE = re.compile(rf"<br\b{ATTRS}>", re.IGNORECASE)
_DIV_END_RE = re.compile(r"</div\s*>", re.IGNORECASE)

_STRONG_RE = re.compile(rf"<(strong|b)\b{ATTRS}>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL)
_EM_RE = re.compile(rf"<(em|i)\b{ATTRS}>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL)
_INLINE_CODE_RE = re.compile(rf"<code\b{ATTRS}>(.*?)</code\s*>", re.IGNORECASE | re.DOTALL)
_LINK_RE = re.compile(rf"<a\b({ATTRS})>(.*?)</a\s*>", re.IGNORECASE | re.DOTALL)

_HORIZONTAL_WHITESPACE_RE = re.compile(r"[^\S\n]+")
_EXCESSIVE_BLANK_LINES_RE = re.compile(r"\n{3,}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def reconstruct_markdown(fragment: str) -> str:
    """Rewrite structural/inline HTML in *fragment* into Markdown.

    The result still contains any tags that have no Markdown counterpart;
    run it through :func:`~chatparser.extractors.scanner.strip_tags` next.
    """
    if not fragment:
        return ""
    fragment = remove_script_style(fragment)

    pres: list[str] = []

    def protect(m: re.Match[str]) -> str:
        pres.append(m.group(0))
        return f"{_PRE_MARK}{len(pres) - 1}{_PRE_MARK}"

    html = _PRE_RE.sub(protect, fragment)
    # Source formatting whitespace is insignificant outside <pre>; after this
    # the only newlines are the ones the rewrites insert.
    html = _rewrite_structure(_WHITESPACE_RE.sub(" ", html), pres)
    return _restore_pres(html, pres)


def normalize_whitespace(text: str) -> str:
    """Collapse horizontal whitespace, trim lines, cap blank-line runs at one."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_WHITESPACE_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _EXCESSIVE_BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def html_to_text(fragment: str) -> str:
    """Convert an HTML fragment to Markdown-flavoured plain text.

    Order: reconstruct structure, strip tags, decode entities, then normalise
    whitespace.
    """
    if not fragment:
        return ""
    md = reconstruct_markdown(fragment)
    return normalize_whitespace(decode_entities(strip_tags(md)))


def format_markdown_transcript(transcript: Transcript) -> str:
    """Render a complete transcript as a Markdown document."""
    lines: list[str] = []

    lines.append(f"# {transcript.title}")
    lines.append("")

    meta_parts: list[str] = [f"**Source:** {transcript.source_url}"]
    participants = transcript.participants
    if participants:
        meta_parts.append(
            f"**Participants:** {participants.user} and {participants.assistant}",
        )
    meta_parts.append(f"**Messages:** {transcript.message_count}")
    meta_parts.append(f"**Words:** {transcript.word_count}")
    lines.extend(meta_parts)
    lines.append("")

    lines.append("---")
    lines.append("")

    for message in transcript.messages:
        speaker = message.role.capitalize()
        if participants and message.role in ("user", "assistant"):
            speaker = getattr(participants, message.role)
        lines.append(f"## {speaker}")
        lines.append("")
        for segment in message.content:
            if segment.type == "code":
                lines.append(f"```{segment.language or ''}")
                lines.append(segment.content)
                lines.append("```")
            else:
                lines.append(segment.content)
            lines.append("")

    return "\n".join(lines).rstrip() + "\n"


# ---------------------------------------------------------------------------
# Rewrites
# ---------------------------------------------------------------------------

def _restore_pres(html: str, pres: list[str]) -> str:
    """Put protected ``<pre>`` regions back, each set apart as its own block."""

    def restore(m: re.Match[str]) -> str:
        index = int(m.group(1))
        if index >= len(pres):
            return m.group(0)
        return "\n\n" + pres[index] + "\n\n"

    return _PRE_TOKEN_RE.sub(restore, html)


def _rewrite_structure(html: str, pres: list[str]) -> str:
    # Innermost quotes first so nested quotes pick up one "> " per level.
    while True:
        rewritten = _BLOCKQUOTE_RE.sub(lambda m: _render_blockquote(m, pres), html)
        if rewritten == html:
            break
        html = rewritten

    html = _HEADING_RE.sub(_render_heading, html)
    html = _render_lists(html)

    html = _PARAGRAPH_END_RE.sub("\n\n", html)
    html = _LINE_BREAK_RE.sub("\n", html)
    html = _DIV_END_RE.sub("\n", html)

    html = _STRONG_RE.sub(lambda m: _wrap(m.group(2), "**"), html)
    html = _EM_RE.sub(lambda m: _wrap(m.group(2), "*"), html)
    html = _INLINE_CODE_RE.sub(lambda m: _wrap(m.group(1), "`"), html)
    return _LINK_RE.sub(_render_link, html)


def _wrap(inner: str, marker: str) -> str:
    if not inner.strip():
        return inner
    return f"{marker}{inner.strip()}{marker}"


def _render_heading(m: re.Match[str]) -> str:
    level = int(m.group(1))
    return f"\n\n{'#' * level} {m.group(2).strip()}\n\n"


def _render_blockquote(m: re.Match[str], pres: list[str]) -> str:
    # Quoted code is quoted line by line like the prose around it.
    inner = strip_tags(_restore_pres(_rewrite_structure(m.group(1), pres), pres))
    lines: list[str] = []
    for raw in inner.split("\n"):
        line = raw.strip()
        if not line and (not lines or not lines[-1]):
            continue
        lines.append(line)
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        return ""
    body = "\n".join(f"> {line}" if line else ">" for line in lines)
    return f"\n\n{body}\n\n"


def _render_link(m: re.Match[str]) -> str:
    text = m.group(2).strip()
    href = parse_attrs(m.group(1)).get("href", "").strip()
    if not href or not text:
        return text
    return f"[{text}]({href})"


def _render_lists(html: str) -> str:
    """Render top-level ``ul``/``ol`` lists as Markdown item lines.

    Lists nested inside an item are flattened into that item's text.
    """
    if not _LIST_START_RE.search(html):
        return html

    out: list[str] = []
    stack: list[str] = []
    ordered = False
    counter = 0
    item: list[str] | None = None

    def flush() -> None:
        nonlocal item
        if item is None:
            return
        text = " ".join(_ITEM_BREAK_RE.sub(" ", "".join(item)).split())
        if text:
            marker = f"{counter}." if ordered else "-"
            out.append(f"{marker} {text}\n")
        item = None

    pos = 0
    for m in _LIST_TOKEN_RE.finditer(html):
        chunk = html[pos:m.start()]
        pos = m.end()
        if item is not None:
            item.append(chunk)
        elif not stack or chunk.strip():
            out.append(chunk)

        closing = bool(m.group(1))
        name = m.group(2).lower()

        if name in ("ul", "ol"):
            if closing:
                if not stack:
                    continue
                stack.pop()
                if not stack:
                    flush()
                    out.append("\n")
                elif item is not None:
                    item.append(" ")
            else:
                if not stack:
                    out.append("\n\n")
                    ordered = name == "ol"
                    counter = _list_start(m.group(3)) - 1 if ordered else 0
                elif item is not None:
                    item.append(" ")
                stack.append(name)
            continue

        # <li> / </li>
        if not stack:
            continue
        if len(stack) == 1:
            flush()
            if not closing:
                counter += 1
                item = []
        elif item is not None:
            item.append(" ")

    tail = html[pos:]
    if item is not None:
        item.append(tail)
        flush()
    else:
        out.append(tail)
    return "".join(out)


def _list_start(attrs: str) -> int:
    start = parse_attrs(attrs).get("start", "")
    try:
        return int(start)
    except ValueError:
        return 1
