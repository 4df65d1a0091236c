"""Quote-aware tag scanning primitives.

Share pages carry utility classes such as ``[&_pre>div]:border`` whose
attribute values contain ``>``.  A naive ``<[^>]+>`` would end the tag at that
character and leak the rest of the attribute into the text, so everything in
this module treats quoted attribute values as opaque.

Usage::

    from chatparser.extractors.scanner import strip_tags

    strip_tags('<div class="[&_x>y]:c">hi</div>')   # -> "hi"
"""

from __future__ import annotations

import re

# Attribute section of an opening tag: any run of unquoted characters other
# than ">" and complete quoted strings.  The alternatives start with disjoint
# characters so the pattern never backtracks pathologically.
ATTRS = r"""(?:[^>"']|"[^"]*"|'[^']*')*"""

OPEN_TAG_RE = re.compile(rf"<([a-zA-Z][\w:-]*)({ATTRS})>")

_SCRIPT_STYLE_RE = re.compile(
    rf"<(script|style)\b{ATTRS}>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)

_ATTR_RE = re.compile(
    r"""([^\s=/>"']+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+)))?""",
)

_QUOTES = "\"'"


def remove_script_style(html: str) -> str:
    """Drop ``<script>`` and ``<style>`` elements together with their payload."""
    return _SCRIPT_STYLE_RE.sub("", html)


def strip_tags(fragment: str) -> str:
    """Remove every ``<...>`` construct from *fragment*.

    A ``>`` inside a quoted attribute value never closes the tag.  An
    unterminated tag swallows the remainder of the fragment.
    """
    if not fragment:
        return ""
    text = remove_script_style(fragment)

    out: list[str] = []
    pos = 0
    end = len(text)
    while pos < end:
        lt = text.find("<", pos)
        if lt == -1:
            out.append(text[pos:])
            break
        out.append(text[pos:lt])
        pos = _skip_tag(text, lt + 1)
    return "".join(out)


def _skip_tag(text: str, pos: int) -> int:
    """Return the index just past the tag whose body starts at *pos*."""
    quote: str | None = None
    end = len(text)
    while pos < end:
        ch = text[pos]
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == ">":
            return pos + 1
        pos += 1
    return end


def parse_attrs(attrs: str) -> dict[str, str]:
    """Parse an attribute string into a ``{name: value}`` dict.

    Names are lower-cased; the first occurrence of a name wins.  Valueless
    attributes map to an empty string.
    """
    result: dict[str, str] = {}
    for m in _ATTR_RE.finditer(attrs):
        name = m.group(1).lower()
        if name in result:
            continue
        value = m.group(2)
        if value is None:
            value = m.group(3)
        if value is None:
            value = m.group(4) or ""
        result[name] = value
    return result


def get_attr(attrs: str, name: str) -> str | None:
    return parse_attrs(attrs).get(name.lower())


def get_class(attrs: str) -> str:
    return parse_attrs(attrs).get("class", "")


def find_element_end(html: str, tag: str, pos: int) -> tuple[int, int]:
    """Find the close tag matching an element whose opening tag ends at *pos*.

    Counts nested open/close tags with the same name.  Returns
    ``(inner_end, outer_end)``: the offset where the element's content stops
    and the offset just past its closing tag.  An element that is never
    closed extends to the end of *html*.
    """
    pattern = re.compile(rf"<(/?){re.escape(tag)}\b{ATTRS}>", re.IGNORECASE)
    depth = 1
    for m in pattern.finditer(html, pos):
        if m.group(1):
            depth -= 1
            if depth == 0:
                return m.start(), m.end()
        elif not m.group(0).endswith("/>"):
            depth += 1
    return len(html), len(html)
