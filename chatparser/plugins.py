"""chatparser.plugins - registry of parsers for additional share-page sources.

Usage::

    from chatparser import register_parser

    class MyParser:
        source = "generic"
        def can_parse(self, url): return url.startswith("https://chat.example.com/s/")
        def parse(self, html, url): ...

    register_parser(MyParser())

Registered parsers are consulted in registration order before the built-in
:class:`~chatparser.parser.SharePageParser`.  Parsers follow a
``runtime_checkable`` ``Protocol`` so ``isinstance()`` works without
inheritance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from chatparser.parser import SharePageParser

if TYPE_CHECKING:
    from chatparser.items import Transcript


class UnsupportedURLError(ValueError):
    """Raised by :func:`find_parser` in strict mode when no parser claims a URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Unsupported URL: {url!r}")
        self.url = url


@runtime_checkable
class ChatParserPlugin(Protocol):
    """A parser for one share-page source."""

    source: Any

    def can_parse(self, url: str) -> bool:
        """Return True if this parser understands pages at *url*."""
        ...

    def parse(self, html: str, url: str) -> Transcript:
        """Return the transcript for *html*; must not raise on bad markup."""
        ...


# ---------------------------------------------------------------------------
# Module-level registry
# ---------------------------------------------------------------------------

_registry: list[ChatParserPlugin] = []

_builtin: ChatParserPlugin = SharePageParser()


def register_parser(plugin: ChatParserPlugin) -> None:
    """Register a custom :class:`ChatParserPlugin`."""
    if not isinstance(plugin, ChatParserPlugin):
        raise TypeError(f"{plugin!r} does not implement ChatParserPlugin")
    _registry.append(plugin)


def get_parsers() -> list[ChatParserPlugin]:
    """Return registered parsers followed by the built-in parser."""
    return [*_registry, _builtin]


def find_parser(url: str, *, strict: bool = False) -> ChatParserPlugin | None:
    """Return the first parser whose ``can_parse(url)`` is true.

    Returns None when no parser matches, or raises
    :class:`UnsupportedURLError` if *strict* is set.
    """
    for plugin in get_parsers():
        if plugin.can_parse(url):
            return plugin
    if strict:
        raise UnsupportedURLError(url)
    return None


def clear_plugins() -> None:
    """Remove all registered parsers. Primarily for use in tests."""
    _registry.clear()
