"""chatparser.parser - share-page parser bound to an extraction profile.

Usage::

    from chatparser.parser import SharePageParser

    parser = SharePageParser()
    if parser.can_parse(url):
        transcript = parser.parse(html, url)

    # Site-specific markers from a YAML profile
    from chatparser.profiles import load_profile
    parser = SharePageParser(profile=load_profile("profiles.yaml", url))
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from chatparser.profiles import DEFAULT_PROFILE, ExtractionProfile
from chatparser.query import extract, extract_file

if TYPE_CHECKING:
    from chatparser.items import ChatSource, Transcript


class SharePageParser:
    """Parser for publicly shared conversation pages.

    Args:
        profile: Hosts, markers and title rules.  Defaults to
                 :data:`~chatparser.profiles.DEFAULT_PROFILE`.
    """

    def __init__(self, profile: ExtractionProfile | None = None) -> None:
        self.profile = profile or DEFAULT_PROFILE

    @property
    def source(self) -> ChatSource:
        return self.profile.source

    def can_parse(self, url: str) -> bool:
        """Return True for ``https://<host>/share/<id>`` URLs on a profile host."""
        try:
            parsed = urlparse(url)
        except (TypeError, ValueError):
            return False
        host = (parsed.hostname or "").lower()
        prefix = self.profile.share_path_prefix
        return (
            parsed.scheme in ("http", "https")
            and host in {h.lower() for h in self.profile.hosts}
            and parsed.path.startswith(prefix)
            and len(parsed.path) > len(prefix)
        )

    def parse(self, html: str, url: str) -> Transcript:
        """Extract a transcript from pre-fetched *html*.  Never raises."""
        return extract(html, url, profile=self.profile)

    def parse_file(self, path: str | Path, url: str) -> Transcript:
        """Extract a transcript from a saved page.

        Raises:
            OSError: If *path* cannot be read.
        """
        return extract_file(path, url, profile=self.profile)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self.source!r}, hosts={self.profile.hosts!r})"
