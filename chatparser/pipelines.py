"""Output writers: transcript files on disk and search-index records.

``TranscriptWriter`` writes ``<slug>.json`` and ``<slug>.md`` per transcript
and an ``index.json`` summary on close.  ``message_index_records`` flattens a
transcript into one record per message for a full-text index.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from chatparser.extractors.markdown import format_markdown_transcript
from chatparser.items import Transcript

logger = logging.getLogger(__name__)

_MULTI_DASH_RE = re.compile(r"-{2,}")
_NON_SLUG_RE = re.compile(r"[^\w\-]")


def slug_from_url(url: str, max_length: int = 100) -> str:
    """Generate a filesystem-safe slug from *url*."""
    parsed = urlparse(url)
    path = parsed.path.strip("/")
    if not path:
        path = parsed.netloc.replace(".", "-")
    slug = _NON_SLUG_RE.sub("-", path)
    slug = _MULTI_DASH_RE.sub("-", slug).strip("-")
    return (slug[:max_length]).strip("-") or "index"


def _unique_slug(slug: str, seen: set[str]) -> str:
    """Append -2, -3, … until *slug* is not in *seen*."""
    candidate = slug
    counter = 2
    while candidate in seen:
        candidate = f"{slug}-{counter}"
        counter += 1
    seen.add(candidate)
    return candidate


def _write_json(path: Path, data: dict | list) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


# ---------------------------------------------------------------------------
# Transcript writer
# ---------------------------------------------------------------------------

class TranscriptWriter:
    """Write each transcript as <slug>.json and <slug>.md under *out_dir*.

    A transcript whose id was already written by this writer is skipped, so
    importing the same URL twice produces one set of files.
    """

    def __init__(self, out_dir: str | Path) -> None:
        self.out_dir = Path(out_dir)
        self._seen_ids: set[str] = set()
        self._seen_slugs: set[str] = set()
        self._entries: list[dict[str, Any]] = []

    def write(self, transcript: Transcript) -> list[Path]:
        """Write *transcript*; return the paths written (empty for a duplicate)."""
        if transcript.id in self._seen_ids:
            logger.info("Skipping duplicate transcript %s (%s)", transcript.id, transcript.source_url)
            return []
        self._seen_ids.add(transcript.id)

        slug = _unique_slug(slug_from_url(transcript.source_url), self._seen_slugs)

        json_path = self.out_dir / f"{slug}.json"
        _write_json(json_path, transcript.to_json_dict())

        md_path = self.out_dir / f"{slug}.md"
        _write_text(md_path, format_markdown_transcript(transcript))

        self._entries.append(
            {
                "slug": slug,
                "id": transcript.id,
                "sourceUrl": transcript.source_url,
                "title": transcript.title,
                "messageCount": transcript.message_count,
                "wordCount": transcript.word_count,
                "fetchedAt": transcript.fetched_at.isoformat(),
            },
        )
        logger.info("Wrote transcript [%d]: %s → %s", len(self._entries), transcript.source_url, slug)
        return [json_path, md_path]

    def close(self) -> Path:
        """Write ``index.json`` listing every transcript written; return its path."""
        index_path = self.out_dir / "index.json"
        _write_json(index_path, self._entries)
        logger.info("TranscriptWriter: wrote %d entries to %s", len(self._entries), index_path)
        return index_path

    def __enter__(self) -> TranscriptWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# Search-index records
# ---------------------------------------------------------------------------

def message_index_records(transcript: Transcript) -> list[dict[str, Any]]:
    """Return one ``{chat_id, message_index, role, content}`` record per message.

    Segment payloads are joined with newlines; messages with no text are
    left out.
    """
    records: list[dict[str, Any]] = []
    for message in transcript.messages:
        content = message.text
        if not content.strip():
            continue
        records.append(
            {
                "chat_id": transcript.id,
                "message_index": message.index,
                "role": message.role,
                "content": content,
            },
        )
    return records


def to_jsonl(transcripts: Iterable[Transcript], path: str | Path) -> int:
    """Write the index records of all *transcripts* to a JSON Lines file.

    Returns:
        Total number of records written.
    """
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    total = 0
    with out_path.open("w", encoding="utf-8") as fh:
        for transcript in transcripts:
            for record in message_index_records(transcript):
                fh.write(json.dumps(record, ensure_ascii=False) + "\n")
                total += 1

    return total
