"""Extraction sub-package: regex/scanner based, no DOM, no network."""

from .entities import decode_entities
from .markdown import format_markdown_transcript, html_to_text, reconstruct_markdown
from .messages import extract_messages, extract_raw_blocks
from .metadata import extract_participants, extract_title
from .scanner import strip_tags
from .segments import segment_content

__all__ = [
    "decode_entities",
    "extract_messages",
    "extract_participants",
    "extract_raw_blocks",
    "extract_title",
    "format_markdown_transcript",
    "html_to_text",
    "reconstruct_markdown",
    "segment_content",
    "strip_tags",
]
