"""chatparser - turn shared conversation pages into structured transcripts.

Quick usage::

    from chatparser import extract

    transcript = extract(html, "https://claude.ai/share/abc123")
    print(transcript.title)
    for message in transcript.messages:
        print(message.role, message.content[0].content)

Routing by URL through registered parsers::

    from chatparser import parse, register_parser

    register_parser(MyParser())
    transcript = parse(html, url)

Search-index export::

    from chatparser import message_index_records, to_jsonl

    to_jsonl([transcript], "/tmp/messages.jsonl")
"""

from chatparser.items import ContentSegment, Message, Participants, Transcript
from chatparser.parser import SharePageParser
from chatparser.pipelines import TranscriptWriter, message_index_records, to_jsonl
from chatparser.plugins import UnsupportedURLError, find_parser, register_parser
from chatparser.profiles import DEFAULT_PROFILE, ExtractionProfile, ProfileError, load_profile
from chatparser.query import extract, extract_file, generate_id, parse

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_PROFILE",
    "ContentSegment",
    "ExtractionProfile",
    "Message",
    "Participants",
    "ProfileError",
    "SharePageParser",
    "Transcript",
    "TranscriptWriter",
    "UnsupportedURLError",
    "extract",
    "extract_file",
    "find_parser",
    "generate_id",
    "load_profile",
    "message_index_records",
    "parse",
    "register_parser",
    "to_jsonl",
]
