"""Tests for chatparser.query - HTML → Transcript, no network."""

from __future__ import annotations

import re

import pytest
from pydantic import ValidationError

from chatparser.items import Transcript
from chatparser.plugins import register_parser
from chatparser.profiles import ExtractionProfile
from chatparser.query import count_words, extract, extract_file, generate_id, parse

_ID_RE = re.compile(r"^claude-web-[0-9a-z]+$")


def _block(text: str, user: bool) -> str:
    cls = "font-large !font-user-message" if user else "font-claude-message"
    return f'<div data-test-render-count="2"><div class="{cls}"><p>{text}</p></div></div>'


# ---------------------------------------------------------------------------
# generate_id
# ---------------------------------------------------------------------------

class TestGenerateId:
    def test_known_values(self):
        assert generate_id("a") == "claude-web-2p"
        assert generate_id("ab") == "claude-web-2e9"

    def test_empty_url(self):
        assert generate_id("") == "claude-web-0"

    def test_format(self, share_url):
        assert _ID_RE.match(generate_id(share_url))

    def test_custom_source_prefix(self):
        assert generate_id("a", source="generic") == "generic-2p"

    def test_distinct_urls_distinct_ids(self):
        assert generate_id("https://claude.ai/share/a") != generate_id("https://claude.ai/share/b")

    def test_long_url_stays_in_32_bits(self):
        url = "https://claude.ai/share/" + "z" * 500
        digits = generate_id(url).removeprefix("claude-web-")
        assert int(digits, 36) <= 2**31

    def test_non_ascii_url(self):
        assert _ID_RE.match(generate_id("https://claude.ai/share/日本語"))

    def test_lone_surrogate_is_a_code_unit(self):
        assert generate_id("\ud800") == "claude-web-16o0"
        url = "https://claude.ai/share/\ud800"
        assert generate_id(url) == generate_id(url)
        assert _ID_RE.match(generate_id(url))


# ---------------------------------------------------------------------------
# extract()
# ---------------------------------------------------------------------------

class TestExtract:
    def test_returns_transcript(self, render_count_html, share_url):
        assert isinstance(extract(render_count_html, share_url), Transcript)

    def test_fixture_fields(self, render_count_html, share_url):
        result = extract(render_count_html, share_url)
        assert result.title == "Sorting lists in Python"
        assert result.source == "claude-web"
        assert result.source_url == share_url
        assert result.message_count == 3 == len(result.messages)
        assert [m.role for m in result.messages] == ["user", "assistant", "user"]
        assert result.participants is not None
        assert result.participants.user == "Ada"
        assert result.participants.assistant == "Claude"
        assert result.fetched_at.tzinfo is not None

    def test_id_depends_only_on_url(self, render_count_html, share_url):
        first = extract(render_count_html, share_url)
        second = extract("<html></html>", share_url)
        assert first.id == second.id == generate_id(share_url)

    def test_word_count(self, share_url):
        html = f"<body>{_block('Hello world', True)}{_block('Hi there friend', False)}</body>"
        result = extract(html, share_url)
        assert result.word_count == 5
        assert result.word_count == count_words(result.messages)

    def test_word_count_includes_code(self, render_count_html, share_url):
        result = extract(render_count_html, share_url)
        expected = sum(len(s.content.split()) for m in result.messages for s in m.content)
        assert result.word_count == expected
        assert result.word_count > 12

    def test_page_without_messages(self, share_url):
        html = "<html><head><title>Test | X</title></head><body></body></html>"
        result = extract(html, share_url, profile=ExtractionProfile(title_suffixes=[" | X"]))
        assert result.title == "Test"
        assert result.messages == []
        assert result.message_count == 0
        assert result.word_count == 0
        assert result.participants is None

    def test_default_profile_keeps_foreign_suffix(self, share_url):
        html = "<title>Test | X</title>"
        assert extract(html, share_url).title == "Test | X"

    @pytest.mark.parametrize(
        "html",
        ["", "<<<>>>", "<div class='unterminated", "\x00\x01", "<title></title>", None, 42],
    )
    def test_garbage_never_raises(self, html, share_url):
        result = extract(html, share_url)
        assert result.message_count == len(result.messages)
        assert result.title

    def test_url_with_lone_surrogate(self):
        url = "https://claude.ai/share/\ud800"
        first = extract("<html></html>", url)
        second = extract("<p>other</p>", url)
        assert first.id == second.id == generate_id(url)
        assert first.message_count == 0

    def test_non_string_url(self):
        result = extract("<p>x</p>", None)
        assert result.source_url == ""
        assert result.id == "claude-web-0"

    def test_custom_profile_source(self, render_count_html, share_url):
        profile = ExtractionProfile(source="generic")
        result = extract(render_count_html, share_url, profile=profile)
        assert result.source == "generic"
        assert result.id.startswith("generic-")


# ---------------------------------------------------------------------------
# Transcript serialisation
# ---------------------------------------------------------------------------

class TestTranscriptModel:
    def test_camel_case_keys(self, render_count_html, share_url):
        data = extract(render_count_html, share_url).to_json_dict()
        for key in ("id", "source", "sourceUrl", "title", "fetchedAt",
                    "messageCount", "wordCount", "messages", "participants"):
            assert key in data
        assert "source_url" not in data
        assert "createdAt" not in data

    def test_code_segment_keeps_language(self, render_count_html, share_url):
        data = extract(render_count_html, share_url).to_json_dict()
        segments = data["messages"][1]["content"]
        assert segments[1] == {
            "type": "code",
            "content": "pairs = [(1, 'b'), (2, 'a')]\nresult = sorted(pairs, key=lambda p: p[1])",
            "language": "python",
        }
        assert "language" not in segments[0]

    def test_round_trip_from_aliases(self, render_count_html, share_url):
        original = extract(render_count_html, share_url)
        restored = Transcript.model_validate(original.to_json_dict())
        assert restored == original

    def test_message_count_must_match(self):
        with pytest.raises(ValidationError):
            Transcript(id="x", source_url="u", title="t", message_count=1, messages=[])

    def test_title_stripped(self):
        t = Transcript(id="x", source_url="u", title="  padded  ")
        assert t.title == "padded"

    def test_message_text_property(self, render_count_html, share_url):
        message = extract(render_count_html, share_url).messages[1]
        assert message.text == "\n".join(s.content for s in message.content)


# ---------------------------------------------------------------------------
# extract_file() / parse()
# ---------------------------------------------------------------------------

class TestExtractFile:
    def test_reads_file(self, tmp_path, render_count_html, share_url):
        page = tmp_path / "page.html"
        page.write_text(render_count_html, encoding="utf-8")
        assert extract_file(page, share_url).message_count == 3

    def test_invalid_utf8_replaced(self, tmp_path, share_url):
        page = tmp_path / "page.html"
        page.write_bytes(b"<title>Caf\xe9 | Claude</title>")
        assert extract_file(page, share_url).title == "Caf\ufffd"

    def test_missing_file_raises(self, tmp_path, share_url):
        with pytest.raises(OSError):
            extract_file(tmp_path / "nope.html", share_url)


class TestParse:
    def test_builtin_parser_used_for_share_url(self, render_count_html, share_url):
        assert parse(render_count_html, share_url).message_count == 3

    def test_unclaimed_url_falls_back(self, render_count_html):
        result = parse(render_count_html, "https://example.com/whatever")
        assert result.message_count == 3

    def test_registered_parser_takes_precedence(self, share_url):
        sentinel = Transcript(id="custom", source_url=share_url, title="from plugin")

        class StubParser:
            source = "generic"

            def can_parse(self, url):
                return True

            def parse(self, html, url):
                return sentinel

        register_parser(StubParser())
        assert parse("<html></html>", share_url) is sentinel
