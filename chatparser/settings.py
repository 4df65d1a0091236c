"""Default extraction settings for chatparser.

These constants seed :class:`chatparser.profiles.ExtractionProfile`.  Override
them per site with a YAML profile rather than editing this module.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Source identity
# ---------------------------------------------------------------------------
DEFAULT_SOURCE = "claude-web"

SHARE_HOSTS = ["claude.ai"]
SHARE_PATH_PREFIX = "/share/"

# ---------------------------------------------------------------------------
# Title handling
# ---------------------------------------------------------------------------
UNTITLED_TITLE = "Untitled Conversation"

# Product suffixes stripped from the end of <title>
TITLE_SUFFIXES = [" | Claude"]

# Name the assistant uses in "This is a copy of a chat between X and Y"
ASSISTANT_BRAND = "Claude"

# ---------------------------------------------------------------------------
# Message markers
# ---------------------------------------------------------------------------
# Server-rendered shape: every conversational turn starts with a div carrying
# this attribute.
RENDER_COUNT_ATTR = "data-test-render-count"

# Class tokens (substring match) identifying each role.
USER_MARKER = "font-user-message"
ASSISTANT_MARKER = "font-claude-message"

# Client-rendered shape: assistant matches shorter than this are layout noise.
MIN_ASSISTANT_CHARS = 10

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
