"""
Strip chat-platform noise from a captain's message.
"""

import re

_MENTION_RE = re.compile(r"<(?:@[!&]?|#)\d+>")
_URL_RE = re.compile(r"<?https?://\S+", re.IGNORECASE)
_CUSTOM_EMOJI_RE = re.compile(r"<a?:[A-Za-z0-9_~]+:\d+>")
_SHORTCODE_RE = re.compile(r":(?=[a-z0-9_+\-]*[a-z])[a-z0-9_+\-]{2,}:", re.IGNORECASE)
# Paired markup first, then stray single asterisks/backticks
_MARKUP_RE = re.compile(r"\*\*|__|~~|\|\||`+|\*")
_QUOTE_RE = re.compile(r"^\s*>+\s?", re.MULTILINE)
_SPACES_RE = re.compile(r"[ \t ]+")


def normalize_text(raw: str) -> str:
    """Remove mentions, emoji and markdown, collapse whitespace per line

    Examples:
        "<@123> **Falcons** vs Wolves  :fire:" -> "Falcons vs Wolves"
    """
    if not raw:
        return ""
    text = _MENTION_RE.sub(" ", raw)
    text = _URL_RE.sub(" ", text)
    text = _CUSTOM_EMOJI_RE.sub(" ", text)
    text = _SHORTCODE_RE.sub(" ", text)
    text = _QUOTE_RE.sub("", text)
    text = _MARKUP_RE.sub("", text)

    lines = []
    for line in text.replace("\r\n", "\n").split("\n"):
        line = _SPACES_RE.sub(" ", line).strip()
        if line:
            lines.append(line)
    return "\n".join(lines)
