"""
HTML to plain text conversion for Wikipedia article bodies
"""

import html
import re

_SCRIPT_STYLE = re.compile(r"<(script|style)\b[^<>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_BLOCK_TAGS = re.compile(
    r"</?(p|div|br|li|h[1-6]|tr|section|ul|ol|dl|dt|dd|table|blockquote|figure|figcaption|pre|hr)\b[^<>]*>",
    re.IGNORECASE,
)
# Known element names only, so "a < b" or a decoded "<y>" stay as text
_INLINE_TAGS = re.compile(
    r"</?(a|abbr|b|bdi|bdo|big|caption|cite|code|del|dfn|em|font|i|img|ins|kbd|link|mark|math|meta|"
    r"noscript|q|rp|rt|ruby|s|samp|small|span|strong|sub|sup|tbody|td|tfoot|th|thead|time|tt|u|var|wbr)"
    r"\b(\s[^<>]*)?/?>",
    re.IGNORECASE,
)
_COMMENTS = re.compile(r"<!--.*?-->", re.DOTALL)
_BLANK_RUNS = re.compile(r"\n{3,}")


def _strip_once(text: str) -> str:
    text = _COMMENTS.sub("", text)
    text = _SCRIPT_STYLE.sub("", text)
    text = _BLOCK_TAGS.sub("\n", text)
    text = _INLINE_TAGS.sub("", text)
    text = html.unescape(text).replace("\xa0", " ")

    lines = [line.strip() for line in text.split("\n")]
    text = "\n".join(lines)
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.strip()


def strip_html(text: str) -> str:
    """
    Convert an HTML fragment to readable plain text.

    Block-level tags become line breaks, other known tags are dropped and
    entities are decoded. Lines are trimmed and runs of blank lines collapse
    to a single one. Text that merely contains angle brackets is left alone.

    The conversion is repeated until the text stops changing, so doubly
    escaped entities are fully decoded and stripping the result again
    returns it unchanged.
    """
    if not text:
        return ""

    previous = None
    while text != previous:
        previous = text
        text = _strip_once(text)
    return text
