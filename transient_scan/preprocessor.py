"""Comment/string stripping and balanced-brace scanning for Solidity text."""

from __future__ import annotations

import re
from typing import Optional

COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/|//.*")

# Quote matcher: consumes an optional backslash before each character so
# simple escapes survive, but an escaped quote right before the closer can
# still end the literal early.
STRING_RE = re.compile(r"([\"'])(?:(?=(\\?))\2.)*?\1")


def strip_comments(text: str) -> str:
    """Remove block and line comments."""
    return COMMENT_RE.sub("", text)


def clean_source(text: str) -> str:
    """Remove comments and quoted string literals from Solidity source.

    Pattern matching downstream runs on the cleaned text so that keywords
    inside comments or strings (``"delete me"``) never match.
    """
    return STRING_RE.sub("", strip_comments(text))


def find_block_end(text: str, start: int) -> Optional[int]:
    """Return the index of the brace that closes a block.

    ``start`` is the first index after the opening ``{``. Nested braces are
    counted; ``None`` means the block never closes before end of text.
    """
    depth = 1
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None
