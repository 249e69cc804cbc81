"""Foundry/Hardhat configuration parsing by content sniffing.

Only two facts are read: whether the IR pipeline is enabled and whether a
compiler version is pinned. The dialect is decided by content, not file
name, so a config passed as a bare string still parses.
"""

from __future__ import annotations

import re
from typing import Optional

from .models import BuildSettings
from .preprocessor import strip_comments

TOML_HASH_COMMENT_RE = re.compile(r"#.*")

FOUNDRY_VIA_IR_TRUE = re.compile(r"via_ir\s*=\s*true")
FOUNDRY_VIA_IR_FALSE = re.compile(r"via_ir\s*=\s*false")
FOUNDRY_VERSION_PATTERNS = (
    re.compile(r"solc_version\s*=\s*['\"]([^'\"]+)['\"]"),
    re.compile(r"\bsolc\s*=\s*['\"]([^'\"]+)['\"]"),
)

HARDHAT_VIA_IR_TRUE = re.compile(r"viaIR\s*:\s*true")
HARDHAT_VIA_IR_FALSE = re.compile(r"viaIR\s*:\s*false")
HARDHAT_VERSION_PATTERNS = (
    re.compile(r"version\s*:\s*['\"]([^'\"]+)['\"]"),
    re.compile(r"solidity\s*:\s*['\"]([^'\"]+)['\"]"),
)


def _first_group(patterns, text: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def _flag(true_re: re.Pattern, false_re: re.Pattern, text: str) -> Optional[bool]:
    if true_re.search(text):
        return True
    if false_re.search(text):
        return False
    return None


def parse_build_config(text: Optional[str]) -> BuildSettings:
    """Extract framework, via-ir flag and pinned solc version.

    A TOML-like text (``via_ir`` or a ``[profile.`` header) is read as
    Foundry; otherwise a text mentioning ``hardhat`` or ``solidity`` is read
    as a Hardhat JS object. Anything else yields unknown values.
    """
    if not text or not text.strip():
        return BuildSettings()

    cleaned = strip_comments(text)

    if "via_ir" in cleaned or "[profile." in cleaned:
        toml_text = TOML_HASH_COMMENT_RE.sub("", cleaned)
        return BuildSettings(
            framework="foundry",
            via_ir=_flag(FOUNDRY_VIA_IR_TRUE, FOUNDRY_VIA_IR_FALSE, toml_text),
            solc_version=_first_group(FOUNDRY_VERSION_PATTERNS, toml_text),
        )

    if "hardhat" in cleaned or "solidity" in cleaned:
        return BuildSettings(
            framework="hardhat",
            via_ir=_flag(HARDHAT_VIA_IR_TRUE, HARDHAT_VIA_IR_FALSE, cleaned),
            solc_version=_first_group(HARDHAT_VERSION_PATTERNS, cleaned),
        )

    return BuildSettings()
