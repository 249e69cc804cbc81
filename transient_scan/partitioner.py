"""Split a flattened scope body into creation and runtime code."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from .preprocessor import find_block_end

# constructor is not an anchor: its body compiles into creation code.
RUNTIME_BLOCK_RE = re.compile(r"\b(?:function|modifier|fallback|receive)\b[^{]*\{")


@dataclass
class ScopePartition:
    creation: str
    runtime: str


def partition_scope(body: str) -> ScopePartition:
    """Route every function/modifier/fallback/receive block to runtime code
    and everything else to creation code.

    Creation and runtime code are separate generated objects, so clearing
    helpers are never shared across them.
    """
    creation: List[str] = []
    runtime: List[str] = []
    last = 0
    pos = 0
    while True:
        match = RUNTIME_BLOCK_RE.search(body, pos)
        if match is None:
            break
        creation.append(body[last:match.start()])
        close = find_block_end(body, match.end())
        end = len(body) if close is None else close + 1
        runtime.append(body[match.start():end] + "\n")
        last = pos = end

    creation.append(body[last:])
    return ScopePartition(creation="".join(creation), runtime="".join(runtime))
