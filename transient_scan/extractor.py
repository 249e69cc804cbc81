"""Regex-driven extraction of contracts, libraries, interfaces and structs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .models import Entity
from .preprocessor import find_block_end

ENTITY_RE = re.compile(
    r"(?:abstract\s+)?(contract|library|interface)\s+([a-zA-Z0-9_]+)"
    r"(?:\s+is\s+([^{]+))?\s*\{"
)
STRUCT_RE = re.compile(r"struct\s+([a-zA-Z0-9_]+)\s*\{([^}]+)\}")
PRAGMA_RE = re.compile(r"pragma\s+solidity\s+([^;]+);")


@dataclass
class FileExtraction:
    """Everything discovered in one cleaned source file."""
    path: str
    entities: List[Entity] = field(default_factory=list)
    structs: Dict[str, Dict[str, str]] = field(default_factory=dict)
    free_code: str = ""
    pragma_version: Optional[str] = None


def parse_bases(clause: Optional[str]) -> List[str]:
    """Split an ``is A, B(1), lib.C`` clause into whitespace-free names."""
    if not clause:
        return []
    bases = [re.sub(r"\s+", "", part) for part in clause.split(",")]
    return [b for b in bases if b]


def parse_struct_members(body: str) -> Dict[str, str]:
    """Map member names to whitespace-free type strings.

    ``mapping(address => uint256) balances`` becomes
    ``{"balances": "mapping(address=>uint256)"}``. Statements with fewer
    than two tokens are skipped.
    """
    members: Dict[str, str] = {}
    for stmt in body.split(";"):
        parts = stmt.strip().split()
        if len(parts) < 2:
            continue
        name = parts.pop()
        members[name] = "".join(parts)
    return members


def extract_structs(cleaned: str) -> Dict[str, Dict[str, str]]:
    structs: Dict[str, Dict[str, str]] = {}
    for match in STRUCT_RE.finditer(cleaned):
        structs[match.group(1)] = parse_struct_members(match.group(2))
    return structs


def extract_pragma(cleaned: str) -> Optional[str]:
    match = PRAGMA_RE.search(cleaned)
    return match.group(1).strip() if match else None


def extract_file(path: str, cleaned: str) -> FileExtraction:
    """Extract entities, structs, free code and pragma from cleaned text.

    Entity bodies are delimited by a balanced-brace scan rather than the
    regex, so nested blocks are handled and declarations nested inside a
    body are never reported separately.
    """
    result = FileExtraction(
        path=path,
        structs=extract_structs(cleaned),
        pragma_version=extract_pragma(cleaned),
    )

    free_parts: List[str] = []
    last_end = 0
    pos = 0
    while True:
        match = ENTITY_RE.search(cleaned, pos)
        if match is None:
            break
        free_parts.append(cleaned[last_end:match.start()])

        body_start = match.end()
        close = find_block_end(cleaned, body_start)
        if close is None:
            body = cleaned[body_start:]
            last_end = len(cleaned)
        else:
            body = cleaned[body_start:close]
            last_end = close + 1

        result.entities.append(
            Entity(
                kind=match.group(1),
                name=match.group(2),
                bases=parse_bases(match.group(3)),
                body=body,
                source_file=path,
            )
        )
        pos = last_end

    free_parts.append(cleaned[last_end:])
    result.free_code = "".join(free_parts)
    return result
