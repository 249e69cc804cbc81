"""Symbolic type propagation for clearing expressions.

Works directly on cleaned text: declarations are found with a single regex
per identifier, and types are plain whitespace-free strings such as
``uint256[]``, ``Info`` or ``mapping(uint256=>address)``.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from typing import Deque, Dict, List, Optional, Set

from .models import ClearedType, ClearingExpression, VariableInfo

logger = logging.getLogger(__name__)

IDENT = r"[a-zA-Z0-9_]+"
CHAIN = IDENT + r"(?:(?:\." + IDENT + r")|(?:\[.*?\]))*"

DELETE_RE = re.compile(r"delete\s+(" + CHAIN + r")")
POP_RE = re.compile(r"(" + CHAIN + r")\.pop\s*\(\s*\)")
ASSIGN_RE = re.compile(r"(" + CHAIN + r")\s*=(?!=)[^;]+;")
ROOT_RE = re.compile(r"^(" + IDENT + r")")
ACCESS_RE = re.compile(r"\.(" + IDENT + r")|\[.*?\]")

QUALIFIERS = (
    "public", "private", "internal", "transient", "constant",
    "immutable", "memory", "storage", "calldata",
)
# Statement keywords that would otherwise read as a type token
# (``delete x;`` looks like a declaration of ``x``).
NON_TYPE_WORDS = ("delete", "return", "emit", "else", "new")

LENGTH_TYPE = "uint256"
ARRAY_SHRINK_SUFFIX = " (Array Shrink)"
MAX_STRUCT_DEPTH = 1


def _declaration_re(name: str) -> re.Pattern:
    return re.compile(
        r"(?:(mapping\s*\([^{};]+\))"
        r"|\b(?!(?:" + "|".join(NON_TYPE_WORDS) + r")\b)(" + IDENT + r"(?:\s*\[[^\]\[;]*\])*))"
        r"\s+"
        r"((?:(?:" + "|".join(QUALIFIERS) + r")\s+)*)"
        r"\b" + re.escape(name) + r"\b\s*(?:=|;|,|\))"
    )


def _split_chain(chain: str) -> Optional[tuple]:
    root = ROOT_RE.match(chain)
    if root is None:
        return None
    return root.group(1), chain[len(root.group(1)):]


def find_clearing_expressions(text: str) -> List[ClearingExpression]:
    """Return every delete, pop and assignment in ``text``, in that order."""
    found: List[ClearingExpression] = []

    for match in DELETE_RE.finditer(text):
        chain = match.group(1).strip()
        parts = _split_chain(chain)
        if parts:
            found.append(ClearingExpression(parts[0], parts[1], "delete", f"delete {chain}"))

    for match in POP_RE.finditer(text):
        chain = match.group(1).strip()
        parts = _split_chain(chain)
        if parts:
            found.append(ClearingExpression(parts[0], parts[1], "pop", f"{chain}.pop()"))

    for match in ASSIGN_RE.finditer(text):
        chain = match.group(1).strip()
        parts = _split_chain(chain)
        if parts:
            statement = " ".join(match.group(0).split())
            found.append(ClearingExpression(parts[0], parts[1], "assign", statement))

    return found


def discover_declarations(scope_body: str, contract: str = "") -> Dict[str, VariableInfo]:
    """Find the declared type of every root identifier that is cleared.

    The first textual match is authoritative. Identifiers without a match
    are dropped.
    """
    roots: List[str] = []
    for expr in find_clearing_expressions(scope_body):
        if expr.root_variable not in roots:
            roots.append(expr.root_variable)

    variables: Dict[str, VariableInfo] = {}
    for name in roots:
        match = _declaration_re(name).search(scope_body)
        if match is None:
            logger.debug("No declaration found for '%s' in %s", name, contract or "scope")
            continue
        declared = re.sub(r"\s+", "", match.group(1) or match.group(2))
        variables[name] = VariableInfo(
            name=name,
            declared_type=declared,
            is_transient="transient" in (match.group(3) or ""),
            contract=contract,
        )
    return variables


def mapping_value_type(type_str: str) -> str:
    """``mapping(K=>V)`` -> ``V`` (up to the last closing parenthesis)."""
    arrow = type_str.find("=>")
    end = type_str.rfind(")")
    value = type_str[arrow + 2:end] if end != -1 else type_str[arrow + 2:]
    return value.strip()


def strip_dimension(type_str: str) -> Optional[str]:
    """Element type of an array type, or None when there is none."""
    if not type_str.endswith("]"):
        return None
    bracket = type_str.rfind("[")
    return type_str[:bracket] if bracket > 0 else None


class TypeResolver:
    """Resolves which types each clearing expression clears."""

    def __init__(self, scope_body: str, structs: Dict[str, Dict[str, str]], contract: str = ""):
        self.structs = structs
        self.contract = contract
        self.variables = discover_declarations(scope_body, contract)

    def narrow(self, declared_type: str, access_chain: str) -> str:
        """Walk ``.member`` and ``[index]`` accesses through a type."""
        current = declared_type
        for access in ACCESS_RE.finditer(access_chain):
            if access.group(0).startswith("["):
                if current.endswith("]"):
                    current = current[:current.rfind("[")]
                elif "=>" in current:
                    current = mapping_value_type(current)
            else:
                members = self.structs.get(current)
                if members and access.group(1) in members:
                    current = members[access.group(1)]
        return current

    def resolve(self, expr: ClearingExpression) -> List[ClearedType]:
        info = self.variables.get(expr.root_variable)
        if info is None:
            return []

        current = self.narrow(info.declared_type, expr.access_chain)

        if expr.kind == "assign":
            display = expr.raw_display_text + ARRAY_SHRINK_SUFFIX
            return [
                ClearedType(element, info.is_transient, display)
                for element in self._shrinkable_elements(current)
            ]

        if expr.kind == "pop":
            current = strip_dimension(current) or current

        return [
            ClearedType(t, info.is_transient, expr.raw_display_text)
            for t in self.propagate(current)
        ]

    def propagate(self, start: str) -> List[str]:
        """Breadth-first expansion of every type cleared along with ``start``.

        Arrays also clear their length word, structs clear every member,
        mappings clear their value type.
        """
        cleared: List[str] = []
        visited: Set[str] = set()
        queue: Deque[str] = deque([start])

        while queue:
            t = re.sub(r"\s+", "", queue.popleft())
            if t in visited:
                continue
            visited.add(t)
            cleared.append(t)

            if t.endswith("]"):
                if LENGTH_TYPE not in visited:
                    queue.append(LENGTH_TYPE)
                element = strip_dimension(t)
                if element:
                    queue.append(element)

            if t in self.structs:
                queue.extend(self.structs[t].values())

            if "=>" in t:
                queue.append(mapping_value_type(t))

        return cleared

    def _shrinkable_elements(self, type_str: str) -> List[str]:
        """Element types of dynamic arrays reachable from ``type_str``
        directly or through one level of struct members."""
        found: List[str] = []
        seen: Set[str] = set()

        def search(t: str, depth: int) -> None:
            if t in seen:
                return
            seen.add(t)
            if t.endswith("]"):
                element = strip_dimension(t)
                if element:
                    found.append(element)
            elif t in self.structs and depth < MAX_STRUCT_DEPTH:
                for member in self.structs[t].values():
                    search(member, depth + 1)

        search(type_str, 0)
        return found
