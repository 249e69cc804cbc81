"""Cross-file flattening of inheritance and library usage."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Set

from .models import Entity
from .registry import GlobalRegistry

logger = logging.getLogger(__name__)


def bare_name(reference: str) -> str:
    """``path.Base(arg)`` -> ``Base``."""
    return reference.split("(")[0].split(".")[-1].strip()


class ScopeResolver:
    """Builds the text a contract's generated code can draw from.

    The result over-approximates visibility: every entity sharing a base
    name is pulled in, and any library whose name appears in the text is
    appended until nothing new is found.
    """

    def __init__(self, registry: GlobalRegistry):
        self.registry = registry

    def scope_body(self, entity: Entity) -> str:
        visited: Set[str] = set()
        parts = [
            self.flatten(entity.name, visited, entity),
            self.registry.free_code_by_file.get(entity.source_file, ""),
        ]
        body = "\n".join(parts)
        return self._pull_libraries(body, visited, entity)

    def flatten(
        self,
        reference: str,
        visited: Set[str],
        entity: Optional[Entity] = None,
    ) -> str:
        """Return the body of ``entity`` (or of every entity named
        ``reference``) followed by its recursively flattened bases.

        ``visited`` holds ``path:name`` keys for concrete entities and bare
        names for name-only lookups, so cycles terminate.
        """
        name = bare_name(reference)
        key = entity.key if entity is not None else name
        if key in visited:
            return ""
        visited.add(key)

        if entity is not None:
            return self._flatten_entity(entity, visited)

        candidates = self.registry.lookup(name)
        if not candidates:
            logger.debug("Reference '%s' has no declaration in the project", name)
            return ""

        parts: List[str] = []
        for candidate in candidates:
            if candidate.key in visited:
                continue
            visited.add(candidate.key)
            parts.append(self._flatten_entity(candidate, visited))
        return "".join(parts)

    def _flatten_entity(self, entity: Entity, visited: Set[str]) -> str:
        full = entity.body + "\n"
        for base in entity.bases:
            full += self.flatten(base, visited) + "\n"
        return full

    def _pull_libraries(self, body: str, visited: Set[str], entity: Entity) -> str:
        added = True
        while added:
            added = False
            for name in self.registry.entities_by_name:
                if name in visited or not self.registry.is_library(name):
                    continue
                if re.search(rf"\b{re.escape(name)}\b", body):
                    logger.debug("Pulled library %s into scope of %s", name, entity.name)
                    body += "\n" + self.flatten(name, visited)
                    added = True
        return body
