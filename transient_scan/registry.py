"""Project-wide symbol registry built fresh for every analysis call."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .extractor import extract_file
from .models import Entity, SourceFile
from .preprocessor import clean_source

logger = logging.getLogger(__name__)


@dataclass
class GlobalRegistry:
    """Name -> entities, struct table, and free code per file.

    A name maps to every entity declared under it anywhere in the project;
    lookups always union all of them.
    """
    entities_by_name: Dict[str, List[Entity]] = field(default_factory=dict)
    structs: Dict[str, Dict[str, str]] = field(default_factory=dict)
    free_code_by_file: Dict[str, str] = field(default_factory=dict)
    pragma_version: Optional[str] = None

    def add_entity(self, entity: Entity) -> None:
        self.entities_by_name.setdefault(entity.name, []).append(entity)

    def lookup(self, name: str) -> List[Entity]:
        return self.entities_by_name.get(name, [])

    def is_library(self, name: str) -> bool:
        return any(e.kind == "library" for e in self.lookup(name))

    def contracts(self) -> Iterable[Entity]:
        """Yield physical contract entities in discovery order."""
        for entities in self.entities_by_name.values():
            for entity in entities:
                if entity.kind == "contract":
                    yield entity


def build_registry(files: Iterable[SourceFile]) -> GlobalRegistry:
    """Clean and extract every file, aggregating in file order.

    Structs are global: a later declaration of the same name replaces the
    earlier one. The first ``pragma solidity`` seen wins.
    """
    registry = GlobalRegistry()
    count = 0
    for source in files:
        extraction = extract_file(source.path, clean_source(source.text))
        for entity in extraction.entities:
            registry.add_entity(entity)
        registry.structs.update(extraction.structs)
        registry.free_code_by_file[source.path] = extraction.free_code
        if registry.pragma_version is None and extraction.pragma_version:
            registry.pragma_version = extraction.pragma_version
        count += 1

    logger.debug(
        "Registry built from %d files: %d entity names, %d structs",
        count, len(registry.entities_by_name), len(registry.structs),
    )
    return registry
