"""Detection of transient/persistent clearing collisions per code scope."""

from __future__ import annotations

from typing import Dict, List

from .models import CollisionRecord, ScopeName
from .type_resolver import TypeResolver, find_clearing_expressions


class CollisionDetector:
    """Group cleared types by storage class within one generated scope."""

    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver

    def cleared_types(self, scope_code: str) -> Dict[str, Dict[str, Dict[str, None]]]:
        """Map each cleared type to ordered display texts per storage class.

        Returns:
            ``{type: {"transient": {...}, "persistent": {...}}}`` where the
            inner dicts are used as insertion-ordered sets.
        """
        by_type: Dict[str, Dict[str, Dict[str, None]]] = {}
        for expr in find_clearing_expressions(scope_code):
            for cleared in self.resolver.resolve(expr):
                slot = by_type.setdefault(cleared.type, {"transient": {}, "persistent": {}})
                tag = "transient" if cleared.is_transient else "persistent"
                slot[tag][cleared.display_text] = None
        return by_type

    def check_scope(
        self,
        contract: str,
        source_file: str,
        scope: ScopeName,
        scope_code: str,
    ) -> List[CollisionRecord]:
        """Analyze one partition for collisions.

        Args:
            contract: Contract name reported in each record
            source_file: Path of the file declaring the contract
            scope: ``"Creation"`` or ``"Runtime"``
            scope_code: Partition text to scan for clearing expressions

        Returns:
            One record per type cleared both transiently and persistently
        """
        records = []
        for type_str, tags in self.cleared_types(scope_code).items():
            if tags["transient"] and tags["persistent"]:
                records.append(CollisionRecord(
                    contract=contract,
                    source_file=source_file,
                    scope=scope,
                    type=type_str,
                    transient_display_texts=list(tags["transient"]),
                    persistent_display_texts=list(tags["persistent"]),
                ))
        return records
