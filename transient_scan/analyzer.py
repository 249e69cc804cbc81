"""Entry point coordinating extraction, resolution, detection and verdict."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .build_config import parse_build_config
from .collision_detector import CollisionDetector
from .models import AnalysisVerdict, CollisionRecord, FileVerdict, SourceFile, VariableInfo
from .partitioner import partition_scope
from .registry import GlobalRegistry, build_registry
from .resolver import ScopeResolver
from .type_resolver import TypeResolver
from .verdict import VersionPolicy, classify

logger = logging.getLogger(__name__)

SourceInput = Union[SourceFile, Tuple[str, str]]

SEVERITY_ORDER: Dict[str, int] = {"VULNERABLE": 3, "WARNING": 2, "SAFE": 1, "ERROR": 0}


def as_source_files(files: Iterable[SourceInput]) -> List[SourceFile]:
    """Accept ``SourceFile`` objects or ``(path, text)`` pairs."""
    return [f if isinstance(f, SourceFile) else SourceFile(*f) for f in files]


class ProjectAnalyzer:
    """Runs the full detection pipeline over one set of source files.

    Holds only the version policy; every call builds its own registry, so
    one analyzer may serve concurrent calls.
    """

    def __init__(self, policy: Optional[VersionPolicy] = None):
        self.policy = policy or VersionPolicy()

    def analyze(self, files: Iterable[SourceInput], config_text: str = "") -> AnalysisVerdict:
        """Analyze a project.

        Args:
            files: Ordered ``(path, text)`` sources
            config_text: Foundry or Hardhat config content, possibly empty

        Returns:
            The project verdict; internal failures become an ERROR verdict
            carrying the exception message and no collisions
        """
        try:
            return self._analyze(as_source_files(files), config_text)
        except Exception as exc:
            logger.warning("Analysis failed: %s", exc)
            return AnalysisVerdict(status="ERROR", reason=str(exc))

    def _analyze(self, files: Sequence[SourceFile], config_text: str) -> AnalysisVerdict:
        settings = parse_build_config(config_text)
        registry = build_registry(files)

        active_version = settings.solc_version or registry.pragma_version or "Unknown"
        is_vulnerable = self.policy.is_vulnerable(active_version, settings.solc_version)

        collisions, variables = self.find_collisions(registry)
        status, reason = classify(
            bool(collisions), is_vulnerable, settings.via_ir, active_version, self.policy
        )
        logger.debug("Verdict %s with %d collisions", status, len(collisions))

        return AnalysisVerdict(
            status=status,
            reason=reason,
            active_version=active_version,
            is_vulnerable_version=is_vulnerable,
            via_ir_enabled=settings.via_ir,
            config_version=settings.solc_version,
            collisions=collisions,
            framework=settings.framework,
            variables=variables,
        )

    def find_collisions(
        self, registry: GlobalRegistry
    ) -> Tuple[List[CollisionRecord], List[VariableInfo]]:
        """Check creation and runtime code of every physical contract."""
        resolver = ScopeResolver(registry)
        collisions: List[CollisionRecord] = []
        variables: List[VariableInfo] = []
        seen_vars = set()

        for entity in registry.contracts():
            body = resolver.scope_body(entity)
            partition = partition_scope(body)
            types = TypeResolver(body, registry.structs, contract=entity.name)

            for info in types.variables.values():
                if (info.name, entity.name) not in seen_vars:
                    seen_vars.add((info.name, entity.name))
                    variables.append(info)

            detector = CollisionDetector(types)
            collisions += detector.check_scope(
                entity.name, entity.source_file, "Creation", partition.creation
            )
            collisions += detector.check_scope(
                entity.name, entity.source_file, "Runtime", partition.runtime
            )

        return collisions, variables


def analyze_project(
    files: Iterable[SourceInput],
    config_text: str = "",
    policy: Optional[VersionPolicy] = None,
) -> AnalysisVerdict:
    return ProjectAnalyzer(policy).analyze(files, config_text)


def project_file_views(
    files: Iterable[SourceInput], verdict: AnalysisVerdict
) -> List[FileVerdict]:
    """Project a verdict onto individual files.

    A file inherits the project status only if it contributed a collision;
    the reason is always the project-wide one. Results are ordered by
    severity, keeping input order among equals.
    """
    views = []
    for source in as_source_files(files):
        own = [c for c in verdict.collisions if c.source_file == source.path]
        if verdict.status == "ERROR":
            status = "ERROR"
        elif own:
            status = verdict.status
        else:
            status = "SAFE"
        views.append(FileVerdict(path=source.path, status=status, reason=verdict.reason, collisions=own))

    views.sort(key=lambda v: SEVERITY_ORDER[v.status], reverse=True)
    return views
