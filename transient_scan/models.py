"""Core data models shared by extraction, resolution, and verdict layers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional

EntityKind = Literal["contract", "library", "interface"]
ClearKind = Literal["delete", "pop", "assign"]
ScopeName = Literal["Creation", "Runtime"]
Status = Literal["SAFE", "WARNING", "VULNERABLE", "ERROR"]
Framework = Literal["foundry", "hardhat", "none"]

SCOPE_LABELS: Dict[str, str] = {
    "Creation": "Creation Code (Constructor/Init)",
    "Runtime": "Runtime Code (Functions)",
}


@dataclass(frozen=True)
class SourceFile:
    path: str
    text: str


@dataclass
class Entity:
    kind: EntityKind
    name: str
    bases: List[str]
    body: str
    source_file: str

    @property
    def key(self) -> str:
        """Stable identity used by visited sets."""
        return f"{self.source_file}:{self.name}"


@dataclass
class ClearingExpression:
    """A ``delete``, ``.pop()`` or assignment found in contract text."""
    root_variable: str
    access_chain: str
    kind: ClearKind
    raw_display_text: str

    @property
    def expression(self) -> str:
        return self.root_variable + self.access_chain


@dataclass
class VariableInfo:
    name: str
    declared_type: str
    is_transient: bool
    contract: str = ""


@dataclass(frozen=True)
class ClearedType:
    type: str
    is_transient: bool
    display_text: str


@dataclass
class CollisionRecord:
    contract: str
    source_file: str
    scope: ScopeName
    type: str
    transient_display_texts: List[str]
    persistent_display_texts: List[str]

    def __post_init__(self):
        if not self.transient_display_texts or not self.persistent_display_texts:
            raise ValueError("A collision needs both transient and persistent clearings")

    @property
    def scope_label(self) -> str:
        return SCOPE_LABELS.get(self.scope, self.scope)


@dataclass
class AnalysisVerdict:
    """Project-wide outcome of one analysis call."""
    status: Status
    reason: str
    active_version: str = "Unknown"
    is_vulnerable_version: bool = False
    via_ir_enabled: Optional[bool] = None
    config_version: Optional[str] = None
    collisions: List[CollisionRecord] = field(default_factory=list)
    framework: Framework = "none"
    variables: List[VariableInfo] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FileVerdict:
    """Per-file projection of a project verdict."""
    path: str
    status: Status
    reason: str
    collisions: List[CollisionRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BuildSettings:
    framework: Framework = "none"
    via_ir: Optional[bool] = None
    solc_version: Optional[str] = None


@dataclass
class BuildConfigFile:
    name: str
    content: str

    @property
    def found(self) -> bool:
        return self.name != "None"
