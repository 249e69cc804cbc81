"""Compiler-version policy and the final verdict decision table."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from .models import Status

DEFAULT_VULNERABLE_VERSIONS: Tuple[str, ...] = (
    "0.8.28", "0.8.29", "0.8.30", "0.8.31", "0.8.32", "0.8.33",
)

CARET_RE = re.compile(r"\^0\.8\.(\d+)")


def version_key(version: str) -> Tuple[int, ...]:
    """Numeric sort key: ``"0.8.9"`` sorts before ``"0.8.28"``."""
    return tuple(int(part) for part in re.findall(r"\d+", version))


REASON_NO_COLLISION = "No collision pattern causing the bug was found."
REASON_VERSION_NOT_AFFECTED = (
    "Collision pattern found, but the detected compiler version ({version}) "
    "is not in the vulnerable range ({low} ~ {high})."
)
REASON_VIA_IR_DISABLED = (
    "Collision pattern and vulnerable version detected, but it is safe because "
    "via-ir (IR Pipeline) is explicitly disabled in the config."
)
REASON_VULNERABLE = (
    "Vulnerable version, collision pattern, and via-ir activation all confirmed. "
    "A critical bug may occur."
)
REASON_VIA_IR_UNKNOWN = (
    "Vulnerable version and collision pattern detected. "
    "Vulnerability triggers if via-ir is enabled in the config."
)


@dataclass(frozen=True)
class VersionPolicy:
    """Which compiler versions count as affected.

    Exact versions match anywhere in the version text (``>=0.8.30`` is
    affected). A caret range such as ``^0.8.24`` may resolve to an affected
    patch release, so it counts as affected when its patch lies in
    ``[caret_min_patch, caret_max_patch]``, but only while no build config
    pins the compiler (when ``caret_requires_no_override`` is set).
    """
    vulnerable_versions: Tuple[str, ...] = DEFAULT_VULNERABLE_VERSIONS
    caret_min_patch: int = 20
    caret_max_patch: int = 28
    caret_requires_no_override: bool = True

    def matches_exact(self, version: str) -> bool:
        if not self.vulnerable_versions:
            return False
        alternatives = "|".join(re.escape(v) for v in self.vulnerable_versions)
        return re.search(rf"(?<!\d)(?:{alternatives})(?!\d)", version) is not None

    def matches_caret(self, version: str) -> bool:
        for match in CARET_RE.finditer(version):
            if self.caret_min_patch <= int(match.group(1)) <= self.caret_max_patch:
                return True
        return False

    def is_vulnerable(self, active_version: str, config_version: Optional[str] = None) -> bool:
        if self.matches_exact(active_version):
            return True
        if config_version and self.caret_requires_no_override:
            return False
        return self.matches_caret(active_version)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["vulnerable_versions"] = list(self.vulnerable_versions)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionPolicy":
        """Build a policy from a config section, keeping defaults for
        missing keys."""
        default = cls()
        versions = data.get("vulnerable_versions", list(default.vulnerable_versions))
        if not isinstance(versions, (list, tuple)):
            raise ValueError(f"vulnerable_versions must be a list, got {versions!r}")
        no_override = data.get("caret_requires_no_override", default.caret_requires_no_override)
        if not isinstance(no_override, bool):
            raise ValueError(f"caret_requires_no_override must be a boolean, got {no_override!r}")
        return cls(
            vulnerable_versions=tuple(str(v) for v in versions),
            caret_min_patch=int(data.get("caret_min_patch", default.caret_min_patch)),
            caret_max_patch=int(data.get("caret_max_patch", default.caret_max_patch)),
            caret_requires_no_override=no_override,
        )

    @property
    def range_label(self) -> Tuple[str, str]:
        if not self.vulnerable_versions:
            return ("-", "-")
        return (
            min(self.vulnerable_versions, key=version_key),
            max(self.vulnerable_versions, key=version_key),
        )


def classify(
    has_collisions: bool,
    is_vulnerable_version: bool,
    via_ir: Optional[bool],
    active_version: str = "Unknown",
    policy: Optional[VersionPolicy] = None,
) -> Tuple[Status, str]:
    """Apply the ordered decision table.

    Returns:
        ``(status, reason)`` where the reason names the deciding condition
    """
    if not has_collisions:
        return "SAFE", REASON_NO_COLLISION
    if not is_vulnerable_version:
        low, high = (policy or VersionPolicy()).range_label
        return "WARNING", REASON_VERSION_NOT_AFFECTED.format(
            version=active_version, low=low, high=high
        )
    if via_ir is False:
        return "SAFE", REASON_VIA_IR_DISABLED
    if via_ir is True:
        return "VULNERABLE", REASON_VULNERABLE
    return "WARNING", REASON_VIA_IR_UNKNOWN
