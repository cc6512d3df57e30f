"""Core data models shared across relcat components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .versions import VersionId


class VersionType(str, Enum):
    """Whether a version comes from a release tag or a development branch."""

    RELEASE = "release"
    DEVELOPMENT = "development"


@dataclass(eq=False)
class BranchDefinition:
    """A configured maintenance line, e.g. ``3.0.x`` stable."""

    type: VersionType
    pattern: VersionId
    description: str
    status: str
    releases: List["VersionRecord"] = field(default_factory=list)
    latest_version: Optional[VersionId] = None
    latest_tag: Optional[str] = None

    @property
    def name(self) -> str:
        return str(self.pattern)


@dataclass
class VersionRecord:
    """A concrete version found in the repository."""

    version: VersionId
    tag: str
    type: VersionType
    ref: str = ""
    branch: Optional[BranchDefinition] = field(default=None, compare=False, repr=False)
    output: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.ref:
            self.ref = self.tag


@dataclass(frozen=True)
class TreeEntry:
    """One line of ``git ls-tree`` output."""

    mode: str
    kind: str
    handle: str
    path: str


@dataclass
class ComponentObservation:
    """A component as seen in a single version."""

    name: str
    parent: Optional[str] = None
    readme_blob: Optional[str] = None


@dataclass
class ParsedDocumentation:
    """Sections of a component README keyed by lowercased heading."""

    component_name: str
    sections: Dict[str, str] = field(default_factory=dict)

    @property
    def summary(self) -> Optional[str]:
        return self.sections.get("summary")


@dataclass
class ComponentRecord:
    """Longitudinal view of a component across every version."""

    name: str
    min_release: VersionId
    max_release: VersionId
    max_dev_release: VersionId
    parent: Optional[str] = None
    readme_blob: Optional[str] = None
    readme_version: Optional[VersionId] = None
    branches: Dict[str, BranchDefinition] = field(default_factory=dict)
    readme: Optional[ParsedDocumentation] = None
    output: Optional[Dict[str, Any]] = None


__all__ = [
    "BranchDefinition",
    "ComponentObservation",
    "ComponentRecord",
    "ParsedDocumentation",
    "TreeEntry",
    "VersionRecord",
    "VersionType",
]
