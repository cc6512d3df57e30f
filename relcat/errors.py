"""Exceptions raised when repository history is inconsistent."""

from __future__ import annotations

from typing import Optional


class CatalogueError(RuntimeError):
    """Base class for data-integrity failures that abort a catalogue run."""


class VersionFormatError(CatalogueError, ValueError):
    """Raised when a string cannot be parsed as a version number."""


class UnresolvedBranchError(CatalogueError):
    """Raised when a configured branch cannot be resolved to a tag."""

    def __init__(self, branch: str, version: str, reason: str | None = None) -> None:
        self.branch = branch
        self.version = version
        message = reason or f"unable to find version {version} for branch {branch}"
        super().__init__(message)


class ParentMismatchError(CatalogueError):
    """Raised when one component claims different parents across versions."""

    def __init__(self, component: str, version: str, existing: str, observed: str) -> None:
        self.component = component
        self.version = version
        self.existing = existing
        self.observed = observed
        super().__init__(
            f"differing parents for {component}: {existing!r} recorded, "
            f"{observed!r} found in {version}"
        )


class MalformedDocumentationError(CatalogueError):
    """Raised when a component README does not start with a valid header."""

    def __init__(self, line: str, component: Optional[str] = None) -> None:
        self.line = line
        self.component = component
        prefix = f"{component}: " if component else ""
        super().__init__(f"{prefix}malformed README header {line!r}")

    def for_component(self, component: str) -> "MalformedDocumentationError":
        return MalformedDocumentationError(self.line, component=component)


__all__ = [
    "CatalogueError",
    "MalformedDocumentationError",
    "ParentMismatchError",
    "UnresolvedBranchError",
    "VersionFormatError",
]
