"""Version catalogue building and maintenance-branch resolution."""

from __future__ import annotations

import re
from typing import Dict, Iterable, Mapping, Protocol, Sequence

from .errors import UnresolvedBranchError
from .logging import get_logger
from .models import BranchDefinition, VersionRecord, VersionType
from .versions import VersionId, compare, matches

_RELEASE_TAG = re.compile(r"^release_(\d+)_(\d+)_(\d+)$")
_DEV_BRANCH = re.compile(r"^[\s*]*((?:remotes/[^/\s]+/)?(v(\d+\.(?:\d+|x)\.x)))$")
_NO_RELEASE = VersionId((0, 0, 0))

logger = get_logger("catalogue")


class RefSource(Protocol):
    def list_tags(self) -> Sequence[str]: ...

    def list_branches(self) -> Sequence[str]: ...


def build_version_catalogue(repo: RefSource) -> Dict[VersionId, VersionRecord]:
    """Collect release tags and development branches keyed by version."""
    versions: Dict[VersionId, VersionRecord] = {}

    for tag in repo.list_tags():
        match = _RELEASE_TAG.match(tag.strip())
        if not match:
            continue
        version = VersionId.parse(".".join(match.groups()))
        versions[version] = VersionRecord(version=version, tag=match.group(0), type=VersionType.RELEASE)

    for line in repo.list_branches():
        match = _DEV_BRANCH.match(line)
        if not match:
            continue
        ref, name, number = match.groups()
        version = VersionId.parse(number)
        versions[version] = VersionRecord(
            version=version,
            tag=name,
            type=VersionType.DEVELOPMENT,
            ref=ref,
        )

    logger.info(
        "Found %d release tags and %d development branches",
        sum(1 for record in versions.values() if record.type is VersionType.RELEASE),
        sum(1 for record in versions.values() if record.type is VersionType.DEVELOPMENT),
    )
    return versions


def assign_branches(
    branches: Iterable[BranchDefinition], versions: Mapping[VersionId, VersionRecord]
) -> None:
    """Fill each branch with the versions matching its pattern."""
    ordered = sorted(versions)
    for branch in branches:
        branch.releases = []
        for version in ordered:
            if matches(version, branch.pattern):
                record = versions[version]
                branch.releases.append(record)
                record.branch = branch
        logger.debug("Branch %s holds %d versions", branch.name, len(branch.releases))


def latest_release(pattern: VersionId, versions: Mapping[VersionId, VersionRecord]) -> VersionId:
    """Return the newest released version that sorts at or below ``pattern``.

    Versions are walked in ascending order and the walk stops at the first
    one sorting above the pattern. Nothing checks that the result actually
    belongs to the pattern's line, so ``8.1.x`` resolves to the newest 3.x
    release when no 8.x history exists.
    """
    found = _NO_RELEASE
    for version in sorted(versions):
        if compare(version, pattern) > 0:
            break
        if versions[version].type is VersionType.RELEASE:
            found = version
    return found


def resolve_branches(
    branches: Iterable[BranchDefinition],
    versions: Mapping[VersionId, VersionRecord],
    *,
    strict_lineage: bool = False,
) -> None:
    """Set ``latest_version`` and ``latest_tag`` on every branch."""
    for branch in branches:
        version = branch.pattern
        if branch.type is VersionType.RELEASE and branch.pattern.is_wildcard:
            version = latest_release(branch.pattern, versions)
            if not matches(version, branch.pattern):
                message = f"branch {branch.name} resolved to {version}, outside its line"
                if strict_lineage:
                    raise UnresolvedBranchError(branch.name, str(version), message)
                logger.warning(message)

        record = versions.get(version)
        if record is None:
            raise UnresolvedBranchError(branch.name, str(version))

        branch.latest_version = version
        branch.latest_tag = record.tag
        logger.info("Branch %s resolves to %s", branch.name, record.tag)


__all__ = [
    "RefSource",
    "assign_branches",
    "build_version_catalogue",
    "latest_release",
    "resolve_branches",
]
