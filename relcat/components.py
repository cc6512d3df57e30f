"""Component discovery per version and the cross-version component repository."""

from __future__ import annotations

from typing import Dict, List, Mapping, Protocol, Sequence

from .errors import MalformedDocumentationError, ParentMismatchError
from .logging import get_logger
from .models import (
    BranchDefinition,
    ComponentObservation,
    ComponentRecord,
    TreeEntry,
    VersionRecord,
    VersionType,
)
from .readme import parse_readme
from .versions import VersionId, compare, matches

DEFAULT_MODULES_ROOT = "src/modules/"
DEFAULT_PREFIXES: Sequence[str] = ("rlm_", "proto_")
DEFAULT_README_NAME = "README.md"

logger = get_logger("components")


class TreeSource(Protocol):
    def list_tree(self, ref: str, path: str) -> Sequence[TreeEntry]: ...


class BlobSource(Protocol):
    def read_blob(self, handle: str) -> Sequence[str]: ...


def extract_components(
    repo: TreeSource,
    record: VersionRecord,
    *,
    root: str = DEFAULT_MODULES_ROOT,
    prefixes: Sequence[str] = DEFAULT_PREFIXES,
    readme_name: str = DEFAULT_README_NAME,
) -> Dict[str, ComponentObservation]:
    """Return the components present in one version, keyed by name.

    Directories under ``root`` named with one of ``prefixes`` are components.
    A component nested below another directory records that top-level
    directory as its parent, and a README inside a component directory
    records its blob handle.
    """
    root = root.rstrip("/") + "/"
    components: Dict[str, ComponentObservation] = {}
    # number of path segments in root; the segment after it names the parent
    depth = root.count("/")

    for entry in repo.list_tree(record.ref, root):
        if not entry.path.startswith(root):
            continue
        nodes = entry.path.split("/")
        is_tree = entry.kind == "tree"
        if is_tree:
            name = nodes[-1]
        elif nodes[-1] == readme_name:
            name = nodes[-2]
        else:
            continue

        if not name.startswith(tuple(prefixes)):
            continue

        component = components.setdefault(name, ComponentObservation(name=name))
        if is_tree and len(nodes) > depth + 1:
            component.parent = nodes[depth]
        if entry.kind == "blob":
            component.readme_blob = entry.handle

    logger.debug("%s: %d components", record.tag, len(components))
    return components


class ComponentAggregator:
    """Merges per-version observations into one record per component.

    Release versions define the advertised min/max range; development
    versions only widen a range that no release has pinned yet. The README
    always comes from the highest version that has one. The result does not
    depend on the order versions are observed in.
    """

    def __init__(self, branches: Sequence[BranchDefinition]) -> None:
        self._branches = list(branches)
        self._records: Dict[str, ComponentRecord] = {}

    @property
    def records(self) -> Dict[str, ComponentRecord]:
        return self._records

    def observe_all(
        self, observations: Mapping[str, ComponentObservation], record: VersionRecord
    ) -> None:
        for name in sorted(observations):
            self.observe(observations[name], record)

    def observe(self, observation: ComponentObservation, record: VersionRecord) -> ComponentRecord:
        version = record.version
        component = self._records.get(observation.name)
        if component is None:
            component = ComponentRecord(
                name=observation.name,
                min_release=version,
                max_release=version,
                max_dev_release=version,
            )
            self._records[observation.name] = component

        self._track_range(component, version, record.type)

        if compare(component.max_dev_release, version) < 0:
            component.max_dev_release = version

        if observation.parent is not None:
            if component.parent is not None and component.parent != observation.parent:
                raise ParentMismatchError(
                    component.name, str(version), component.parent, observation.parent
                )
            component.parent = observation.parent

        if observation.readme_blob is not None and (
            component.readme_version is None
            or compare(component.readme_version, version) < 0
        ):
            component.readme_blob = observation.readme_blob
            component.readme_version = version

        for branch in self._branches:
            if matches(version, branch.pattern):
                component.branches[branch.name] = branch

        return component

    @staticmethod
    def _track_range(component: ComponentRecord, version: VersionId, kind: VersionType) -> None:
        if kind is VersionType.RELEASE:
            if component.min_release.is_wildcard or compare(component.min_release, version) > 0:
                component.min_release = version
            if component.max_release.is_wildcard or compare(component.max_release, version) < 0:
                component.max_release = version
            return

        if component.min_release.is_wildcard and compare(component.min_release, version) > 0:
            component.min_release = version
        if component.max_release.is_wildcard and compare(component.max_release, version) < 0:
            component.max_release = version


def fetch_readmes(repo: BlobSource, records: Mapping[str, ComponentRecord]) -> None:
    """Parse the chosen README for every component that has one."""
    for name in sorted(records):
        component = records[name]
        if component.readme_blob is None:
            continue
        try:
            component.readme = parse_readme(repo.read_blob(component.readme_blob))
        except MalformedDocumentationError as exc:
            raise exc.for_component(name) from exc
        logger.debug("Parsed README for %s from %s", name, component.readme_version)


def branch_order(component: ComponentRecord, branches: Sequence[BranchDefinition]) -> List[BranchDefinition]:
    """Return the component's branches in configuration order."""
    return [branch for branch in branches if branch.name in component.branches]


__all__ = [
    "ComponentAggregator",
    "DEFAULT_MODULES_ROOT",
    "DEFAULT_PREFIXES",
    "DEFAULT_README_NAME",
    "branch_order",
    "extract_components",
    "fetch_readmes",
]
