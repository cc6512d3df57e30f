"""Builders for the JSON documents served by the web API."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from .components import branch_order
from .config import DownloadConfig
from .models import BranchDefinition, ComponentRecord, VersionRecord

DEFAULT_COMPONENT_URL = "/api/info/component/{name}/"
RELEASE_SUMMARY = "The focus of this release is testing"
COMPONENT_CATEGORY = "io"


def component_url(name: str, template: str = DEFAULT_COMPONENT_URL) -> str:
    """Return the relative URL of a component page."""
    return template.format(name=name)


def build_branch_document(branch: BranchDefinition) -> Dict[str, Any]:
    return {
        "name": branch.latest_tag,
        "description": branch.description,
        "status": branch.status,
    }


def build_release_document(
    record: VersionRecord,
    date: str,
    *,
    download: DownloadConfig | None = None,
    url_template: str = DEFAULT_COMPONENT_URL,
) -> Dict[str, Any]:
    """Build the release document for one version.

    Download links, features and defects are placeholders until release
    notes are tracked in the repository.
    """
    download = download or DownloadConfig()
    version = str(record.version)

    links: List[Dict[str, str]] = []
    for archive in download.formats:
        url = download.url.format(version=version, format=archive)
        links.append({"name": archive, "url": url, "sig_url": f"{url}.sig"})

    def _components(*names: str) -> List[Dict[str, str]]:
        return [{"name": name, "url": component_url(name, url_template)} for name in names]

    return {
        "download": links,
        "features": [
            {"description": "Test feature", "component": _components("rlm_always")},
        ],
        "defects": [
            {"description": "Test issue", "exploit": False, "component": _components("rlm_rest")},
        ],
        "name": version,
        "summary": RELEASE_SUMMARY,
        "date": date,
    }


def build_component_document(
    component: ComponentRecord, branches: Sequence[BranchDefinition] = ()
) -> Dict[str, Any]:
    available = [branch.latest_tag for branch in branch_order(component, branches)]
    return {
        "available": available,
        "name": component.name,
        "description": component.readme.summary if component.readme else None,
        # TODO: read the category from module metadata once READMEs carry it
        "category": COMPONENT_CATEGORY,
        "documentation_link": "",
    }


def format_component_summary(records: Mapping[str, ComponentRecord]) -> str:
    """Render the component repository as plain text, one block per component."""
    lines: List[str] = []
    for name in sorted(records):
        component = records[name]
        lines.append(name)
        lines.append(f"\tmin: {component.min_release}")
        lines.append(f"\tmax: {component.max_release}")
        lines.append(f"\tlatest: {component.max_dev_release}")
        if component.parent is not None:
            lines.append(f"\tparent: {component.parent}")
        if component.readme_blob is not None:
            lines.append(f"\treadme blob: {component.readme_blob}")
            lines.append(f"\treadme version: {component.readme_version}")
        if component.branches:
            lines.append(f"\tbranches: {', '.join(sorted(component.branches))}")
        lines.append("")
    return "\n".join(lines)


__all__ = [
    "COMPONENT_CATEGORY",
    "RELEASE_SUMMARY",
    "build_branch_document",
    "build_component_document",
    "build_release_document",
    "component_url",
    "format_component_summary",
]
