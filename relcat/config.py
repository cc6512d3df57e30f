"""Configuration loading for relcat (.relcat.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .components import DEFAULT_MODULES_ROOT, DEFAULT_PREFIXES, DEFAULT_README_NAME
from .errors import VersionFormatError
from .models import BranchDefinition, VersionType
from .versions import VersionId

CONFIG_FILENAME = ".relcat.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class BranchConfig:
    """A maintenance line as written in the configuration file."""

    type: VersionType
    branch: str
    description: str
    status: str

    def build(self) -> BranchDefinition:
        return BranchDefinition(
            type=self.type,
            pattern=VersionId.parse(self.branch),
            description=self.description,
            status=self.status,
        )


DEFAULT_BRANCHES: Sequence[BranchConfig] = (
    # release: publish the latest release tag in this line
    BranchConfig(VersionType.RELEASE, "3.0.x", "Latest stable branch", "stable"),
    BranchConfig(VersionType.RELEASE, "2.x.x", "Old stable branch", "end of life"),
    BranchConfig(VersionType.RELEASE, "1.x.x", "Obsolete stable branch", "obsolete"),
    BranchConfig(VersionType.RELEASE, "0.x.x", "Obsolete stable branch", "obsolete"),
    # development: publish the branch head itself
    BranchConfig(VersionType.DEVELOPMENT, "4.0.x", "Development branch", "development"),
)


@dataclass
class DownloadConfig:
    """Placeholder download links attached to release documents."""

    url: str = "ftp://ftp.freeradius.org/pub/freeradius/freeradius-server-{version}.{format}"
    formats: List[str] = field(default_factory=lambda: ["tar.gz", "tar.bz2"])


@dataclass
class RelcatConfig:
    """Represents the settings defined in .relcat.yml."""

    root: Path
    repository: Optional[Path] = None
    output_dir: Optional[Path] = None
    modules_root: str = DEFAULT_MODULES_ROOT
    component_prefixes: List[str] = field(default_factory=lambda: list(DEFAULT_PREFIXES))
    readme_name: str = DEFAULT_README_NAME
    component_url: str = "/api/info/component/{name}/"
    download: DownloadConfig = field(default_factory=DownloadConfig)
    stage_output: bool = True
    strict_branch_lineage: bool = False
    branches: List[BranchConfig] = field(default_factory=lambda: list(DEFAULT_BRANCHES))

    def branch_definitions(self) -> List[BranchDefinition]:
        """Return fresh, unpopulated branch definitions for one run."""
        return [branch.build() for branch in self.branches]


def load_config(config_path: Path) -> RelcatConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RelcatConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = RelcatConfig(root=root)

    repository = _as_str(data.get("repository"))
    if repository:
        config.repository = _resolve_path(root, repository)
    output_dir = _as_str(data.get("output_dir"))
    if output_dir:
        config.output_dir = _resolve_path(root, output_dir)

    config.modules_root = _as_str(data.get("modules_root")) or config.modules_root
    prefixes = _as_str_list(data.get("component_prefixes"))
    if prefixes:
        config.component_prefixes = prefixes
    config.readme_name = _as_str(data.get("readme_name")) or config.readme_name
    config.component_url = _as_str(data.get("component_url")) or config.component_url

    download_url = _as_str(data.get("download_url"))
    if download_url:
        config.download.url = download_url
    formats = _as_str_list(data.get("download_formats"))
    if formats:
        config.download.formats = formats

    stage = data.get("stage_output")
    if stage is not None:
        config.stage_output = _require_bool("stage_output", stage)
    strict = data.get("strict_branch_lineage")
    if strict is not None:
        config.strict_branch_lineage = _require_bool("strict_branch_lineage", strict)

    if "branches" in data:
        config.branches = _parse_branches(data.get("branches"))

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_path(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else (root / path)


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _parse_branches(value: Any) -> List[BranchConfig]:
    if not isinstance(value, list) or not value:
        raise ConfigError("branches must be a non-empty list")
    branches: List[BranchConfig] = []
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigError(f"branches[{index}] must be a mapping")
        raw_type = _as_str(item.get("type"))
        try:
            kind = VersionType(raw_type)
        except ValueError:
            raise ConfigError(f"branches[{index}].type must be 'release' or 'development'") from None
        pattern = _as_str(item.get("branch"))
        if not pattern:
            raise ConfigError(f"branches[{index}].branch is required")
        try:
            VersionId.parse(pattern)
        except VersionFormatError as exc:
            raise ConfigError(f"branches[{index}].branch: {exc}") from exc
        branches.append(
            BranchConfig(
                type=kind,
                branch=pattern,
                description=_as_str(item.get("description")) or "",
                status=_as_str(item.get("status")) or "",
            )
        )
    return branches


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _require_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigError(f"{key} must be true or false")


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


def as_dict(config: RelcatConfig) -> Dict[str, Any]:
    """Return a YAML-friendly view of the effective configuration."""
    return {
        "repository": str(config.repository) if config.repository else None,
        "output_dir": str(config.output_dir) if config.output_dir else None,
        "modules_root": config.modules_root,
        "component_prefixes": list(config.component_prefixes),
        "readme_name": config.readme_name,
        "component_url": config.component_url,
        "download_url": config.download.url,
        "download_formats": list(config.download.formats),
        "stage_output": config.stage_output,
        "strict_branch_lineage": config.strict_branch_lineage,
        "branches": [
            {
                "type": branch.type.value,
                "branch": branch.branch,
                "description": branch.description,
                "status": branch.status,
            }
            for branch in config.branches
        ],
    }


__all__ = [
    "BranchConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_BRANCHES",
    "DownloadConfig",
    "RelcatConfig",
    "as_dict",
    "load_config",
]
