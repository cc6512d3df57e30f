"""Pipeline orchestration for catalogue runs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .catalogue import assign_branches, build_version_catalogue, resolve_branches
from .components import ComponentAggregator, extract_components, fetch_readmes
from .config import RelcatConfig
from .documents import build_component_document, build_release_document
from .git.repository import GitRepository
from .logging import get_logger
from .models import BranchDefinition, ComponentRecord, VersionRecord
from .versions import VersionId
from .writer import OutputWriter


@dataclass
class CatalogueResult:
    """Everything derived from the repository in one run."""

    branches: List[BranchDefinition]
    versions: Dict[VersionId, VersionRecord]
    components: Dict[str, ComponentRecord]
    outdir: Optional[Path] = None


class Orchestrator:
    """Runs the catalogue pipeline against one repository.

    The git collaborator and configuration are passed in explicitly; nothing
    is read from module state.
    """

    def __init__(self, repository: GitRepository, config: RelcatConfig) -> None:
        self.repository = repository
        self.config = config
        self.logger = get_logger("orchestrator")

    def collect(self) -> CatalogueResult:
        """Mine the repository and build every document in memory."""
        config = self.config
        branches = config.branch_definitions()

        versions = build_version_catalogue(self.repository)
        assign_branches(branches, versions)
        resolve_branches(branches, versions, strict_lineage=config.strict_branch_lineage)

        for version in sorted(versions):
            record = versions[version]
            record.output = build_release_document(
                record,
                self.repository.commit_date(record.ref),
                download=config.download,
                url_template=config.component_url,
            )

        aggregator = ComponentAggregator(branches)
        for version in sorted(versions):
            record = versions[version]
            observations = extract_components(
                self.repository,
                record,
                root=config.modules_root,
                prefixes=config.component_prefixes,
                readme_name=config.readme_name,
            )
            aggregator.observe_all(observations, record)
        components = aggregator.records
        self.logger.info(
            "Aggregated %d components across %d versions", len(components), len(versions)
        )

        fetch_readmes(self.repository, components)
        for component in components.values():
            component.output = build_component_document(component, branches)

        return CatalogueResult(branches=branches, versions=versions, components=components)

    def run(self, outdir: Path, *, stage: Optional[bool] = None) -> CatalogueResult:
        """Build the catalogue and write it to ``outdir``."""
        result = self.collect()
        writer = OutputWriter(
            outdir, stage=self.config.stage_output if stage is None else stage
        )
        result.outdir = writer.write(result.branches, result.components)
        self.logger.info("Catalogue written to %s", result.outdir)
        return result


__all__ = ["CatalogueResult", "Orchestrator"]
