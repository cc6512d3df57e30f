"""Persist the catalogue as a tree of JSON files."""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Iterable, Mapping

from .documents import build_branch_document
from .logging import get_logger
from .models import BranchDefinition, ComponentRecord


class OutputWriter:
    """Writes branch, release and component documents below ``outdir``.

    Layout::

        branch/<tag>.json
        branch/<tag>/release/<version>.json
        component/<name>.json

    With ``stage`` enabled the tree is built in a sibling scratch directory
    and only replaces ``outdir`` once every file has been written.
    """

    def __init__(self, outdir: Path, *, stage: bool = True) -> None:
        self.outdir = Path(outdir)
        self.stage = stage
        self.logger = get_logger("writer")
        self.written = 0

    def write(
        self,
        branches: Iterable[BranchDefinition],
        components: Mapping[str, ComponentRecord],
    ) -> Path:
        self.written = 0
        if not self.stage:
            self._write_tree(self.outdir, branches, components)
            return self.outdir

        self.outdir.parent.mkdir(parents=True, exist_ok=True)
        scratch = Path(tempfile.mkdtemp(prefix=f".{self.outdir.name}.", dir=self.outdir.parent))
        try:
            os.chmod(scratch, 0o755)
            self._write_tree(scratch, branches, components)
            self._swap(scratch)
        except BaseException:
            shutil.rmtree(scratch, ignore_errors=True)
            raise
        return self.outdir

    # ------------------------------------------------------------------
    # Internals

    def _write_tree(
        self,
        base: Path,
        branches: Iterable[BranchDefinition],
        components: Mapping[str, ComponentRecord],
    ) -> None:
        for branch in branches:
            tag = branch.latest_tag
            if tag is None:
                raise RuntimeError(f"branch {branch.name} has not been resolved")
            self._dump(base / "branch" / f"{tag}.json", build_branch_document(branch))
            release_dir = base / "branch" / tag / "release"
            release_dir.mkdir(parents=True, exist_ok=True)
            for record in branch.releases:
                if record.output is None:
                    continue
                # the web front end cannot parse 'x' in file names
                self._dump(release_dir / f"{record.version.filename()}.json", record.output)

        component_dir = base / "component"
        component_dir.mkdir(parents=True, exist_ok=True)
        for name in sorted(components):
            component = components[name]
            if component.output is None:
                continue
            self._dump(component_dir / f"{name}.json", component.output)
        self.logger.info("Wrote %d documents", self.written)

    def _dump(self, path: Path, payload: Mapping[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        self.written += 1
        self.logger.debug("Wrote %s", path)

    def _swap(self, scratch: Path) -> None:
        if not self.outdir.exists():
            os.replace(scratch, self.outdir)
            return
        retired = Path(tempfile.mkdtemp(prefix=f".{self.outdir.name}.old.", dir=self.outdir.parent))
        retired.rmdir()
        os.replace(self.outdir, retired)
        try:
            os.replace(scratch, self.outdir)
        except OSError:
            os.replace(retired, self.outdir)
            raise
        shutil.rmtree(retired, ignore_errors=True)


__all__ = ["OutputWriter"]
