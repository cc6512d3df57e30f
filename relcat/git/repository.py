"""Read-only access to the git history relcat mines."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List

from ..logging import get_logger
from ..models import TreeEntry

DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class GitRepository:
    """Runs git plumbing commands against a work tree or bare repository."""

    def __init__(self, path: str | Path, runner: Callable[..., str] | None = None) -> None:
        self.path = Path(path).expanduser()
        if not ((self.path / ".git").exists() or (self.path / "HEAD").is_file()):
            raise RuntimeError(f"{self.path} is not a Git repository")
        self._runner = runner or self._default_runner
        self.logger = get_logger("git")

    def list_tags(self) -> List[str]:
        return _lines(self._run(["git", "tag", "-l"]))

    def list_branches(self) -> List[str]:
        """Return raw ``git branch -a`` lines, markers and indentation included."""
        output = self._run(["git", "branch", "-a"])
        return [line.rstrip() for line in output.splitlines() if line.strip()]

    def list_tree(self, ref: str, path: str) -> List[TreeEntry]:
        output = self._run(["git", "ls-tree", "-r", "-t", ref, path])
        entries: List[TreeEntry] = []
        for line in output.splitlines():
            if not line.strip():
                continue
            meta, _, entry_path = line.partition("\t")
            fields = meta.split()
            if len(fields) != 3 or not entry_path:
                self.logger.debug("Skipping unexpected ls-tree line %r", line)
                continue
            mode, kind, handle = fields
            entries.append(TreeEntry(mode=mode, kind=kind, handle=handle, path=entry_path))
        return entries

    def read_blob(self, handle: str) -> List[str]:
        return self._run(["git", "cat-file", "blob", handle]).splitlines()

    def commit_date(self, ref: str) -> str:
        """Return the commit date of ``ref`` as ``YYYY-MM-DDTHH:MM:SSZ`` in UTC."""
        stamp = self._run(["git", "log", "-1", "--format=%ct", ref]).strip()
        moment = datetime.fromtimestamp(int(stamp), tz=timezone.utc)
        return moment.strftime(DATE_FORMAT)

    def _run(self, args: Iterable[str]) -> str:
        command = list(args)
        self.logger.debug("Running %s", " ".join(command))
        return self._runner(command, cwd=self.path, capture_output=True)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        import subprocess

        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


def _lines(output: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


__all__ = ["DATE_FORMAT", "GitRepository"]
