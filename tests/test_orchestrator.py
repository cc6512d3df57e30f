"""End-to-end tests for relcat.orchestrator against scripted history."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from relcat.config import BranchConfig, RelcatConfig
from relcat.errors import ParentMismatchError, UnresolvedBranchError
from relcat.models import VersionType
from relcat.orchestrator import Orchestrator
from relcat.versions import VersionId
from tests._fixtures.fake_git import FakeGit

JULY_2017 = 1500292800  # 2017-07-17T12:00:00Z


def _config(tmp_path: Path, *branches: BranchConfig) -> RelcatConfig:
    config = RelcatConfig(root=tmp_path)
    if branches:
        config.branches = list(branches)
    return config


def _load(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _seed_history(fake_git: FakeGit) -> None:
    fake_git.tag(
        "release_2_2_8",
        {"rlm_sql": "# rlm_sql\n## Summary\nOld summary.\n", "rlm_sql/drivers/rlm_sql_mysql": None},
        date=JULY_2017 - 86400,
    )
    fake_git.tag("release_3_0_5", {"rlm_sql": None, "rlm_rest": None}, date=JULY_2017 - 3600)
    fake_git.tag(
        "release_3_0_15",
        {"rlm_sql": "# rlm_sql\n## Summary\nStable summary.\n", "rlm_rest": None, "rlm_always": None},
        date=JULY_2017,
    )
    fake_git.branch(
        "  remotes/origin/v3.0.x",
        {"rlm_sql": None, "rlm_rest": None, "rlm_always": None},
        date=JULY_2017 + 60,
    )
    fake_git.branch(
        "  remotes/origin/v4.0.x",
        {
            "rlm_sql": "# rlm_sql\n## Summary\nDevelopment summary.\n",
            "proto_dhcp": "# proto_dhcp\n## Summary\nDHCP.\n",
        },
        date=JULY_2017 + 120,
    )


def test_run_writes_catalogue(tmp_path: Path, fake_git: FakeGit) -> None:
    _seed_history(fake_git)
    config = _config(
        tmp_path,
        BranchConfig(VersionType.RELEASE, "3.0.x", "Latest stable branch", "stable"),
        BranchConfig(VersionType.RELEASE, "2.x.x", "Old stable branch", "end of life"),
        BranchConfig(VersionType.DEVELOPMENT, "4.0.x", "Development branch", "development"),
    )
    outdir = tmp_path / "out"

    result = Orchestrator(fake_git.repository(), config).run(outdir)

    assert result.outdir == outdir
    assert [branch.latest_tag for branch in result.branches] == [
        "release_3_0_15",
        "release_2_2_8",
        "v4.0.x",
    ]
    assert _load(outdir / "branch" / "release_3_0_15.json") == {
        "name": "release_3_0_15",
        "description": "Latest stable branch",
        "status": "stable",
    }
    release_dir = outdir / "branch" / "release_3_0_15" / "release"
    assert sorted(path.name for path in release_dir.iterdir()) == [
        "3.0.0.json",
        "3.0.15.json",
        "3.0.5.json",
    ]
    release = _load(release_dir / "3.0.15.json")
    assert release["name"] == "3.0.15"
    assert release["date"] == "2017-07-17T12:00:00Z"
    assert release["download"][0]["url"].endswith("freeradius-server-3.0.15.tar.gz")
    assert _load(outdir / "branch" / "v4.0.x" / "release" / "4.0.0.json")["name"] == "4.0.x"

    sql = _load(outdir / "component" / "rlm_sql.json")
    assert sql == {
        "available": ["release_3_0_15", "release_2_2_8", "v4.0.x"],
        "name": "rlm_sql",
        "description": "Development summary.\n",
        "category": "io",
        "documentation_link": "",
    }
    assert _load(outdir / "component" / "rlm_always.json")["description"] is None
    assert sorted(path.name for path in (outdir / "component").iterdir()) == [
        "proto_dhcp.json",
        "rlm_always.json",
        "rlm_rest.json",
        "rlm_sql.json",
        "rlm_sql_mysql.json",
    ]


def test_collect_builds_component_history(tmp_path: Path, fake_git: FakeGit) -> None:
    _seed_history(fake_git)

    config = _config(
        tmp_path,
        BranchConfig(VersionType.RELEASE, "3.0.x", "stable", "stable"),
        BranchConfig(VersionType.DEVELOPMENT, "4.0.x", "dev", "development"),
    )

    result = Orchestrator(fake_git.repository(), config).collect()

    sql = result.components["rlm_sql"]
    assert sql.min_release == VersionId.parse("2.2.8")
    assert sql.max_release == VersionId.parse("3.0.15")
    assert sql.max_dev_release == VersionId.parse("4.0.x")
    assert sql.readme_version == VersionId.parse("4.0.x")
    dhcp = result.components["proto_dhcp"]
    assert (str(dhcp.min_release), str(dhcp.max_release)) == ("4.0.x", "4.0.x")
    assert result.components["rlm_sql_mysql"].parent == "rlm_sql"
    assert result.outdir is None


def test_stable_branch_selects_newest_release_tag(tmp_path: Path, fake_git: FakeGit) -> None:
    fake_git.tag("release_3_0_5", {"rlm_sql": None})
    fake_git.tag("release_3_0_15", {"rlm_sql": None})
    fake_git.tag("release_2_2_8", {"rlm_sql": None})
    fake_git.branch("  v3.0.x", {"rlm_sql": None})
    fake_git.branch("  v2.2.x", {"rlm_sql": None})
    config = _config(tmp_path, BranchConfig(VersionType.RELEASE, "3.0.x", "stable", "stable"))

    Orchestrator(fake_git.repository(), config).run(tmp_path / "out")

    release_dir = tmp_path / "out" / "branch" / "release_3_0_15" / "release"
    assert (release_dir / "3.0.15.json").is_file()
    assert not (tmp_path / "out" / "branch" / "v2.2.x.json").exists()


def test_development_only_component_release_file(tmp_path: Path, fake_git: FakeGit) -> None:
    fake_git.tag("release_3_0_15", {"rlm_sql": None})
    fake_git.branch("  v4.0.x", {"rlm_sql": None, "proto_bfd": None})
    config = _config(
        tmp_path,
        BranchConfig(VersionType.RELEASE, "3.0.x", "stable", "stable"),
        BranchConfig(VersionType.DEVELOPMENT, "4.0.x", "dev", "development"),
    )

    Orchestrator(fake_git.repository(), config).run(tmp_path / "out")

    release_files = [path.name for path in (tmp_path / "out").rglob("release/*.json")]
    assert "4.0.0.json" in release_files
    assert all("x" not in name for name in release_files)
    assert _load(tmp_path / "out" / "component" / "proto_bfd.json")["available"] == ["v4.0.x"]


def test_parent_conflict_aborts_without_output(tmp_path: Path, fake_git: FakeGit) -> None:
    fake_git.tag("release_3_0_5", {"rlm_sql/drivers/rlm_sql_mysql": None})
    fake_git.tag("release_3_0_15", {"rlm_sqlng/drivers/rlm_sql_mysql": None})
    config = _config(tmp_path, BranchConfig(VersionType.RELEASE, "3.0.x", "stable", "stable"))

    with pytest.raises(ParentMismatchError) as excinfo:
        Orchestrator(fake_git.repository(), config).run(tmp_path / "out")

    assert excinfo.value.component == "rlm_sql_mysql"
    assert not (tmp_path / "out").exists()


def test_missing_development_branch_aborts(tmp_path: Path, fake_git: FakeGit) -> None:
    fake_git.tag("release_3_0_15", {"rlm_sql": None})
    config = _config(
        tmp_path,
        BranchConfig(VersionType.RELEASE, "3.0.x", "stable", "stable"),
        BranchConfig(VersionType.DEVELOPMENT, "4.0.x", "dev", "development"),
    )

    with pytest.raises(UnresolvedBranchError) as excinfo:
        Orchestrator(fake_git.repository(), config).collect()

    assert excinfo.value.branch == "4.0.x"
