"""CLI entrypoints for relcat commands."""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

import yaml

from .config import ConfigError, RelcatConfig, as_dict, load_config
from .documents import format_component_summary
from .errors import CatalogueError
from .git.repository import GitRepository
from .logging import configure_logging
from .orchestrator import Orchestrator

DEFAULT_REPOSITORY = "."
DEFAULT_OUTDIR = "wsbuild"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_source_options(parser: argparse.ArgumentParser) -> None:
    _add_verbose_option(parser, suppress_default=True)
    parser.add_argument(
        "--repo",
        default=None,
        help="Path to the git repository to mine (defaults to the configured repository or '.').",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .relcat.yml or its directory (defaults to the current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relcat",
        description="Build the release and component catalogue from git history.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Write the JSON document tree for the web API.",
    )
    _add_source_options(build_parser)
    build_parser.add_argument(
        "--outdir",
        default=None,
        help="Directory receiving the document tree.",
    )
    build_parser.add_argument(
        "--no-stage",
        action="store_true",
        help="Write directly into the output directory instead of swapping it in at the end.",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Run the whole pipeline without writing, failing on inconsistent history.",
    )
    _add_source_options(check_parser)

    components_parser = subparsers.add_parser(
        "components",
        help="Print the component repository in human-readable form.",
    )
    _add_source_options(components_parser)

    config_parser = subparsers.add_parser(
        "config",
        help="Print the effective configuration.",
    )
    _add_source_options(config_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for relcat commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file
    )

    try:
        config = _load_config(args)
    except ConfigError as exc:
        parser.exit(2, f"relcat: {exc}\n")

    if args.command == "config":
        print(yaml.safe_dump(as_dict(config), sort_keys=False), end="")
        return

    try:
        repository = GitRepository(_repository_path(args, config))
        orchestrator = Orchestrator(repository, config)
        if args.command == "build":
            stage = False if args.no_stage else None
            result = orchestrator.run(_outdir(args, config), stage=stage)
            print(f"Catalogue written to {result.outdir}")
        elif args.command == "check":
            result = orchestrator.collect()
            print(
                f"{len(result.versions)} versions, {len(result.components)} components: consistent"
            )
        elif args.command == "components":
            result = orchestrator.collect()
            print(format_component_summary(result.components), end="")
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except CatalogueError as exc:
        parser.exit(1, f"relcat {args.command} failed: {exc}\n")
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or str(exc)
        parser.exit(1, f"relcat {args.command} failed: git error: {detail}\n")
    except (OSError, RuntimeError) as exc:
        parser.exit(1, f"relcat {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _load_config(args: argparse.Namespace) -> RelcatConfig:
    return load_config(Path(args.config) if args.config else Path.cwd())


def _repository_path(args: argparse.Namespace, config: RelcatConfig) -> Path:
    if args.repo:
        return Path(args.repo)
    return config.repository or Path(DEFAULT_REPOSITORY)


def _outdir(args: argparse.Namespace, config: RelcatConfig) -> Path:
    if args.outdir:
        return Path(args.outdir)
    return config.output_dir or Path(DEFAULT_OUTDIR)


if __name__ == "__main__":
    main(sys.argv[1:])
