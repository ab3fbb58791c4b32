from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from modelcat.app import build_catalog_snapshot, load_catalog
from modelcat.catalog import Catalog
from modelcat.config import ConfigurationError, configure_logging, get_catalog_config
from modelcat.domain.results import LookupMiss
from modelcat.domain.specs import SpecStyle, format_spec

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from modelcat.config import CatalogConfig

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build and query the model catalog")
    parser.add_argument("--config", type=Path, help="Catalog config file (TOML)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Accepted after the subcommand too; SUPPRESS keeps a top-level value.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config", type=Path, default=argparse.SUPPRESS, help="Catalog config file (TOML)"
    )

    build = subparsers.add_parser(
        "build", parents=[common], help="Build a snapshot from the configured sources"
    )
    build.add_argument("--output", type=Path, help="Snapshot file to write")
    build.add_argument(
        "--pull",
        action="store_true",
        help="Refresh upstream caches (e.g. OpenRouter) before building",
    )

    show = subparsers.add_parser("show", parents=[common], help="Print one model as JSON")
    show.add_argument("spec", help="Model spec, e.g. openai:gpt-4o")
    show.add_argument("--snapshot", type=Path, help="Snapshot file to read")

    select = subparsers.add_parser(
        "select", parents=[common], help="List models matching capability predicates"
    )
    select.add_argument(
        "--require",
        action="append",
        default=[],
        metavar="PATH[=BOOL]",
        help="Capability that must match, e.g. tools or json.native=true (repeatable)",
    )
    select.add_argument(
        "--forbid",
        action="append",
        default=[],
        metavar="PATH[=BOOL]",
        help="Capability that must not match (repeatable)",
    )
    select.add_argument(
        "--prefer", action="append", default=None, help="Preferred provider (repeatable)"
    )
    select.add_argument("--scope", help="Restrict to one provider")
    select.add_argument("--first", action="store_true", help="Print only the best match")
    select.add_argument(
        "--style",
        choices=[style.value for style in SpecStyle],
        default=SpecStyle.PROVIDER_COLON_MODEL.value,
        help="Output spec style (default: %(default)s)",
    )
    select.add_argument("--snapshot", type=Path, help="Snapshot file to read")

    return parser.parse_args(list(argv))


def _parse_predicate(value: str) -> tuple[str, bool]:
    path, sep, raw = value.partition("=")
    path = path.strip()
    if not path:
        raise ValueError(f"Invalid capability predicate: {value!r}")
    if not sep:
        return path, True
    match raw.strip().lower():
        case "true" | "1" | "yes":
            return path, True
        case "false" | "0" | "no":
            return path, False
        case _:
            raise ValueError(f"Invalid boolean in predicate: {value!r}")


def _show(catalog: Catalog, spec: str) -> None:
    model = catalog.get_spec(spec)
    if isinstance(model, LookupMiss):
        raise LookupError(f"{spec}: {model}")
    print(json.dumps(model.to_record(), indent=2, sort_keys=True))  # noqa: T201


def _select(
    catalog: Catalog,
    args: argparse.Namespace,
    require: list[tuple[str, bool]],
    forbid: list[tuple[str, bool]],
) -> None:
    if args.first:
        key = catalog.select_first(require, forbid, args.prefer, args.scope)
        if isinstance(key, LookupMiss):
            raise LookupError(f"No model matches: {key}")
        keys = [key]
    else:
        keys = catalog.select(require, forbid, args.prefer, args.scope)
    for key in keys:
        print(format_spec(key, args.style))  # noqa: T201


def _load(args: argparse.Namespace, config: CatalogConfig) -> Catalog:
    return load_catalog(snapshot_path=args.snapshot, config=config, catalog=Catalog())


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        config = get_catalog_config(parsed_args.config)
        require: list[tuple[str, bool]] = []
        forbid: list[tuple[str, bool]] = []
        if parsed_args.command == "select":
            require = [_parse_predicate(value) for value in parsed_args.require]
            forbid = [_parse_predicate(value) for value in parsed_args.forbid]
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "build":
            snapshot, path = build_catalog_snapshot(
                config=config, output=parsed_args.output, pull=parsed_args.pull
            )
            log.info(
                "Wrote %s providers and %s models to %s",
                len(snapshot.providers),
                len(snapshot),
                path,
            )
        elif parsed_args.command == "show":
            catalog = _load(parsed_args, config)
            _show(catalog, parsed_args.spec)
        elif parsed_args.command == "select":
            catalog = _load(parsed_args, config)
            _select(catalog, parsed_args, require, forbid)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Command failed")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
