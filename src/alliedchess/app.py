"""Application entry point."""

from __future__ import annotations

import argparse
import sys

from alliedchess.core.layouts import LAYOUTS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alliedchess",
        description="Two allied factions against the Enemy engine.",
    )
    parser.add_argument("--config", help="path to a TOML settings file")
    parser.add_argument("--layout", choices=sorted(LAYOUTS), help="starting layout")
    parser.add_argument("--depth", type=int, help="Enemy search depth in plies")
    parser.add_argument("--seed", type=int, help="seed for the Enemy evaluation noise")
    parser.add_argument(
        "--server",
        metavar="URL",
        help="relay server URL; play online with an ally instead of hot-seat",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="logging verbosity",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Launch the AlliedChess console game."""
    from alliedchess.bootstrap import configure_logging, run_application
    from alliedchess.config import load_settings

    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config)
        if args.layout is not None:
            settings.layout = args.layout
        if args.depth is not None:
            settings.engine.depth = args.depth
        if args.seed is not None:
            settings.engine.seed = args.seed
        if args.server is not None:
            settings.server = args.server
        if args.log_level is not None:
            settings.log_level = args.log_level
        settings.validate()
    except ValueError as exc:
        print(f"alliedchess: {exc}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    return run_application(settings, sys.argv[:1])


if __name__ == "__main__":
    sys.exit(main())
