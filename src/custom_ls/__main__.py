from __future__ import annotations

import argparse
import logging
import os

from custom_ls.lister import Lister
from custom_ls.listerconfig import ListerConfig
from custom_ls.listerconfig import write_new_config
from custom_ls.listermodel import ListingRequest
from custom_ls.listerstore import DescriptionStore
from custom_ls.listerstore import StoreError

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("custom_ls")


def build_parser() -> argparse.ArgumentParser:
    """Build the parser. Help is handled by main() so it never exits early."""
    parser = argparse.ArgumentParser(
        prog="cls",
        usage="%(prog)s [options] [path ...]",
        description="List information about the FILEs (the current directory by default).",
        epilog="Descriptions are kept in a JSON file keyed by absolute path.",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument(
        "-h",
        "--help",
        help="Display this help menu.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "-a",
        "--all",
        dest="show_hidden",
        help="Do not ignore entries starting with '.'.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="The path to an optional configuration file.",
        default=None,
    )
    parser.add_argument(
        "--make-config",
        metavar="PATH",
        type=str,
        help="Create a default configuration file at PATH and exit.",
        default=None,
    )
    parser.add_argument(
        "--describe",
        metavar=("PATH", "TEXT"),
        nargs=2,
        help="Set the description of PATH to TEXT and exit.",
        default=None,
    )
    parser.add_argument(
        "--prune",
        help="Remove descriptions of paths that no longer exist and exit.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--debug",
        help="Enable debug logging.",
        default=False,
        action="store_true",
    )
    return parser


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Every token that is not a known option is kept, in order, as a candidate
    path in `paths`.
    """
    namespace, candidates = build_parser().parse_known_args(args)
    namespace.paths = candidates
    return namespace


def existing_directories(paths: list[str]) -> list[str]:
    """Keep the paths that are existing directories, silently dropping the rest."""
    directories = [path for path in paths if os.path.isdir(path)]
    for path in set(paths) - set(directories):
        logger.debug("Ignoring '%s', not a directory", path)
    return directories


def describe(store: DescriptionStore, path: str, description: str) -> int:
    """Set the description of an existing path."""
    if not os.path.lexists(path):
        logger.error("Cannot describe '%s', it does not exist", path)
        return 1

    try:
        with store:
            store.describe(os.path.abspath(path), description)

    except StoreError as error:
        logger.error("%s", error)
        return 1

    return 0


def prune(store: DescriptionStore) -> int:
    """Remove descriptions of paths that no longer exist."""
    try:
        with store:
            removed = store.prune()

    except StoreError as error:
        logger.error("%s", error)
        return 1

    print(f"Removed {len(removed)} stale descriptions.")
    return 0


def main(*, cli_args: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(cli_args)

    if args.make_config:
        write_new_config(args.make_config)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    config = ListerConfig(args.config)
    store = DescriptionStore.from_config(config)

    if args.describe:
        return describe(store, *args.describe)

    if args.prune:
        return prune(store)

    directories = existing_directories(args.paths)

    if args.help:
        build_parser().print_help()
        if not directories:
            return 0

    if not directories:
        directories = [os.getcwd()]

    lister = Lister(config, store)
    exit_code = 0

    for directory in directories:
        request = ListingRequest(directory=directory, show_hidden=args.show_hidden)
        try:
            lister.list(request)

        except StoreError as error:
            logger.error("%s", error)
            exit_code = 1

        except OSError as error:
            logger.error("Could not list '%s': %s", directory, error)
            exit_code = 1

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
