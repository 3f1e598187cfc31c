"""Argument Parser for the EarthPin Package."""

import argparse
from pathlib import Path


def registry_alias(value: str) -> tuple[str, str]:
    """Parse a ``PREFIX=REPLACEMENT`` registry alias."""
    prefix, sep, replacement = value.partition("=")
    if not sep or not prefix or not replacement:
        msg = f"invalid registry alias {value!r}, expected PREFIX=REPLACEMENT"
        raise argparse.ArgumentTypeError(msg)
    return prefix, replacement


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract and update base images in Earthfiles.",
    )

    parser.add_argument(
        "file",
        type=Path,
        nargs="?",
        default=Path("Earthfile"),
        help="Path to the Earthfile or a *.earth file.",
    )
    parser.add_argument(
        "--registry-alias",
        type=registry_alias,
        action="append",
        default=[],
        metavar="PREFIX=REPLACEMENT",
        help="Look up images under PREFIX in the REPLACEMENT registry. May be repeated.",
    )
    parser.add_argument(
        "--verbosity",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="WARNING",
        help="Set logging level.",
    )
    parser.add_argument(
        "--dep",
        help="Name of the image to update. Extracted images are printed when omitted.",
    )
    parser.add_argument(
        "--new-value",
        help="New tag for the image given with --dep. Defaults to the current tag.",
    )
    parser.add_argument(
        "--new-digest",
        help="New digest for the image given with --dep.",
    )
    parser.add_argument(
        "--no-prompt",
        "-y",
        action="store_true",
        help="Skip prompting for confirmation before writing changes",
    )

    args = parser.parse_args(argv)
    if args.dep is None and (args.new_value or args.new_digest):
        parser.error("--new-value and --new-digest require --dep")
    args.registry_aliases = dict(args.registry_alias)

    return args
