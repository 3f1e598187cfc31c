"""EarthPin - Extract and Update Base Images in Earthfiles."""

import json
import logging
import sys

from earthpin.extract import extract_package_file
from earthpin.models import PackageDependency
from earthpin.utils.parsers.args import parse_args
from earthpin.utils.parsers.earthfile import is_earthfile
from earthpin.utils.update_earthfile import apply_update, earthfile_diff

logger = logging.getLogger(__name__)


def find_dep(deps: list[PackageDependency], name: str) -> PackageDependency | None:
    """Return the first updatable dependency known by ``name``."""
    for dep in deps:
        if dep.skip_reason:
            continue
        if name in (dep.dep_name, dep.package_name):
            return dep
    return None


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface."""
    args = parse_args(argv)

    # Set logging level
    log_level = getattr(logging, args.verbosity)
    logging.basicConfig(level=log_level)

    if not is_earthfile(args.file.as_posix()):
        logger.warning("%s is not named Earthfile or *.earth", args.file)

    try:
        # Keep \r\n line endings intact
        with args.file.open(newline="") as f:
            content = f.read()
    except FileNotFoundError:
        logger.exception("Earthfile not found: %s", args.file)
        raise

    deps = extract_package_file(content, registry_aliases=args.registry_aliases) or []
    logger.info("Found %d images in %s", len(deps), args.file)

    if args.dep is None:
        json.dump([dep.to_dict() for dep in deps], sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    dep = find_dep(deps, args.dep)
    if dep is None:
        logger.error("No updatable image %s in %s", args.dep, args.file)
        return 1

    new_content = apply_update(
        content,
        dep,
        new_value=args.new_value or dep.current_value,
        new_digest=args.new_digest,
    )
    earthfile_diff(
        content=content,
        updated_content=new_content,
        file_path=args.file,
        prompt=not args.no_prompt,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
