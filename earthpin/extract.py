"""Extract base image dependencies from Earthfiles."""

import logging
from collections.abc import Mapping

from earthpin.models import PackageDependency
from earthpin.utils.dependency import get_dep
from earthpin.utils.parsers.earthfile import (
    detect_linefeed,
    image_candidates,
    logical_lines,
    split_lines,
)
from earthpin.utils.parsers.variables import VariableTable, resolve_image
from earthpin.utils.replace import process_dep_for_auto_replace

logger = logging.getLogger(__name__)


def extract_package_file(
    content: str,
    registry_aliases: Mapping[str, str] | None = None,
) -> list[PackageDependency] | None:
    """Extract every image an Earthfile builds from or pulls.

    Args:
        content: Text of the Earthfile
        registry_aliases: Registry prefixes to look up under another name

    Returns:
        The dependencies in file order, or None if the file has none

    Example:
        >>> deps = extract_package_file("FROM alpine:3.18\\n")
        >>> deps[0].dep_name, deps[0].current_value, deps[0].dep_type
        ('alpine', '3.18', 'base')

    """
    if not isinstance(content, str):
        logger.debug("Ignoring non-text Earthfile content: %r", type(content))
        return None

    linefeed = detect_linefeed(content)
    lines = split_lines(content)
    instructions = list(logical_lines(lines))
    variables = VariableTable.build(instructions)

    deps = []
    for instruction in instructions:
        for candidate in image_candidates(instruction):
            image, line_ranges = resolve_image(candidate, variables)

            if image == "scratch":
                logger.debug("Skipping scratch")
                continue

            dep = get_dep(image, True, registry_aliases)
            if dep.skip_reason:
                logger.debug("Skipping %s: %s", candidate.image, dep.skip_reason)
                dep.replace_string = candidate.image
            process_dep_for_auto_replace(dep, line_ranges, lines, linefeed)
            dep.dep_type = dep.dep_type or instruction.target

            logger.debug(
                "Earthfile docker image %s:%s@%s in %s",
                dep.dep_name,
                dep.current_value,
                dep.current_digest,
                dep.dep_type,
            )
            deps.append(dep)

    if not deps:
        return None

    return deps
