"""Parser Utils for Earthfiles."""

import re
from collections.abc import Iterator

from earthpin.models import ImageCandidate, LineRange, LogicalLine

DEFAULT_TARGET = "base"

EARTHFILE_REGEX = re.compile(r"(?:^|/)(?:Earthfile|[^/]+\.earth)$")
NEWLINE_REGEX = re.compile(r"\r?\n")
LINE_CONTINUATION_REGEX = re.compile(r"\\[ \t]*$|^[ \t]*#")
TARGET_REGEX = re.compile(r"^(?P<target>\S+?):(?:\s|$)", re.MULTILINE)

WITH_DOCKER_REGEX = re.compile(r"^[ \t]*WITH DOCKER", re.IGNORECASE | re.MULTILINE)
PULL_REGEX = re.compile(
    r"--pull(?:\s*=\s*|\s+)(?P<image>[^\s+]+)",
    re.IGNORECASE | re.MULTILINE,
)
# Comments and escaped newlines may sit between FROM and the image
FROM_REGEX = re.compile(
    r"^[ \t]*FROM(?:\\[ \t]*\r?\n| |\t|#.*?\r?\n|--platform=\S+|--allow-privileged)+"
    r"(?P<image>[^\s+]+)",
    re.IGNORECASE | re.MULTILINE,
)


def is_earthfile(path: str) -> bool:
    """Check whether a path names an ``Earthfile`` or a ``*.earth`` file."""
    return EARTHFILE_REGEX.search(path) is not None


def detect_linefeed(content: str) -> str:
    """Return the line terminator used by the content."""
    return "\r\n" if "\r\n" in content else "\n"


def split_lines(content: str) -> list[str]:
    """Split content into physical lines without their terminators."""
    return NEWLINE_REGEX.split(content)


def _is_target_header(line: str) -> bool:
    return TARGET_REGEX.search(line) is not None


def logical_lines(lines: list[str]) -> Iterator[LogicalLine]:
    """Fold physical lines into logical lines.

    A line is extended while it ends with a ``\\`` continuation or while the
    following lines are comments. Comment lines and target headers are never
    extended, so a header is always seen on its own.

    Args:
        lines: Physical lines of the Earthfile

    Yields:
        LogicalLine records in file order, tagged with the current target

    """
    current_target = DEFAULT_TARGET
    line_number = 0

    while line_number < len(lines):
        start = line_number
        instruction = lines[line_number]
        lookahead = instruction

        while (
            not instruction.lstrip().startswith("#")
            and not _is_target_header(lookahead)
            and LINE_CONTINUATION_REGEX.search(lookahead)
            and line_number + 1 < len(lines)
        ):
            line_number += 1
            lookahead = lines[line_number]
            instruction += "\n" + lookahead

        target_match = TARGET_REGEX.search(instruction)
        if target_match:
            current_target = target_match.group("target")

        yield LogicalLine(
            line_range=LineRange(start, line_number),
            text=instruction,
            target=current_target,
        )
        line_number += 1


def image_candidates(line: LogicalLine) -> list[ImageCandidate]:
    """Find image references on a logical line.

    Every ``--pull`` image of a ``WITH DOCKER`` instruction is collected, then
    the ``FROM`` image if there is one. A ``+`` ends the capture because it
    marks a target reference rather than an image.
    """
    images = []

    if WITH_DOCKER_REGEX.search(line.text):
        images.extend(match.group("image") for match in PULL_REGEX.finditer(line.text))

    from_match = FROM_REGEX.search(line.text)
    if from_match:
        images.append(from_match.group("image"))

    return [ImageCandidate(image=image, line_range=line.line_range) for image in images]
