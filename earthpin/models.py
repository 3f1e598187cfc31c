"""Dataclasses."""

from collections.abc import Iterator
from dataclasses import asdict, dataclass

DOCKER_DATASOURCE = "docker"

SKIP_INVALID_VALUE = "invalid-value"
SKIP_CONTAINS_VARIABLE = "contains-variable"


@dataclass(frozen=True)
class LineRange:
    """Closed range of physical lines (0-indexed) in an Earthfile."""

    start: int
    end: int

    def lines(self) -> Iterator[int]:
        """Iterate over every line number covered by the range."""
        return iter(range(self.start, self.end + 1))


@dataclass(frozen=True)
class LogicalLine:
    """Represents one instruction, possibly folded from several lines."""

    line_range: LineRange
    text: str
    target: str  # Target block the instruction belongs to


@dataclass(frozen=True)
class VariableDeclaration:
    """Represents an ARG, LET or SET declaration."""

    name: str
    default_value: str
    line_range: LineRange


@dataclass(frozen=True)
class ImageCandidate:
    """Raw image reference found on a logical line."""

    image: str
    line_range: LineRange


@dataclass
class PackageDependency:
    """Represents a base image dependency extracted from an Earthfile."""

    dep_name: str | None = None
    package_name: str | None = None  # Full name when dep_name is prettified
    current_value: str | None = None  # Tag
    current_digest: str | None = None
    datasource: str | None = None
    versioning: str | None = None
    dep_type: str | None = None  # Target the image is used in
    skip_reason: str | None = None
    replace_string: str | None = None
    auto_replace_string_template: str | None = None

    def to_dict(self) -> dict[str, str]:
        """Return the populated fields as a dictionary."""
        return {key: value for key, value in asdict(self).items() if value is not None}
