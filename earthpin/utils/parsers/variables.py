"""Build-time variable declarations and their substitution into images."""

import logging
import re
from collections.abc import Iterable

from earthpin.models import ImageCandidate, LineRange, LogicalLine, VariableDeclaration

logger = logging.getLogger(__name__)

VARIABLE_MARKER = "$"

# Similar to a Dockerfile ARG, except that flags are accepted and a "+" ends
# the value since it refers to a target rather than an image
DECLARATION_REGEX = re.compile(
    r"^[ \t]*(?:ARG|LET|SET)(?:\\[ \t]*\r?\n| |--global|\t|#.*?\r?\n)+"
    r"(?P<name>\w+)[ =](?P<value>[^\s+]*)",
    re.IGNORECASE | re.MULTILINE,
)
VARIABLE_REGEX = re.compile(
    r"(?P<full>\\?\$(?P<simple>\w+)|\\?\$\{(?P<complex>\w+)(?::.+?)?\}+)",
    re.IGNORECASE,
)


def match_declaration(line: LogicalLine) -> VariableDeclaration | None:
    """Return the variable declared on a logical line, if any."""
    match = DECLARATION_REGEX.search(line.text)
    if not match:
        return None

    value = match.group("value")
    if value.startswith('"') and value.endswith('"'):
        value = value[1:-1]

    return VariableDeclaration(
        name=match.group("name"),
        default_value=value,
        line_range=line.line_range,
    )


class VariableTable:
    """Declarations of an Earthfile, keyed by variable name.

    The table is filled once from the logical lines and only read afterwards.
    A lookup only sees declarations that start before the referencing line,
    the last one of which wins.
    """

    def __init__(self, declarations: Iterable[VariableDeclaration] = ()) -> None:
        self._declarations: dict[str, list[VariableDeclaration]] = {}
        for declaration in declarations:
            self._declarations.setdefault(declaration.name, []).append(declaration)

    @classmethod
    def build(cls, lines: Iterable[LogicalLine]) -> "VariableTable":
        """Collect every declaration found on the given logical lines."""
        declarations = []
        for line in lines:
            declaration = match_declaration(line)
            if declaration:
                declarations.append(declaration)
        return cls(declarations)

    def lookup(self, name: str, before_line: int) -> VariableDeclaration | None:
        """Return the declaration of ``name`` in force at ``before_line``."""
        for declaration in reversed(self._declarations.get(name, [])):
            if declaration.line_range.start < before_line:
                return declaration
        return None

    def __contains__(self, name: str) -> bool:
        return name in self._declarations

    def __len__(self) -> int:
        return len(self._declarations)


def resolve_image(
    candidate: ImageCandidate,
    table: VariableTable,
) -> tuple[str, list[LineRange]]:
    """Substitute known variables into a candidate image.

    Args:
        candidate: Image reference as written in the Earthfile
        table: Variable declarations of the same file

    Returns:
        The substituted image and the line ranges that contributed to it,
        starting with the candidate's own range

    """
    image = candidate.image
    line_ranges = [candidate.line_range]

    if VARIABLE_MARKER not in image:
        return image, line_ranges

    def substitute(match: re.Match) -> str:
        name = match.group("simple") or match.group("complex")
        declaration = table.lookup(name, before_line=candidate.line_range.start)
        if declaration is None:
            logger.debug("No declaration for %s in %s", name, candidate.image)
            return match.group("full")
        if declaration.line_range not in line_ranges[1:]:
            line_ranges.append(declaration.line_range)
        return declaration.default_value

    # Tokens are replaced where they matched, so "$REG" never touches "$REG_PATH"
    image = VARIABLE_REGEX.sub(substitute, image)
    return image, line_ranges
