"""Replace strings and auto-replace templates for extracted images."""

import re

from earthpin.models import LineRange, PackageDependency

NEW_VALUE_PLACEHOLDER = "{{#if newValue}}{{newValue}}{{/if}}"
NEW_DIGEST_PLACEHOLDER = "{{#if newDigest}}@{{newDigest}}{{/if}}"

DEP_NAME_TEMPLATE = (
    "{{depName}}{{#if newValue}}:{{newValue}}{{/if}}{{#if newDigest}}@{{newDigest}}{{/if}}"
)
PACKAGE_NAME_TEMPLATE = (
    "{{packageName}}{{#if newValue}}:{{newValue}}{{/if}}{{#if newDigest}}@{{newDigest}}{{/if}}"
)

IF_BLOCK_REGEX = re.compile(r"\{\{#if (?P<name>\w+)\}\}(?P<body>.*?)\{\{/if\}\}", re.DOTALL)
FIELD_REGEX = re.compile(r"\{\{(?P<name>\w+)\}\}")


def _find_unnamed(text: str, old: str) -> re.Match | None:
    """Find the first occurrence of ``old`` that is not part of a name.

    In ``ARG V18=18`` only the value after ``=`` is found.
    """
    return re.search(rf"(?<![\w$]){re.escape(old)}", text)


def _replace_first(text: str, old: str, new: str) -> str:
    match = _find_unnamed(text, old)
    if match is None:
        return text.replace(old, new, 1)
    return text[: match.start()] + new + text[match.end() :]


def get_auto_replace_template(dep: PackageDependency) -> str | None:
    """Turn the replace string of a dependency into a template.

    The current value and digest are swapped for placeholders, so rendering
    the template with them gives back the replace string.
    """
    template = dep.replace_string
    if template is None:
        return None

    if dep.current_value:
        placeholder = NEW_VALUE_PLACEHOLDER
        if not dep.current_digest:
            placeholder += NEW_DIGEST_PLACEHOLDER
        template = _replace_first(template, dep.current_value, placeholder)

    if dep.current_digest:
        digest = f"@{dep.current_digest}"
        if digest in template:
            template = template.replace(digest, NEW_DIGEST_PLACEHOLDER, 1)
        else:
            template = _replace_first(
                template,
                dep.current_digest,
                "{{#if newDigest}}{{newDigest}}{{/if}}",
            )

    return template


def _contains_current_version(dep: PackageDependency, line: str) -> bool:
    return bool(
        (dep.current_value and _find_unnamed(line, dep.current_value))
        or (dep.current_digest and _find_unnamed(line, dep.current_digest)),
    )


def process_dep_for_auto_replace(
    dep: PackageDependency,
    line_ranges: list[LineRange],
    lines: list[str],
    linefeed: str,
) -> None:
    """Widen the replace string of a dependency to every line it came from.

    When variables were substituted into an image, the tag or digest lives on
    a declaration line instead of the instruction line. The replace string
    then becomes the verbatim block of lines spanning every contributing range
    that holds the current value or digest.

    Args:
        dep: Dependency to update in place
        line_ranges: Instruction range followed by the declaration ranges used
        lines: Physical lines of the Earthfile
        linefeed: Line terminator of the Earthfile

    """
    if len(line_ranges) == 1 or dep.skip_reason:
        return

    ranges_to_replace = [
        line_range
        for line_range in line_ranges
        if any(_contains_current_version(dep, lines[n]) for n in line_range.lines())
    ]
    if not ranges_to_replace:
        # Without a tag or digest the image itself is rewritten where it is declared
        if any(dep.replace_string in lines[n] for rng in line_ranges for n in rng.lines()):
            return
        ranges_to_replace = line_ranges

    ranges_to_replace = sorted(ranges_to_replace, key=lambda line_range: line_range.start)
    min_line = ranges_to_replace[0].start
    max_line = max(line_range.end for line_range in ranges_to_replace)

    dep.replace_string = linefeed.join(lines[min_line : max_line + 1])

    # Leave room for a digest without touching the following line
    if not dep.current_digest and max_line + 1 < len(lines):
        dep.replace_string += linefeed

    dep.auto_replace_string_template = get_auto_replace_template(dep)


def render_template(
    template: str,
    dep: PackageDependency,
    new_value: str | None = None,
    new_digest: str | None = None,
) -> str:
    """Render an auto-replace template.

    Args:
        template: Template using ``{{field}}`` and ``{{#if field}}...{{/if}}``
        dep: Dependency providing ``depName`` and ``packageName``
        new_value: Tag to write, rendered as empty text when missing
        new_digest: Digest to write, rendered as empty text when missing

    Returns:
        The rendered text

    """
    fields = {
        "depName": dep.dep_name,
        "packageName": dep.package_name,
        "newValue": new_value,
        "newDigest": new_digest,
    }

    def render_if(match: re.Match) -> str:
        return match.group("body") if fields.get(match.group("name")) else ""

    rendered = IF_BLOCK_REGEX.sub(render_if, template)
    return FIELD_REGEX.sub(lambda match: fields.get(match.group("name")) or "", rendered)
