"""Update the Earthfile with new image versions."""

import difflib
import logging
from pathlib import Path

from earthpin.models import PackageDependency
from earthpin.utils.replace import render_template

logger = logging.getLogger(__name__)


def apply_update(
    content: str,
    dep: PackageDependency,
    new_value: str | None = None,
    new_digest: str | None = None,
) -> str:
    """Write a new tag and/or digest for a dependency into the Earthfile.

    Args:
        content: Earthfile the dependency was extracted from
        dep: Dependency to update
        new_value: New tag, dropped from the image when None
        new_digest: New digest, dropped from the image when None

    Returns:
        The updated Earthfile content

    Raises:
        ValueError: If the dependency can not be updated in this content

    """
    if dep.skip_reason or not dep.replace_string or not dep.auto_replace_string_template:
        msg = f"Dependency {dep.dep_name or dep.replace_string} can not be updated"
        raise ValueError(msg)

    if dep.replace_string not in content:
        msg = f"Replace string {dep.replace_string!r} not found in content"
        raise ValueError(msg)

    new_string = render_template(
        dep.auto_replace_string_template,
        dep,
        new_value=new_value,
        new_digest=new_digest,
    )
    logger.info(
        "updating %s from %s to %s",
        dep.dep_name,
        dep.current_value,
        new_value,
    )

    return content.replace(dep.replace_string, new_string, 1)


def earthfile_diff(
    content: str,
    updated_content: str,
    file_path: Path,
    prompt: bool = True,
) -> bool:
    """Show a diff between the old and new Earthfile and write the new one.

    Returns:
        bool: True if the file was written

    """
    if updated_content == content:
        logger.info("No changes for %s", file_path)
        return False

    diff = "\n".join(
        difflib.unified_diff(
            content.splitlines(),
            updated_content.splitlines(),
            fromfile=f"{file_path} (old)",
            tofile=f"{file_path} (new)",
            lineterm="",
        ),
    )
    logger.info("\n%s", diff)

    if prompt:
        response = input(f"Update {file_path}? (y/N): ").strip().lower()
        if response != "y":
            logger.info("Skipping update for %s", file_path)
            return False

    # Keep the line terminators of the original file
    with file_path.open("w", newline="") as f:
        f.write(updated_content)
    logger.info("Updated %s", file_path)
    return True
