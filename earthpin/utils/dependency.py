"""Turn image references into dependency descriptors."""

import logging
import re
from collections.abc import Callable, Mapping

from docker.utils import parse_repository_tag

from earthpin.models import (
    DOCKER_DATASOURCE,
    SKIP_CONTAINS_VARIABLE,
    SKIP_INVALID_VALUE,
    PackageDependency,
)
from earthpin.utils.parsers.variables import VARIABLE_MARKER
from earthpin.utils.replace import (
    DEP_NAME_TEMPLATE,
    PACKAGE_NAME_TEMPLATE,
    get_auto_replace_template,
)
from earthpin.utils.versioning import (
    DEBIAN_VERSIONING,
    UBUNTU_VERSIONING,
    debian_is_version,
)

logger = logging.getLogger(__name__)

# "${IMAGE:-alpine:3.18}" or "${IMAGE:-"alpine:3.18"}"
DEFAULT_VALUE_REGEX = re.compile(r'^\$\{.+?:-"?(?P<value>.*?)"?\}$')
QUAY_REGEX = re.compile(r"^quay\.io(?::[1-9][0-9]{0,4})?", re.IGNORECASE)

SPECIAL_PREFIXES = ("amd64", "arm64", "library")


def split_image_parts(image: str) -> PackageDependency:
    """Split an image into name, tag and digest.

    A ``${VAR:-default}`` expression is reduced to its default. The last
    colon separates the tag unless what follows it contains a ``/``, in which
    case the colon belongs to a registry port.

    Example:
        >>> dep = split_image_parts("registry:5000/app:1.0@sha256:abc")
        >>> dep.dep_name, dep.current_value, dep.current_digest
        ('registry:5000/app', '1.0', 'sha256:abc')

    """
    is_variable = False
    cleaned = image

    if VARIABLE_MARKER in cleaned:
        default_match = DEFAULT_VALUE_REGEX.match(cleaned)
        if default_match and default_match.group("value"):
            is_variable = True
            cleaned = default_match.group("value")

        if VARIABLE_MARKER in cleaned:
            # e.g. "$REGISTRY/alpine", which can not be resolved
            return PackageDependency(skip_reason=SKIP_CONTAINS_VARIABLE)

    repository, digest = parse_repository_tag(cleaned) if "@" in cleaned else (cleaned, None)
    dep_name, current_value = parse_repository_tag(repository)

    dep = PackageDependency(
        dep_name=dep_name,
        current_value=current_value,
        current_digest=digest,
    )

    if is_variable:
        dep.replace_string = cleaned
        dep.current_value = dep.current_value or None
        dep.current_digest = dep.current_digest or None

    return dep


def unwrap_special_prefix(dep: PackageDependency) -> bool:
    """Hide ``amd64/``, ``arm64/`` and ``library/`` from the display name."""
    changed = False
    for prefix in SPECIAL_PREFIXES:
        if dep.dep_name.startswith(f"{prefix}/"):
            dep.package_name = dep.dep_name
            dep.dep_name = dep.dep_name[len(prefix) + 1 :]
            changed = True
    return changed


def normalize_quay_host(dep: PackageDependency) -> bool:
    """Hide the port of a quay.io registry from the display name."""
    if not QUAY_REGEX.match(dep.dep_name):
        return False

    dep_name = QUAY_REGEX.sub("quay.io", dep.dep_name, count=1)
    if dep_name == dep.dep_name:
        return False

    dep.package_name = dep.dep_name
    dep.dep_name = dep_name
    return True


# Each rule returns True when it rewrote dep_name into a display name
NORMALIZATION_RULES: tuple[Callable[[PackageDependency], bool], ...] = (
    unwrap_special_prefix,
    normalize_quay_host,
)


def assign_versioning(dep: PackageDependency) -> None:
    """Pick a versioning scheme for images which do not use semver."""
    if dep.dep_name == "ubuntu":
        dep.versioning = UBUNTU_VERSIONING
    elif dep.dep_name == "debian" and debian_is_version(dep.current_value):
        dep.versioning = DEBIAN_VERSIONING


def _resolve_registry_alias(
    image: str,
    registry_aliases: Mapping[str, str],
) -> PackageDependency | None:
    for name, value in registry_aliases.items():
        match = re.match(rf"{re.escape(name)}/(?P<rest>.+)", image)
        if not match:
            continue

        logger.debug("Resolving %s through registry alias %s=%s", image, name, value)
        dep = get_dep(f"{value}/{match.group('rest')}")
        # The file keeps the alias, only the lookup goes through its target
        dep.replace_string = image
        dep.auto_replace_string_template = get_auto_replace_template(dep)
        return dep
    return None


def get_dep(
    image: str | None,
    specify_replace_string: bool = True,
    registry_aliases: Mapping[str, str] | None = None,
) -> PackageDependency:
    """Build a dependency descriptor from a fully substituted image.

    Args:
        image: Image reference, e.g. ``docker.io/library/nginx:1.25``
        specify_replace_string: Set the replace string and template
        registry_aliases: Registry prefixes to look up under another name

    Returns:
        The dependency, or a dependency carrying a skip reason

    """
    if not isinstance(image, str) or not image.strip():
        return PackageDependency(skip_reason=SKIP_INVALID_VALUE)

    alias_dep = _resolve_registry_alias(image, registry_aliases or {})
    if alias_dep:
        return alias_dep

    dep = split_image_parts(image)
    if specify_replace_string:
        if not dep.replace_string:
            dep.replace_string = image
        dep.auto_replace_string_template = DEP_NAME_TEMPLATE
    dep.datasource = DOCKER_DATASOURCE

    if dep.skip_reason:
        return dep

    for rule in NORMALIZATION_RULES:
        if rule(dep) and specify_replace_string:
            dep.auto_replace_string_template = PACKAGE_NAME_TEMPLATE

    assign_versioning(dep)
    return dep
