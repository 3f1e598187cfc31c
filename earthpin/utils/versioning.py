"""Versioning schemes assigned to base images."""

import re

UBUNTU_VERSIONING = "ubuntu"
DEBIAN_VERSIONING = "debian"

DEBIAN_CODENAMES = frozenset(
    {
        "buzz",
        "rex",
        "bo",
        "hamm",
        "slink",
        "potato",
        "woody",
        "sarge",
        "etch",
        "lenny",
        "squeeze",
        "wheezy",
        "jessie",
        "stretch",
        "buster",
        "bullseye",
        "bookworm",
        "trixie",
        "forky",
        "duke",
    },
)
DEBIAN_SUITES = frozenset({"oldoldstable", "oldstable", "stable", "testing", "unstable", "sid"})
DEBIAN_VERSION_REGEX = re.compile(r"^\d+(?:\.\d+){0,2}$")


def debian_is_version(version: str | None) -> bool:
    """Check whether a tag looks like a Debian release.

    Numeric releases (``12``, ``12.4``), codenames (``bookworm``) and suite
    aliases (``stable``) are accepted.
    """
    if not version:
        return False
    return (
        DEBIAN_VERSION_REGEX.match(version) is not None
        or version in DEBIAN_CODENAMES
        or version in DEBIAN_SUITES
    )
