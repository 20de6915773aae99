"""Version Tokens — extraction from route file stems and numeric-aware ordering.

Invariants:
    - The token is the last dot-separated segment of the stem: `v?` + digits + optional `.digits` groups
    - A stem without a token is DEFAULT_VERSION
    - DEFAULT_VERSION sorts first; other versions compare numerically ("2" < "10", "1.9" < "1.10")
    - base path = "/" + stem without the token and its separator

Design Decisions:
    - Token must be dot-separated from the name: `oauth2.router.py` is base `/oauth2`, not version 2
"""

import re

from endurance.core.domain_types import DEFAULT_VERSION

_VERSION_TOKEN = re.compile(r"^(?P<name>.+?)\.v?(?P<version>\d+(?:\.\d+)*)$")
_NUMERIC_RUN = re.compile(r"(\d+)")


def extract_version(stem: str) -> tuple[str, str]:
    """Split a route stem into (base path, version).

    >>> extract_version("users.v2")
    ('/users', '2')
    >>> extract_version("users.1.2.0")
    ('/users', '1.2.0')
    >>> extract_version("users")
    ('/users', 'default')
    """
    match = _VERSION_TOKEN.match(stem)
    if match is None:
        return f"/{stem}", DEFAULT_VERSION
    return f"/{match.group('name')}", match.group("version")


def version_sort_key(version: str) -> tuple:
    """Sort key: default first, then natural (numeric-aware) order."""
    if version == DEFAULT_VERSION:
        return (0, ())
    chunks = _NUMERIC_RUN.split(version.lower())
    key = tuple(
        (0, int(chunk), "") if chunk.isdigit() else (1, 0, chunk)
        for chunk in chunks
        if chunk
    )
    return (1, key)


def sort_versions(versions) -> list[str]:
    return sorted(versions, key=version_sort_key)


def mount_path(base_path: str, version: str) -> str:
    """`/v{version}{base_path}`, or the bare base path for the default version."""
    if version == DEFAULT_VERSION:
        return base_path
    return f"/v{version}{base_path}"
