"""Convention Classifier — file role from (file name, parent folder name).

Invariants:
    - A folder named `public` marks its whole subtree as static assets
    - A role suffix only counts inside its matching folder name
    - Anything else is IGNORED, never an error
"""

from endurance.core.domain_types import UnitKind

STATIC_FOLDER = "public"

# Checked in order; first match wins.
_RULES: tuple[tuple[str, str, UnitKind], ...] = (
    ("middlewares", "middleware", UnitKind.MIDDLEWARE),
    ("listeners", "listener", UnitKind.LISTENER),
    ("consumers", "consumer", UnitKind.CONSUMER),
    ("crons", "cron", UnitKind.CRON),
    ("routes", "router", UnitKind.ROUTE),
)

SKIPPED_DIRECTORIES = frozenset({"__pycache__"})


def classify(file_name: str, folder_name: str) -> UnitKind:
    """Classify a file by its `.role.<ext>` suffix and containing folder."""
    if folder_name == STATIC_FOLDER:
        return UnitKind.STATIC
    for folder, role, kind in _RULES:
        if folder_name == folder and role_of(file_name) == role:
            return kind
    return UnitKind.IGNORED


def role_of(file_name: str) -> str | None:
    """`users.v2.router.py` → `router`; None when there is no role segment."""
    parts = file_name.split(".")
    if len(parts) < 3 or not parts[0]:
        return None
    return parts[-2]


def strip_role(file_name: str) -> str:
    """`users.v2.router.py` → `users.v2`."""
    return file_name.rsplit(".", 2)[0]


def is_static_folder(directory_name: str) -> bool:
    return directory_name == STATIC_FOLDER


def is_skipped_directory(directory_name: str) -> bool:
    return directory_name in SKIPPED_DIRECTORIES or directory_name.startswith(".")
