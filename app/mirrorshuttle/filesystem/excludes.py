"""User exclusion matching."""

import os
from collections.abc import Iterable

from mirrorshuttle.core.config import clean_path


def is_excluded(path: str, excludes: Iterable[str]) -> bool:
    """Check if a path is excluded by any entry.

    A path is excluded when it equals an entry or is nested below one. The
    test uses relative paths, so ``/real/dir1x`` is not excluded by
    ``/real/dir1``. Entries are expected to be normalized already.

    Args:
        path: Absolute path to check; trimmed and normalized first.
        excludes: Normalized absolute excluded paths.

    Returns:
        True if the path is excluded.
    """
    candidate = clean_path(path)

    for excluded in excludes:
        if candidate == excluded:
            return True
        try:
            rel = os.path.relpath(candidate, excluded)
        except ValueError:
            # Different drives on Windows
            continue
        if rel != os.pardir and not rel.startswith(os.pardir + os.sep):
            return True

    return False
