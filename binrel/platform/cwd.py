"""Working-directory guard.

Build tooling may ``chdir`` while it runs. The pipeline resolves relative
paths (zip output, build directories) against the directory it was started
from, so collaborator calls are wrapped in ``preserved_cwd()``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

__all__ = ["preserved_cwd"]

log = logging.getLogger(__name__)


@contextmanager
def preserved_cwd() -> Iterator[Path]:
    """Yield the current directory and restore it on every exit path."""
    original = Path.cwd()
    try:
        yield original
    finally:
        if Path.cwd() != original:
            log.debug("restoring working directory to %s", original)
            os.chdir(original)
