"""Function slug discovery and validation.

A function lives in ``<functions_dir>/<slug>/index.ts``. Discovery derives
slugs from those directory names and silently skips any that fail the
naming pattern, so helper directories such as ``_shared`` can sit next to
real functions. Explicitly requested slugs are validated instead, and the
first invalid one aborts the whole call before anything touches disk.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from fndeploy.core.errors import InvalidSlugError, NoFunctionsFoundError

logger = logging.getLogger(__name__)

SLUG_PATTERN = r"^[A-Za-z][A-Za-z0-9_-]*$"
_SLUG_RE = re.compile(SLUG_PATTERN)

ENTRYPOINT_FILENAME = "index.ts"


def is_valid_slug(slug: str) -> bool:
    return bool(_SLUG_RE.match(slug))


def validate_slug(slug: str) -> str:
    """Return `slug` unchanged, or raise InvalidSlugError."""
    if not isinstance(slug, str) or not is_valid_slug(slug):
        raise InvalidSlugError(str(slug), SLUG_PATTERN)
    return slug


def validate(slugs: Iterable[str]) -> list[str]:
    """Validate explicitly requested slugs, preserving order."""
    return [validate_slug(slug) for slug in slugs]


def discover(functions_dir: Path) -> list[str]:
    """Scan `functions_dir` for ``*/index.ts`` and return valid slugs, sorted."""
    slugs: list[str] = []
    for entrypoint in sorted(Path(functions_dir).glob(f"*/{ENTRYPOINT_FILENAME}")):
        slug = entrypoint.parent.name
        if is_valid_slug(slug):
            slugs.append(slug)
        else:
            logger.debug("Skipping %s: not a valid function name", entrypoint.parent)
    return slugs


def resolve(functions_dir: Path, slugs: Optional[Iterable[str]] = None) -> list[str]:
    """Return the work list for a deploy run.

    Explicit slugs win and are validated without any filesystem access.
    Otherwise every function under `functions_dir` is discovered.

    Raises:
        InvalidSlugError: If an explicit slug is malformed.
        NoFunctionsFoundError: If the resulting list is empty.
    """
    requested = list(slugs or [])
    if requested:
        resolved = validate(requested)
    else:
        resolved = discover(functions_dir)

    if not resolved:
        raise NoFunctionsFoundError(str(functions_dir))
    return resolved
