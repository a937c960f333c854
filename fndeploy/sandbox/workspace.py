"""Scoped output workspace for one bundler run.

The directory is created world-writable because some CI runners (e.g.
Bitbucket Pipelines) map container users such that bind mounts must be
writable by anyone. It is removed on every exit path; a failed removal
is logged and never replaces the error that is already propagating.
"""

import logging
import os
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from fndeploy.core.errors import FilesystemError

logger = logging.getLogger(__name__)

WORKSPACE_MODE = 0o777


@contextmanager
def scoped_workspace(temp_dir: Path, slug: str) -> Iterator[Path]:
    """Create ``<temp_dir>/.output_<slug>`` and yield its absolute path."""
    workspace = (Path(temp_dir) / f".output_{slug}").absolute()
    try:
        # A run killed before cleanup can leave a stale output.eszip behind.
        if workspace.exists():
            logger.debug("Removing leftover workspace %s", workspace)
            shutil.rmtree(workspace)
        workspace.mkdir(parents=True, exist_ok=True)
        # mkdir() applies the umask; chmod sets the mode exactly.
        os.chmod(workspace, WORKSPACE_MODE)
    except OSError as exc:
        raise FilesystemError(f"failed to mkdir {workspace}: {exc}", cause=exc)

    logger.debug("Created workspace %s", workspace)
    try:
        yield workspace
    finally:
        try:
            shutil.rmtree(workspace)
        except OSError as exc:
            logger.warning("Failed to remove workspace %s: %s", workspace, exc)
