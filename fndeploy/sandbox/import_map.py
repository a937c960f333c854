"""Expose a host import map and its local modules to the bundler container.

An import map may point at local directories (``"utils/": "../_shared/"``).
Those targets must be visible inside the container at the path the map
resolves them to, so each one is bind-mounted read-only at its own
absolute POSIX path. Remote targets (``https://``, ``npm:``, ``jsr:``...)
are left to the runtime.
"""

import json
import logging
from pathlib import Path, PurePosixPath
from typing import Iterator

from fndeploy.core.errors import FilesystemError
from fndeploy.sandbox.types import Bind

logger = logging.getLogger(__name__)

_REMOTE_PREFIXES = ("http://", "https://", "npm:", "jsr:", "node:", "data:")


def to_container_path(host_path: Path) -> str:
    """Map an absolute host path to the path used for it inside the container.

    Windows drive paths become ``/c/Users/...``; POSIX paths are unchanged.
    """
    path = Path(host_path).absolute()
    drive = path.drive
    if drive:
        parts = path.parts[1:]
        return str(PurePosixPath("/", drive.rstrip(":").lower(), *parts))
    return path.as_posix()


def _local_targets(import_map: dict) -> Iterator[str]:
    imports = import_map.get("imports") or {}
    if isinstance(imports, dict):
        yield from (v for v in imports.values() if isinstance(v, str))

    scopes = import_map.get("scopes") or {}
    if isinstance(scopes, dict):
        for mapping in scopes.values():
            if isinstance(mapping, dict):
                yield from (v for v in mapping.values() if isinstance(v, str))


def _is_remote(target: str) -> bool:
    return target.startswith(_REMOTE_PREFIXES)


def bind_import_map(host_path: Path) -> tuple[list[Bind], str]:
    """Return (binds, container_path) for the import map at `host_path`.

    Raises:
        FilesystemError: If the file cannot be read or is not a JSON object.
    """
    host_file = Path(host_path).absolute()
    try:
        payload = json.loads(host_file.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise FilesystemError(f"failed to read import map {host_file}: {exc}", cause=exc)
    except json.JSONDecodeError as exc:
        raise FilesystemError(f"failed to parse import map {host_file}: {exc}", cause=exc)

    if not isinstance(payload, dict):
        raise FilesystemError(f"import map {host_file} must be a JSON object")

    container_file = to_container_path(host_file)
    binds = [Bind(source=str(host_file), target=container_file)]
    seen = {container_file}

    base_dir = host_file.parent
    for target in _local_targets(payload):
        if _is_remote(target):
            continue
        resolved = (base_dir / target).resolve()
        # A target like "./utils/" maps a prefix; mount the whole directory.
        mount_root = resolved if target.endswith("/") or resolved.is_dir() else resolved.parent
        container_dir = to_container_path(mount_root)
        if container_dir in seen:
            continue
        seen.add(container_dir)
        binds.append(Bind(source=str(mount_root), target=container_dir))

    logger.debug("Import map %s needs %d bind(s)", host_file, len(binds))
    return binds, container_file
