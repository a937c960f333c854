"""Per-function configuration lookup.

Loading the project config file is not this package's job; callers hand
in already-parsed per-function settings. This module only applies the
precedence rules:

  import map:  explicit override > per-function entry > project fallback
  verify_jwt:  explicit flag > per-function entry > True
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FunctionConfig:
    """Resolved settings for one function."""

    import_map: Optional[str] = None
    verify_jwt: bool = True


@runtime_checkable
class FunctionConfigResolver(Protocol):
    """Resolves the FunctionConfig to deploy a slug with."""

    def resolve(
        self,
        slug: str,
        import_map_override: Optional[str] = None,
        no_verify_jwt: Optional[bool] = None,
    ) -> FunctionConfig:
        ...  # noqa: PLR6301


@dataclass
class FunctionEntry:
    """A function's entry as it appears in project config; unset fields are None."""

    import_map: Optional[str] = None
    verify_jwt: Optional[bool] = None


class StaticFunctionConfigResolver:
    """Resolver over an in-memory mapping of slug -> FunctionEntry.

    `fallback_import_map` is the project-wide import map; it is only used
    when the file actually exists.
    """

    def __init__(
        self,
        functions: Optional[Mapping[str, FunctionEntry]] = None,
        fallback_import_map: Optional[Path] = None,
    ):
        self._functions = dict(functions or {})
        self._fallback_import_map = fallback_import_map

    def resolve(
        self,
        slug: str,
        import_map_override: Optional[str] = None,
        no_verify_jwt: Optional[bool] = None,
    ) -> FunctionConfig:
        entry = self._functions.get(slug, FunctionEntry())

        import_map = import_map_override or entry.import_map
        if not import_map and self._fallback_import_map is not None:
            if self._fallback_import_map.is_file():
                import_map = str(self._fallback_import_map)

        if no_verify_jwt is not None:
            verify_jwt = not no_verify_jwt
        elif entry.verify_jwt is not None:
            verify_jwt = entry.verify_jwt
        else:
            verify_jwt = True

        logger.debug(
            "Function config for %s: import_map=%s verify_jwt=%s",
            slug, import_map, verify_jwt,
        )
        return FunctionConfig(import_map=import_map or None, verify_jwt=verify_jwt)
