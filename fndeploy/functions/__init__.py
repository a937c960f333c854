"""Function discovery and per-function configuration."""

from fndeploy.functions.config import (
    FunctionConfig,
    FunctionConfigResolver,
    FunctionEntry,
    StaticFunctionConfigResolver,
)
from fndeploy.functions.slugs import discover, resolve, validate

__all__ = [
    "FunctionConfig",
    "FunctionConfigResolver",
    "FunctionEntry",
    "StaticFunctionConfigResolver",
    "discover",
    "resolve",
    "validate",
]
