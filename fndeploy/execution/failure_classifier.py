"""Failure classifier for upload retry decisions.

Bundling-phase failures describe the function source or the local
machine and would fail the same way again, so they are fatal. Upload-phase
failures come from the network or the platform and may clear up on their
own, so the orchestrator retries them.
"""

from enum import StrEnum

from fndeploy.core.errors import (
    ApiResponseError,
    BundleError,
    CompressionError,
    FilesystemError,
    InvalidSlugError,
    NoFunctionsFoundError,
    TransportError,
)


class FailureKind(StrEnum):
    TRANSIENT = "transient"
    FATAL = "fatal"


_TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    TransportError,
    ApiResponseError,
)

_FATAL_ERRORS: tuple[type[BaseException], ...] = (
    InvalidSlugError,
    NoFunctionsFoundError,
    FilesystemError,
    BundleError,
    CompressionError,
)


def classify_failure(exc: BaseException) -> FailureKind:
    """Return TRANSIENT for retryable upload errors, FATAL for everything else."""
    if isinstance(exc, _FATAL_ERRORS):
        return FailureKind.FATAL
    if isinstance(exc, _TRANSIENT_ERRORS):
        return FailureKind.TRANSIENT
    return FailureKind.FATAL


def is_transient(exc: BaseException) -> bool:
    return classify_failure(exc) == FailureKind.TRANSIENT
