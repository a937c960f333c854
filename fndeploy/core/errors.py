"""Error taxonomy for the deploy pipeline.

Bundling-phase errors (InvalidSlugError, NoFunctionsFoundError,
FilesystemError, BundleError, CompressionError) abort the current slug
immediately. Upload-phase errors (TransportError and the ApiResponseError
family) are retried by the orchestrator until the retry budget runs out.
See fndeploy.execution.failure_classifier for the mapping.
"""

from typing import Optional


class DeployError(Exception):
    """Base class for every error raised by the deploy pipeline."""


class InvalidSlugError(DeployError):
    """Raised when a function slug does not match the naming pattern."""

    def __init__(self, slug: str, pattern: str):
        self.slug = slug
        self.pattern = pattern
        super().__init__(
            f"Invalid Function name: {slug!r}. Must start with at least one letter, "
            f"and only include alphanumeric characters, underscores, and hyphens. "
            f"({pattern})"
        )


class NoFunctionsFoundError(DeployError):
    """Raised when no slugs were given and discovery found none."""

    def __init__(self, functions_dir: str):
        self.functions_dir = functions_dir
        super().__init__(f"No Functions specified or found in {functions_dir}")


class FilesystemError(DeployError):
    """Raised when the workspace or a bundle output cannot be created or read."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message)


class BundleError(DeployError):
    """Raised when the edge runtime exits nonzero or produces no output.

    Carries the runtime's diagnostic output. Treated as a defect in the
    function source, never as a transient fault.
    """

    def __init__(self, slug: str, message: str, output: str = ""):
        self.slug = slug
        self.output = output
        detail = f"\n{output.rstrip()}" if output else ""
        super().__init__(f"Error bundling function {slug}: {message}{detail}")


class CompressionError(DeployError):
    """Raised when the brotli stream cannot be produced."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(f"failed to compress brotli: {message}")


class TransportError(DeployError):
    """Raised when a request to the Functions API fails at the network level."""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"failed to {operation} function: {cause}")


class ApiResponseError(DeployError):
    """A non-success response from the Functions API.

    Keeps the status code and raw body so callers can surface the
    platform's own error message.
    """

    prefix = "Unexpected response from the Functions API"

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"{self.prefix} (status {status_code}): {body}")


class UnexpectedStatusError(ApiResponseError):
    prefix = "Unexpected error deploying Function"


class CreateFailedError(ApiResponseError):
    prefix = "Failed to create a new Function on the Supabase project"


class UpdateFailedError(ApiResponseError):
    prefix = "Failed to update an existing Function's body on the Supabase project"
