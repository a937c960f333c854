"""Management API client for Edge Functions.

Three calls are needed by the uploader:

  probe   GET   /v1/projects/{ref}/functions/{slug}
  create  POST  /v1/projects/{ref}/functions?slug=..&name=..&verify_jwt=..
  update  PATCH /v1/projects/{ref}/functions/{slug}?verify_jwt=..

Function metadata travels as query parameters; the request body is the
compressed eszip. Network-level failures are raised as TransportError,
HTTP statuses are returned as-is for the uploader to interpret.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

import httpx

from fndeploy.core.config import Settings
from fndeploy.core.errors import TransportError
from fndeploy.packaging.eszip import ESZIP_CONTENT_TYPE

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    """Status code and raw body of one API call."""

    status_code: int
    body: str = ""

    def json(self) -> Optional[dict]:
        """Parsed JSON object body, or None when the body is not one."""
        try:
            payload = json.loads(self.body) if self.body else None
        except ValueError:
            return None
        return payload if isinstance(payload, dict) else None


@dataclass
class FunctionMetadata:
    """Metadata sent alongside a bundle on create and update."""

    verify_jwt: bool
    import_map_path: str
    entrypoint_path: str

    def to_params(self) -> dict[str, str]:
        return {
            "verify_jwt": "true" if self.verify_jwt else "false",
            "import_map_path": self.import_map_path,
            "entrypoint_path": self.entrypoint_path,
        }


@runtime_checkable
class FunctionsApi(Protocol):
    """The three Functions endpoints the uploader drives."""

    async def probe(self, project_ref: str, slug: str) -> ApiResponse:
        ...  # noqa: PLR6301

    async def create(
        self, project_ref: str, slug: str, metadata: FunctionMetadata, body: bytes
    ) -> ApiResponse:
        ...  # noqa: PLR6301

    async def update(
        self, project_ref: str, slug: str, metadata: FunctionMetadata, body: bytes
    ) -> ApiResponse:
        ...  # noqa: PLR6301


class HttpxFunctionsClient:
    """FunctionsApi over an httpx.AsyncClient.

    Pass `client` to share a connection pool or to inject a mock transport
    in tests; otherwise one is built from settings and closed by aclose().
    """

    def __init__(
        self,
        api_url: str,
        access_token: str = "",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = client is None
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        self._client = client or httpx.AsyncClient(
            base_url=api_url,
            headers=headers,
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpxFunctionsClient":
        return cls(
            api_url=settings.api_url,
            access_token=settings.access_token,
            timeout=settings.http_timeout,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpxFunctionsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def probe(self, project_ref: str, slug: str) -> ApiResponse:
        return await self._send(
            "retrieve",
            "GET",
            f"/v1/projects/{project_ref}/functions/{slug}",
        )

    async def create(
        self, project_ref: str, slug: str, metadata: FunctionMetadata, body: bytes
    ) -> ApiResponse:
        params = {"slug": slug, "name": slug, **metadata.to_params()}
        return await self._send(
            "create",
            "POST",
            f"/v1/projects/{project_ref}/functions",
            params=params,
            content=body,
        )

    async def update(
        self, project_ref: str, slug: str, metadata: FunctionMetadata, body: bytes
    ) -> ApiResponse:
        return await self._send(
            "update",
            "PATCH",
            f"/v1/projects/{project_ref}/functions/{slug}",
            params=metadata.to_params(),
            content=body,
        )

    async def _send(
        self,
        operation: str,
        method: str,
        url: str,
        params: Optional[dict[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> ApiResponse:
        headers = {"Content-Type": ESZIP_CONTENT_TYPE} if content is not None else None
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                content=content,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(operation, cause=exc) from exc

        logger.debug("%s %s -> %d", method, url, response.status_code)
        return ApiResponse(status_code=response.status_code, body=response.text)
