"""Shared fakes for the deploy pipeline tests.

FakeBundler stands in for the edge runtime container: it writes a fixed
eszip payload into the mounted output workspace. ScriptedFunctionsApi
replays queued responses and records every call, so tests can count
probes, creates and updates per attempt.
"""

from pathlib import Path
from typing import Optional, Union

import pytest

from fndeploy.core.config import Settings
from fndeploy.core.errors import TransportError
from fndeploy.packaging.bundler import DOCKER_ESZIP_DIR
from fndeploy.packaging.client import ApiResponse, FunctionMetadata
from fndeploy.sandbox.types import BundleRequest, BundleResult

RAW_ESZIP = b"eszip-bundle-bytes" * 64

Scripted = Union[ApiResponse, Exception]


class FakeBundler:
    """Bundler that copies `payload` to the host side of the output mount."""

    def __init__(
        self,
        payload: bytes = RAW_ESZIP,
        exit_code: int = 0,
        stderr: str = "",
        write_output: bool = True,
        stdout: str = "",
    ):
        self.payload = payload
        self.exit_code = exit_code
        self.stderr = stderr
        self.stdout = stdout
        self.write_output = write_output
        self.requests: list[BundleRequest] = []

    async def bundle(self, request: BundleRequest) -> BundleResult:
        self.requests.append(request)
        if self.exit_code == 0 and self.write_output:
            host_dir = next(b.source for b in request.binds if b.target == DOCKER_ESZIP_DIR)
            filename = Path(request.output_path).name
            (Path(host_dir) / filename).write_bytes(self.payload)
        return BundleResult(exit_code=self.exit_code, stdout=self.stdout, stderr=self.stderr)


class ScriptedFunctionsApi:
    """FunctionsApi fake driven by per-endpoint response queues.

    When a queue holds a single item it is reused for every call, which
    keeps "always 503" style scripts short.
    """

    def __init__(
        self,
        probe: Optional[list[Scripted]] = None,
        create: Optional[list[Scripted]] = None,
        update: Optional[list[Scripted]] = None,
    ):
        self._queues = {
            "probe": list(probe or []),
            "create": list(create or []),
            "update": list(update or []),
        }
        self.calls: list[tuple] = []

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    def _next(self, name: str) -> ApiResponse:
        queue = self._queues[name]
        if not queue:
            raise AssertionError(f"unexpected {name} call")
        item = queue[0] if len(queue) == 1 else queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def probe(self, project_ref: str, slug: str) -> ApiResponse:
        self.calls.append(("probe", project_ref, slug))
        return self._next("probe")

    async def create(
        self, project_ref: str, slug: str, metadata: FunctionMetadata, body: bytes
    ) -> ApiResponse:
        self.calls.append(("create", project_ref, slug, metadata, body))
        return self._next("create")

    async def update(
        self, project_ref: str, slug: str, metadata: FunctionMetadata, body: bytes
    ) -> ApiResponse:
        self.calls.append(("update", project_ref, slug, metadata, body))
        return self._next("update")


def ok(status_code: int = 200, body: str = '{"id": "1", "slug": "hello"}') -> ApiResponse:
    return ApiResponse(status_code=status_code, body=body)


def transport_error(operation: str = "retrieve") -> TransportError:
    return TransportError(operation, cause=ConnectionError("connection refused"))


async def no_sleep(_delay: float) -> None:
    return None


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        access_token="sbp_test",
        api_url="https://api.example.test",
        dashboard_url="https://dashboard.example.test",
        project_id="test",
    )


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project with two functions plus a helper directory."""
    functions = tmp_path / "supabase" / "functions"
    for slug in ("hello", "world"):
        (functions / slug).mkdir(parents=True)
        (functions / slug / "index.ts").write_text("export default () => {}\n")
    (functions / "_shared").mkdir()
    (functions / "_shared" / "index.ts").write_text("export const x = 1\n")
    return tmp_path
