"""Run the edge runtime's ``bundle`` command in a throwaway container.

Uses the ``docker`` CLI through an asyncio subprocess rather than a Docker
SDK, so any runtime exposing a docker-compatible CLI works (Docker Desktop,
Podman, Colima).

Isolation:
  - The functions directory is mounted read-only.
  - Only the per-slug output workspace is writable.
  - The Deno cache lives in a named volume keyed by project id. It is
    shared by every bundle of the project, across runs, and never
    invalidated here; cache correctness is the runtime's concern.

No timeout is imposed: the container runs until the runtime exits. If the
calling task is cancelled the container is killed and the cancellation
propagates.
"""

import asyncio
import logging
import uuid
from typing import Optional

from fndeploy.core.config import Settings
from fndeploy.sandbox.types import BundleRequest, BundleResult

logger = logging.getLogger(__name__)

# Where the edge runtime keeps DENO_DIR inside the container.
DENO_CACHE_DIR = "/root/.cache/deno"


class DockerBundler:
    """Bundler implementation backed by ``docker run --rm``."""

    def __init__(
        self,
        image: str,
        docker_binary: str = "docker",
        extra_env: Optional[dict[str, str]] = None,
    ):
        self.image = image
        self.docker_binary = docker_binary
        self.extra_env = dict(extra_env or {})

    @classmethod
    def from_settings(cls, settings: Settings) -> "DockerBundler":
        return cls(image=settings.edge_runtime_image, docker_binary=settings.docker_binary)

    def build_command(self, request: BundleRequest, container_name: str) -> list[str]:
        cmd = [self.docker_binary, "run", "--rm", "--name", container_name]
        for bind in request.binds:
            cmd.extend(["-v", bind.to_spec()])
        for key, value in sorted(self.extra_env.items()):
            cmd.extend(["-e", f"{key}={value}"])
        cmd.append(self.image)
        cmd.extend(request.command())
        return cmd

    async def bundle(self, request: BundleRequest) -> BundleResult:
        container_name = f"fndeploy-bundle-{uuid.uuid4().hex[:12]}"
        cmd = self.build_command(request, container_name)
        logger.debug("Running bundler: %s", " ".join(cmd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            return BundleResult(
                exit_code=127,
                stderr=f"{self.docker_binary}: command not found",
            )
        except OSError as exc:
            return BundleResult(
                exit_code=126,
                stderr=f"{self.docker_binary}: failed to start: {exc}",
            )

        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            logger.warning("Bundling cancelled, stopping container %s", container_name)
            await self._kill(proc, container_name)
            raise

        result = BundleResult(
            exit_code=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        if request.verbose and result.output:
            logger.debug("Bundler output:\n%s", result.output)
        return result

    async def _kill(self, proc: asyncio.subprocess.Process, container_name: str) -> None:
        """Best-effort teardown after cancellation."""
        if proc.returncode is None:
            proc.kill()
        try:
            killer = await asyncio.create_subprocess_exec(
                self.docker_binary, "kill", container_name,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await killer.wait()
        except OSError as exc:
            logger.warning("Failed to kill container %s: %s", container_name, exc)
