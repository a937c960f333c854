"""Deployment orchestrator: bundle then upload, one function at a time.

deploy_one() bundles a function exactly once and uploads the resulting
bytes inside retry_async(), so every retry repeats the whole
probe/create/update protocol against the same artifact.

deploy_all() walks the slugs in the given order, strictly sequentially:
the platform does not tolerate concurrent metadata writes even for
different functions. The first failure stops the batch and is raised
as-is. Functions deployed before it stay deployed; the ones after it
are never attempted.
"""

import logging
from typing import Iterable, Optional

from fndeploy.core.logging import bind_slug
from fndeploy.execution.retry import RetryPolicy, Sleep, retry_async
from fndeploy.functions.config import FunctionConfigResolver
from fndeploy.packaging.bundler import BundleBuilder
from fndeploy.packaging.types import DeploymentOutcome, human_size
from fndeploy.packaging.uploader import ArtifactUploader

logger = logging.getLogger(__name__)


class DeploymentOrchestrator:
    """Deploys functions of one project."""

    def __init__(
        self,
        project_ref: str,
        builder: BundleBuilder,
        uploader: ArtifactUploader,
        config_resolver: FunctionConfigResolver,
        import_map_path: Optional[str] = None,
        no_verify_jwt: Optional[bool] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.project_ref = project_ref
        self.builder = builder
        self.uploader = uploader
        self.config_resolver = config_resolver
        self.import_map_path = import_map_path
        self.no_verify_jwt = no_verify_jwt
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    async def deploy_one(self, slug: str) -> DeploymentOutcome:
        with bind_slug(slug):
            config = self.config_resolver.resolve(
                slug, self.import_map_path, self.no_verify_jwt
            )
            artifact = await self.builder.build(slug, config.import_map)

            logger.info(
                "Deploying %s (script size: %s)", slug, human_size(artifact.size)
            )

            async def _upload() -> DeploymentOutcome:
                return await self.uploader.upload(
                    self.project_ref,
                    slug,
                    artifact.entrypoint_url,
                    artifact.import_map_url,
                    config.verify_jwt,
                    artifact.compressed_body,
                )

            kwargs = {"sleep": self._sleep} if self._sleep is not None else {}
            return await retry_async(
                _upload,
                self.retry_policy,
                description=f"Deploying {slug}",
                **kwargs,
            )

    async def deploy_all(self, slugs: Iterable[str]) -> list[DeploymentOutcome]:
        outcomes: list[DeploymentOutcome] = []
        for slug in slugs:
            outcomes.append(await self.deploy_one(slug))
        logger.info("Deployed %d function(s) to %s", len(outcomes), self.project_ref)
        return outcomes
