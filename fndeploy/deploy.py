"""Top-level entry points for deploying Edge Functions.

run()          deploy the given slugs, or every function found on disk
run_default()  deploy every function found on disk; no-op when none exist

Collaborators (HTTP client, bundler, config resolver) can be injected;
anything not injected is built from Settings and closed before returning.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from fndeploy.core.config import Settings, get_settings
from fndeploy.execution.orchestrator import DeploymentOrchestrator
from fndeploy.execution.retry import RetryPolicy
from fndeploy.functions import slugs as slug_resolver
from fndeploy.functions.config import FunctionConfigResolver, StaticFunctionConfigResolver
from fndeploy.packaging.bundler import DEFAULT_IMPORT_MAP_FILENAME, BundleBuilder
from fndeploy.packaging.client import FunctionsApi, HttpxFunctionsClient
from fndeploy.packaging.types import DeploymentOutcome
from fndeploy.packaging.uploader import ArtifactUploader
from fndeploy.sandbox.docker import DockerBundler
from fndeploy.sandbox.types import Bundler

logger = logging.getLogger(__name__)


async def run(
    slugs: Optional[Iterable[str]],
    project_ref: str,
    *,
    no_verify_jwt: Optional[bool] = None,
    import_map_path: Optional[str] = None,
    settings: Optional[Settings] = None,
    client: Optional[FunctionsApi] = None,
    bundler: Optional[Bundler] = None,
    config_resolver: Optional[FunctionConfigResolver] = None,
    retry_policy: Optional[RetryPolicy] = None,
    cwd: Optional[Path] = None,
) -> list[DeploymentOutcome]:
    """Deploy `slugs` (or all discovered functions) to `project_ref`.

    Slugs are validated before any filesystem or network access.

    Raises:
        InvalidSlugError, NoFunctionsFoundError: Before anything is deployed.
        DeployError: The first function that failed; earlier ones stay deployed.
    """
    # Settings may read .env, so explicit slugs are checked first.
    requested = slug_resolver.validate(slugs or [])

    settings = settings or get_settings()
    cwd = Path(cwd) if cwd is not None else Path.cwd()
    resolved = slug_resolver.resolve(cwd / settings.functions_dir, requested)

    return await _deploy(
        resolved,
        project_ref,
        settings=settings,
        cwd=cwd,
        no_verify_jwt=no_verify_jwt,
        import_map_path=import_map_path,
        client=client,
        bundler=bundler,
        config_resolver=config_resolver,
        retry_policy=retry_policy,
    )


async def run_default(
    project_ref: str,
    *,
    settings: Optional[Settings] = None,
    client: Optional[FunctionsApi] = None,
    bundler: Optional[Bundler] = None,
    config_resolver: Optional[FunctionConfigResolver] = None,
    retry_policy: Optional[RetryPolicy] = None,
    cwd: Optional[Path] = None,
) -> list[DeploymentOutcome]:
    """Deploy every function on disk. Returns [] when there are none."""
    settings = settings or get_settings()
    cwd = Path(cwd) if cwd is not None else Path.cwd()

    resolved = slug_resolver.discover(cwd / settings.functions_dir)
    if not resolved:
        logger.info("No functions found in %s, nothing to deploy", settings.functions_dir)
        return []

    return await _deploy(
        resolved,
        project_ref,
        settings=settings,
        cwd=cwd,
        client=client,
        bundler=bundler,
        config_resolver=config_resolver,
        retry_policy=retry_policy,
    )


async def _deploy(
    slugs: list[str],
    project_ref: str,
    *,
    settings: Settings,
    cwd: Path,
    no_verify_jwt: Optional[bool] = None,
    import_map_path: Optional[str] = None,
    client: Optional[FunctionsApi] = None,
    bundler: Optional[Bundler] = None,
    config_resolver: Optional[FunctionConfigResolver] = None,
    retry_policy: Optional[RetryPolicy] = None,
) -> list[DeploymentOutcome]:
    owned_client: Optional[HttpxFunctionsClient] = None
    if client is None:
        owned_client = HttpxFunctionsClient.from_settings(settings)
        client = owned_client

    if config_resolver is None:
        config_resolver = StaticFunctionConfigResolver(
            fallback_import_map=cwd / settings.functions_dir / DEFAULT_IMPORT_MAP_FILENAME,
        )

    orchestrator = DeploymentOrchestrator(
        project_ref=project_ref,
        builder=BundleBuilder(bundler or DockerBundler.from_settings(settings), settings, cwd=cwd),
        uploader=ArtifactUploader(client, settings.dashboard_url),
        config_resolver=config_resolver,
        import_map_path=import_map_path,
        no_verify_jwt=no_verify_jwt,
        retry_policy=retry_policy,
    )
    try:
        return await orchestrator.deploy_all(slugs)
    finally:
        if owned_client is not None:
            await owned_client.aclose()
