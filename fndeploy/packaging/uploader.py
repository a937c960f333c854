"""Artifact uploader: publishes one bundle under one slug.

Each call runs the full probe-then-write protocol:

  PROBE   404 -> CREATE, 200 -> UPDATE, anything else -> UnexpectedStatusError
  CREATE  201 with a JSON body -> created, otherwise CreateFailedError
  UPDATE  200 with a JSON body -> updated, otherwise UpdateFailedError

No state is carried between calls, so a retry always starts with a fresh
probe. That makes a lost create response self-correcting: the next
attempt sees 200 and switches to update.

There is no version token on the platform side. Two concurrent uploads of
the same slug race; callers must run at most one per slug.
"""

import logging

from fndeploy.core.errors import (
    CreateFailedError,
    UnexpectedStatusError,
    UpdateFailedError,
)
from fndeploy.packaging.client import FunctionMetadata, FunctionsApi
from fndeploy.packaging.types import DeployAction, DeploymentOutcome

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_NOT_FOUND = 404


class ArtifactUploader:
    """Idempotent create-or-update of a function bundle."""

    def __init__(self, client: FunctionsApi, dashboard_url: str):
        self.client = client
        self.dashboard_url = dashboard_url.rstrip("/")

    def function_dashboard_url(self, project_ref: str, slug: str) -> str:
        return f"{self.dashboard_url}/project/{project_ref}/functions/{slug}/details"

    async def upload(
        self,
        project_ref: str,
        slug: str,
        entrypoint_url: str,
        import_map_url: str,
        verify_jwt: bool,
        body: bytes,
    ) -> DeploymentOutcome:
        """Run one probe/create/update attempt.

        Raises:
            TransportError: A request failed at the network level.
            UnexpectedStatusError: The probe returned neither 200 nor 404.
            CreateFailedError: The create call did not return 201 + JSON.
            UpdateFailedError: The update call did not return 200 + JSON.
        """
        metadata = FunctionMetadata(
            verify_jwt=verify_jwt,
            import_map_path=import_map_url,
            entrypoint_path=entrypoint_url,
        )

        probe = await self.client.probe(project_ref, slug)

        if probe.status_code == HTTP_NOT_FOUND:
            response = await self.client.create(project_ref, slug, metadata, body)
            payload = response.json()
            if response.status_code != HTTP_CREATED or payload is None:
                raise CreateFailedError(response.status_code, response.body)
            action = DeployAction.CREATED
        elif probe.status_code == HTTP_OK:
            response = await self.client.update(project_ref, slug, metadata, body)
            payload = response.json()
            if response.status_code != HTTP_OK or payload is None:
                raise UpdateFailedError(response.status_code, response.body)
            action = DeployAction.UPDATED
        else:
            raise UnexpectedStatusError(probe.status_code, probe.body)

        outcome = DeploymentOutcome(
            slug=slug,
            project_ref=project_ref,
            action=action,
            dashboard_url=self.function_dashboard_url(project_ref, slug),
            response=payload,
        )
        logger.info("Deployed Function %s on project %s", slug, project_ref)
        logger.info("You can inspect your deployment in the Dashboard: %s", outcome.dashboard_url)
        return outcome
