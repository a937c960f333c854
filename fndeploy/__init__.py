"""Bundle Edge Functions with the edge runtime and deploy them to a project.

Public API:
    run(slugs, project_ref, ...) -> list[DeploymentOutcome]
    run_default(project_ref, ...) -> list[DeploymentOutcome]
    configure_structlog(debug) -> None
"""

from fndeploy.core.logging import configure_structlog
from fndeploy.deploy import run, run_default

__all__ = ["configure_structlog", "run", "run_default"]
