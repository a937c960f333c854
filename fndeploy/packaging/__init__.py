"""Packaging module for bundling functions and uploading them.

Public API:
    BundleBuilder(bundler, settings).build(slug, import_map_path) -> BundledArtifact
    ArtifactUploader(client, dashboard_url).upload(...) -> DeploymentOutcome
"""

from fndeploy.packaging.bundler import BundleBuilder
from fndeploy.packaging.client import FunctionsApi, HttpxFunctionsClient
from fndeploy.packaging.eszip import unwrap, wrap
from fndeploy.packaging.types import BundledArtifact, DeploymentOutcome, human_size
from fndeploy.packaging.uploader import ArtifactUploader

__all__ = [
    "ArtifactUploader",
    "BundleBuilder",
    "BundledArtifact",
    "DeploymentOutcome",
    "FunctionsApi",
    "HttpxFunctionsClient",
    "human_size",
    "unwrap",
    "wrap",
]
