"""Sandbox module for running the edge runtime bundler in isolation."""

from fndeploy.sandbox.docker import DockerBundler
from fndeploy.sandbox.import_map import bind_import_map
from fndeploy.sandbox.types import Bind, BundleRequest, BundleResult, Bundler
from fndeploy.sandbox.workspace import scoped_workspace

__all__ = [
    "Bind",
    "BundleRequest",
    "BundleResult",
    "Bundler",
    "DockerBundler",
    "bind_import_map",
    "scoped_workspace",
]
