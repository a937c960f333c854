"""Function bundler: turns one function's sources into a BundledArtifact.

The flow for a single slug:
1. Create a scoped output workspace (removed on every exit path).
2. Run the edge runtime's ``bundle`` command once through the injected
   Bundler, with the functions directory read-only, the workspace
   writable and the persistent Deno cache volume attached.
3. Read ``output.eszip`` back and wrap it as ``EZBR`` + brotli.

Nothing here retries: a failed bundle is a defect in the function source.
"""

import logging
from pathlib import Path
from posixpath import join as posix_join
from typing import Optional

from fndeploy.core.config import Settings
from fndeploy.core.errors import BundleError, FilesystemError
from fndeploy.packaging.eszip import wrap
from fndeploy.packaging.types import BundledArtifact
from fndeploy.sandbox.docker import DENO_CACHE_DIR
from fndeploy.sandbox.import_map import bind_import_map, to_container_path
from fndeploy.sandbox.types import Bind, BundleRequest, Bundler
from fndeploy.sandbox.workspace import scoped_workspace

logger = logging.getLogger(__name__)

# Container mount point for the writable output workspace.
DOCKER_ESZIP_DIR = "/root/eszips"
OUTPUT_FILENAME = "output.eszip"
ENTRYPOINT_FILENAME = "index.ts"
DEFAULT_IMPORT_MAP_FILENAME = "import_map.json"


class BundleBuilder:
    """Builds compressed artifacts with an injected Bundler."""

    def __init__(
        self,
        bundler: Bundler,
        settings: Settings,
        cwd: Optional[Path] = None,
    ):
        self.bundler = bundler
        self.settings = settings
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()

    @property
    def functions_dir(self) -> Path:
        return (self.cwd / self.settings.functions_dir).absolute()

    @property
    def temp_dir(self) -> Path:
        return self.cwd / self.settings.temp_dir

    async def build(self, slug: str, import_map_path: Optional[str] = None) -> BundledArtifact:
        """Bundle `slug` and return its compressed artifact.

        Args:
            slug: Validated function slug.
            import_map_path: Host path of the resolved import map, if any.

        Raises:
            FilesystemError: Workspace, import map or output could not be used.
            BundleError: The runtime exited nonzero or wrote no output.
            CompressionError: The output could not be brotli-compressed.
        """
        container_funcs_dir = to_container_path(self.functions_dir)
        entrypoint_path = posix_join(container_funcs_dir, slug, ENTRYPOINT_FILENAME)
        container_import_map = posix_join(container_funcs_dir, DEFAULT_IMPORT_MAP_FILENAME)

        with scoped_workspace(self.temp_dir, slug) as workspace:
            request = BundleRequest(
                entrypoint_path=entrypoint_path,
                output_path=posix_join(DOCKER_ESZIP_DIR, OUTPUT_FILENAME),
                verbose=self.settings.debug,
                binds=[
                    # Reuse DENO_DIR between runs.
                    Bind(self.settings.edge_runtime_id, DENO_CACHE_DIR, read_only=False),
                    Bind(str(self.functions_dir), container_funcs_dir),
                    Bind(str(workspace), DOCKER_ESZIP_DIR, read_only=False),
                ],
            )

            if import_map_path:
                binds, container_import_map = bind_import_map(self.cwd / import_map_path)
                request.binds.extend(binds)
                request.import_map_path = container_import_map

            logger.info("Bundling %s", slug)
            result = await self.bundler.bundle(request)
            if not result.is_success:
                raise BundleError(slug, f"exit status {result.exit_code}", result.output)

            output_file = workspace / OUTPUT_FILENAME
            if not output_file.is_file():
                raise BundleError(slug, f"bundler produced no {OUTPUT_FILENAME}", result.output)

            try:
                raw = output_file.read_bytes()
            except OSError as exc:
                raise FilesystemError(f"failed to open eszip: {exc}", cause=exc)

        return BundledArtifact(
            compressed_body=wrap(raw),
            entrypoint_path=entrypoint_path,
            import_map_path=container_import_map,
        )
