"""Types for the sandboxed bundler."""

from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class Bind:
    """A bind mount (or named volume) exposed to the bundler container."""

    source: str
    target: str
    read_only: bool = True

    def to_spec(self) -> str:
        mode = "ro" if self.read_only else "rw"
        return f"{self.source}:{self.target}:{mode}"


@dataclass
class BundleRequest:
    """Inputs for one bundler invocation.

    All paths are container paths; `binds` maps host locations onto them.
    """

    entrypoint_path: str
    output_path: str
    import_map_path: Optional[str] = None
    verbose: bool = False
    binds: list[Bind] = field(default_factory=list)

    def command(self) -> list[str]:
        cmd = ["bundle", "--entrypoint", self.entrypoint_path, "--output", self.output_path]
        if self.verbose:
            cmd.append("--verbose")
        if self.import_map_path:
            cmd.extend(["--import-map", self.import_map_path])
        return cmd


@dataclass
class BundleResult:
    """Outcome of a bundler run. Success is signalled by exit code 0 alone."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def is_success(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """stderr followed by stdout, skipping empty streams."""
        return "\n".join(s.rstrip() for s in (self.stderr, self.stdout) if s.strip())


@runtime_checkable
class Bundler(Protocol):
    """Produces a single-file bundle at `request.output_path`, or fails.

    Implementations must not raise on a nonzero exit; they report it in
    the returned BundleResult and let the caller classify it.
    """

    async def bundle(self, request: BundleRequest) -> BundleResult:
        ...  # noqa: PLR6301
