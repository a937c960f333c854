"""Types for the packaging module."""

from dataclasses import dataclass, field
from enum import StrEnum


@dataclass(frozen=True)
class BundledArtifact:
    """A compressed bundle ready for upload.

    entrypoint_path and import_map_path are container paths, i.e. the
    locations the platform recorded the bundle against, not host paths.
    """

    compressed_body: bytes
    entrypoint_path: str
    import_map_path: str

    @property
    def entrypoint_url(self) -> str:
        return f"file://{self.entrypoint_path}"

    @property
    def import_map_url(self) -> str:
        return f"file://{self.import_map_path}"

    @property
    def size(self) -> int:
        return len(self.compressed_body)


class DeployAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass
class DeploymentOutcome:
    """Successful upload of one function."""

    slug: str
    project_ref: str
    action: DeployAction
    dashboard_url: str
    response: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "slug": self.slug,
            "project_ref": self.project_ref,
            "action": self.action.value,
            "dashboard_url": self.dashboard_url,
            "response": self.response,
        }


def human_size(num_bytes: float) -> str:
    """Format a byte count with decimal units, e.g. ``1.5kB`` or ``12.3MB``."""
    units = ["B", "kB", "MB", "GB", "TB"]
    size = float(num_bytes)
    for unit in units[:-1]:
        if abs(size) < 1000.0:
            return f"{size:.4g}{unit}"
        size /= 1000.0
    return f"{size:.4g}{units[-1]}"
