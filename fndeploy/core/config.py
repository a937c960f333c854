from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Deploy settings loaded from environment variables.

    Every field can be set with a ``SUPABASE_`` prefixed variable, e.g.
    ``SUPABASE_ACCESS_TOKEN`` or ``SUPABASE_DEBUG=1``. A local ``.env``
    file is read as well.

    The edge runtime cache volume is keyed by ``project_id`` so that
    bundles of the same project reuse one Deno cache across runs.
    """

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Management API
    access_token: str = ""
    api_url: str = "https://api.supabase.com"
    dashboard_url: str = "https://supabase.com/dashboard"
    http_timeout: float = 60.0

    # Project layout, relative to the working directory.
    project_id: str = "fndeploy"
    functions_dir: str = "supabase/functions"
    temp_dir: str = "supabase/.temp"

    # Edge runtime used for bundling.
    edge_runtime_image: str = "supabase/edge-runtime:v1.67.4"
    docker_binary: str = "docker"

    debug: bool = False

    @field_validator("api_url", "dashboard_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v

    @property
    def edge_runtime_id(self) -> str:
        """Name of the persistent Docker volume holding the Deno cache."""
        return f"supabase_edge_runtime_{self.project_id}"


def get_settings() -> Settings:
    return Settings()
