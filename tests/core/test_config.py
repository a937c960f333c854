"""Tests for environment-driven settings."""

from fndeploy.core.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for key in ("SUPABASE_API_URL", "SUPABASE_DEBUG", "SUPABASE_PROJECT_ID"):
            monkeypatch.delenv(key, raising=False)
        settings = Settings(_env_file=None)

        assert settings.api_url == "https://api.supabase.com"
        assert settings.dashboard_url == "https://supabase.com/dashboard"
        assert settings.functions_dir == "supabase/functions"
        assert settings.debug is False

    def test_reads_prefixed_env(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_ACCESS_TOKEN", "sbp_env")
        monkeypatch.setenv("SUPABASE_DEBUG", "1")
        monkeypatch.setenv("supabase_project_id", "myproj")
        settings = Settings(_env_file=None)

        assert settings.access_token == "sbp_env"
        assert settings.debug is True
        assert settings.edge_runtime_id == "supabase_edge_runtime_myproj"

    def test_strips_trailing_slash(self):
        settings = Settings(
            _env_file=None,
            api_url="https://api.example.test/",
            dashboard_url="https://dash.example.test//",
        )
        assert settings.api_url == "https://api.example.test"
        assert settings.dashboard_url == "https://dash.example.test"
