"""End-to-end tests for run() / run_default() with injected collaborators."""

import json
from unittest.mock import patch

import httpx
import pytest

from conftest import FakeBundler, ScriptedFunctionsApi, ok
from fndeploy.core.errors import InvalidSlugError, NoFunctionsFoundError, UnexpectedStatusError
from fndeploy.deploy import run, run_default
from fndeploy.execution.retry import RetryPolicy
from fndeploy.packaging.client import ApiResponse, HttpxFunctionsClient

FAST_RETRY = RetryPolicy(max_retries=3, initial_interval=0, randomization_factor=0)


class TestRun:
    @pytest.mark.asyncio
    async def test_invalid_slug_fails_before_any_io(self, settings, tmp_path):
        api = ScriptedFunctionsApi()
        bundler = FakeBundler()
        with patch("fndeploy.functions.slugs.Path.glob") as mock_glob:
            with pytest.raises(InvalidSlugError):
                await run(["@"], "abc", settings=settings, client=api, bundler=bundler, cwd=tmp_path)

        mock_glob.assert_not_called()
        assert api.calls == []
        assert bundler.requests == []
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_invalid_slug_fails_before_settings_load(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("SUPABASE_DEBUG=notabool\n")
        monkeypatch.chdir(tmp_path)
        api = ScriptedFunctionsApi()

        with patch("fndeploy.deploy.get_settings") as mock_settings:
            with pytest.raises(InvalidSlugError):
                await run(["@"], "abc", client=api, bundler=FakeBundler(), cwd=tmp_path)

        mock_settings.assert_not_called()
        assert api.calls == []

    @pytest.mark.asyncio
    async def test_invalid_slug_wins_over_broken_env_file(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("SUPABASE_DEBUG=notabool\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("SUPABASE_DEBUG", raising=False)

        with pytest.raises(InvalidSlugError):
            await run(["@"], "abc", client=ScriptedFunctionsApi(), bundler=FakeBundler(), cwd=tmp_path)

    @pytest.mark.asyncio
    async def test_no_functions_found(self, settings, tmp_path):
        with pytest.raises(NoFunctionsFoundError, match="No Functions specified or found"):
            await run(None, "abc", settings=settings, client=ScriptedFunctionsApi(), cwd=tmp_path)

    @pytest.mark.asyncio
    async def test_discovers_and_deploys_all(self, settings, project_dir):
        api = ScriptedFunctionsApi(probe=[ApiResponse(404)], create=[ok(201)])
        outcomes = await run(
            None, "abc", settings=settings, client=api, bundler=FakeBundler(), cwd=project_dir
        )
        assert [o.slug for o in outcomes] == ["hello", "world"]

    @pytest.mark.asyncio
    async def test_no_verify_jwt_flag_is_forwarded(self, settings, project_dir):
        api = ScriptedFunctionsApi(probe=[ok(200)], update=[ok(200)])
        await run(
            ["hello"], "abc",
            no_verify_jwt=True,
            settings=settings, client=api, bundler=FakeBundler(), cwd=project_dir,
        )
        assert api.calls[1][3].verify_jwt is False

    @pytest.mark.asyncio
    async def test_project_import_map_is_used_by_default(self, settings, project_dir):
        functions = project_dir / "supabase" / "functions"
        (functions / "import_map.json").write_text(json.dumps({"imports": {}}))
        bundler = FakeBundler()
        api = ScriptedFunctionsApi(probe=[ok(200)], update=[ok(200)])

        await run(["hello"], "abc", settings=settings, client=api, bundler=bundler, cwd=project_dir)

        expected = (functions / "import_map.json").absolute().as_posix()
        assert bundler.requests[0].import_map_path == expected
        assert api.calls[1][3].import_map_path == f"file://{expected}"

    @pytest.mark.asyncio
    async def test_import_map_override(self, settings, project_dir):
        (project_dir / "other.json").write_text(json.dumps({"imports": {}}))
        bundler = FakeBundler()
        api = ScriptedFunctionsApi(probe=[ok(200)], update=[ok(200)])

        await run(
            ["hello"], "abc",
            import_map_path="other.json",
            settings=settings, client=api, bundler=bundler, cwd=project_dir,
        )
        assert bundler.requests[0].import_map_path.endswith("/other.json")

    @pytest.mark.asyncio
    async def test_over_http_create_scenario(self, settings, project_dir):
        seen: list[tuple[str, str]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.path))
            if request.method == "GET":
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(201, json={"id": "1", "slug": "hello"})

        http = httpx.AsyncClient(base_url=settings.api_url, transport=httpx.MockTransport(handler))
        async with HttpxFunctionsClient(settings.api_url, client=http) as client:
            outcomes = await run(
                ["hello"], "abc", settings=settings, client=client, bundler=FakeBundler(), cwd=project_dir
            )
        await http.aclose()

        assert outcomes[0].dashboard_url == (
            "https://dashboard.example.test/project/abc/functions/hello/details"
        )
        assert seen == [
            ("GET", "/v1/projects/abc/functions/hello"),
            ("POST", "/v1/projects/abc/functions"),
        ]

    @pytest.mark.asyncio
    async def test_over_http_probe_503_scenario(self, settings, project_dir):
        methods: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            return httpx.Response(503, text="unavailable")

        http = httpx.AsyncClient(base_url=settings.api_url, transport=httpx.MockTransport(handler))
        async with HttpxFunctionsClient(settings.api_url, client=http) as client:
            with pytest.raises(UnexpectedStatusError):
                await run(
                    ["hello"], "abc",
                    settings=settings, client=client, bundler=FakeBundler(),
                    retry_policy=FAST_RETRY, cwd=project_dir,
                )
        await http.aclose()

        assert methods == ["GET"] * 4


class TestRunDefault:
    @pytest.mark.asyncio
    async def test_no_functions_is_a_noop(self, settings, tmp_path):
        api = ScriptedFunctionsApi()
        assert await run_default("abc", settings=settings, client=api, cwd=tmp_path) == []
        assert api.calls == []

    @pytest.mark.asyncio
    async def test_deploys_discovered_functions(self, settings, project_dir):
        api = ScriptedFunctionsApi(probe=[ok(200)], update=[ok(200)])
        outcomes = await run_default(
            "abc", settings=settings, client=api, bundler=FakeBundler(), cwd=project_dir
        )
        assert [o.slug for o in outcomes] == ["hello", "world"]
        assert api.count("update") == 2
