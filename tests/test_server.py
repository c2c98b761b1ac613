"""Tests for the aiohttp application and content middleware."""

from dataclasses import replace
from typing import Any

import pytest
from aiohttp import web
from contentmap.app_keys import config_key, mapper_key
from contentmap.config import Config
from contentmap.core.nodes import NodeType
from contentmap.core.store import InMemoryRepository, InMemoryWorkspaceRegistry
from contentmap.server import create_app

COOKIE = "brix-revision"


def _set_cookies(response: Any) -> list[str]:
    return [h for h in response.headers.getall("Set-Cookie", []) if COOKIE in h]


class TestCreateApp:
    """Tests for create_app()."""

    def test__valid_config__returns_configured_app(self, test_config: Config) -> None:
        app = create_app(test_config)

        assert app[config_key] is test_config
        assert mapper_key in app
        assert app[mapper_key].workspaces.cookie_name == COOKIE


class TestContentMiddleware:
    """Tests for content resolution through the middleware."""

    @pytest.fixture
    def app(
        self,
        test_config: Config,
        repository: InMemoryRepository,
        registry: InMemoryWorkspaceRegistry,
    ) -> web.Application:
        published = repository.workspace("published")
        published.add("/guide", content="<h1>Published guide</h1>")
        published.add("/guide/setup", NodeType.FOLDER)
        published.add("/webdav", content="<h1>Never served</h1>")
        repository.workspace("draft").add("/guide", content="<h1>Draft guide</h1>")
        return create_app(test_config, repository=repository, registry=registry)

    @pytest.mark.asyncio
    async def test__existing_page__is_served(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/guide")

        assert response.status == 200
        assert "Published guide" in await response.text()
        assert _set_cookies(response) == []

    @pytest.mark.asyncio
    async def test__deep_link__is_served_by_ancestor(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        """Folder without index declines, so /guide handles the request."""
        client = await aiohttp_client(app)
        response = await client.get("/guide/setup/linux")

        assert response.status == 200
        assert "Published guide" in await response.text()

    @pytest.mark.asyncio
    async def test__unresolved_path__returns_404(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/missing/page")

        assert response.status == 404

    @pytest.mark.asyncio
    async def test__reserved_prefix__is_not_claimed(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/webdav/anything")

        assert response.status == 404

    @pytest.mark.asyncio
    async def test__workspace_param__serves_workspace_without_cookie(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get(
            "/guide",
            params={"brix-workspace": "draft"},
            headers={"Cookie": f"{COOKIE}=published"},
        )

        assert response.status == 200
        assert "Draft guide" in await response.text()
        assert _set_cookies(response) == []

    @pytest.mark.asyncio
    async def test__workspace_cookie__is_refreshed(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/guide", headers={"Cookie": f"{COOKIE}=draft"})

        assert "Draft guide" in await response.text()
        [cookie] = _set_cookies(response)
        assert f"{COOKIE}=draft" in cookie
        assert "Path=/" in cookie

    @pytest.mark.asyncio
    async def test__referer_hint__selects_workspace_and_sets_cookie(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get(
            "/guide",
            headers={"Referer": "http://host/x?brix-workspace=draft"},
        )

        assert "Draft guide" in await response.text()
        [cookie] = _set_cookies(response)
        assert f"{COOKIE}=draft" in cookie

    @pytest.mark.asyncio
    async def test__default_cookie__is_cleared(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/guide", headers={"Cookie": f"{COOKIE}=published"})

        assert response.status == 200
        [cookie] = _set_cookies(response)
        assert "Max-Age=0" in cookie

    @pytest.mark.asyncio
    async def test__unknown_cookie__falls_back_and_is_cleared(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get("/guide", headers={"Cookie": f"{COOKIE}=gone"})

        assert "Published guide" in await response.text()
        [cookie] = _set_cookies(response)
        assert "Max-Age=0" in cookie
        assert f"{COOKIE}=gone" not in cookie

    @pytest.mark.asyncio
    async def test__unresolved_path__clears_default_cookie(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get(
            "/missing/page", headers={"Cookie": f"{COOKIE}=published"}
        )

        assert response.status == 404
        [cookie] = _set_cookies(response)
        assert "Max-Age=0" in cookie

    @pytest.mark.asyncio
    async def test__unresolved_path__refreshes_workspace_cookie(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get(
            "/missing/page", headers={"Cookie": f"{COOKIE}=draft"}
        )

        assert response.status == 404
        [cookie] = _set_cookies(response)
        assert f"{COOKIE}=draft" in cookie

    @pytest.mark.asyncio
    async def test__post_to_page__is_not_served_content(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.post("/guide", data="x")

        assert response.status == 404
        assert "Published guide" not in await response.text()

    @pytest.mark.asyncio
    async def test__head_request__is_served(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.head("/guide")

        assert response.status == 200

    @pytest.mark.asyncio
    async def test__malformed_referer__returns_400(
        self, aiohttp_client: Any, app: web.Application
    ) -> None:
        client = await aiohttp_client(app)
        response = await client.get(
            "/guide",
            headers={"Referer": "http://host/x?q=%zz&brix-workspace=draft"},
        )

        assert response.status == 400

    @pytest.mark.asyncio
    async def test__no_workspace_determinable__returns_500(
        self,
        aiohttp_client: Any,
        test_config: Config,
        repository: InMemoryRepository,
        registry: InMemoryWorkspaceRegistry,
    ) -> None:
        repository.workspace("published").add("/guide", content="x")
        config = replace(
            test_config,
            content=replace(test_config.content, default_workspace=None),
        )
        app = create_app(config, repository=repository, registry=registry)

        client = await aiohttp_client(app)
        response = await client.get("/guide")

        assert response.status == 500


class TestFileSystemContent:
    """Tests serving the filesystem repository."""

    @pytest.mark.asyncio
    async def test__root_folder__serves_index(
        self, aiohttp_client: Any, test_config: Config
    ) -> None:
        published = test_config.content.root_dir / "published"
        (published / "index.html").write_text("<h1>Home</h1>")

        client = await aiohttp_client(create_app(test_config))
        response = await client.get("/")

        assert response.status == 200
        assert "text/html" in response.headers["Content-Type"]
        assert "Home" in await response.text()

    @pytest.mark.asyncio
    async def test__resource__is_served_from_workspace(
        self, aiohttp_client: Any, test_config: Config
    ) -> None:
        draft = test_config.content.root_dir / "draft"
        (draft / "logo.png").write_bytes(b"\x89PNG")

        client = await aiohttp_client(create_app(test_config))
        response = await client.get("/logo.png", params={"brix-workspace": "draft"})

        assert response.status == 200
        assert await response.read() == b"\x89PNG"

    @pytest.mark.asyncio
    async def test__folder_without_index__falls_back_to_parent(
        self, aiohttp_client: Any, test_config: Config
    ) -> None:
        published = test_config.content.root_dir / "published"
        (published / "index.html").write_text("<h1>Home</h1>")
        (published / "empty").mkdir()

        client = await aiohttp_client(create_app(test_config))
        response = await client.get("/empty/page")

        assert response.status == 200
        assert "Home" in await response.text()

    @pytest.mark.asyncio
    async def test__overlong_explicit_workspace__returns_404(
        self, aiohttp_client: Any, test_config: Config
    ) -> None:
        published = test_config.content.root_dir / "published"
        (published / "index.html").write_text("<h1>Home</h1>")

        client = await aiohttp_client(create_app(test_config))
        response = await client.get("/", params={"brix-workspace": "a" * 300})

        assert response.status == 404
