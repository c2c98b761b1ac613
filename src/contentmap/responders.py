"""Built-in responders for folder, page and resource nodes."""

from collections.abc import Mapping

from aiohttp import web

from contentmap.core.dispatch import Handler, NodeDispatchRegistry
from contentmap.core.nodes import ContentNode, NodeType

INDEX_PAGE = "index.html"
CONTENT_PROPERTY = "content"


class PageResponder:
    """Serves page content.

    In-memory pages carry their markup in the "content" property;
    filesystem pages are served from their source file.
    """

    def respond(self, node: ContentNode, params: Mapping[str, str]) -> Handler | None:
        content = node.properties.get(CONTENT_PROPERTY)
        if content is not None:

            async def render(request: web.Request) -> web.StreamResponse:
                return web.Response(text=content, content_type="text/html")

            return render

        if node.source is None:
            return None
        return _serve_file(node)


class ResourceResponder:
    """Serves binary resources."""

    def respond(self, node: ContentNode, params: Mapping[str, str]) -> Handler | None:
        content = node.properties.get(CONTENT_PROPERTY)
        if content is not None:
            body = content.encode("utf-8")

            async def download(request: web.Request) -> web.StreamResponse:
                return web.Response(body=body, content_type="application/octet-stream")

            return download

        if node.source is None:
            return None
        return _serve_file(node)


class FolderResponder:
    """Serves a folder's index page.

    Declines folders without an index so the resolver moves on to the
    parent node.
    """

    def respond(self, node: ContentNode, params: Mapping[str, str]) -> Handler | None:
        if node.source is None:
            return None
        index_path = node.source / INDEX_PAGE
        if not index_path.is_file():
            return None

        async def serve_index(request: web.Request) -> web.StreamResponse:
            return web.FileResponse(index_path)

        return serve_index


def _serve_file(node: ContentNode) -> Handler:
    source = node.source

    async def serve(request: web.Request) -> web.StreamResponse:
        if source is None or not source.is_file():
            raise web.HTTPNotFound()
        return web.FileResponse(source)

    return serve


def create_default_dispatch() -> NodeDispatchRegistry:
    """Build a dispatch registry with the built-in responders."""
    dispatch = NodeDispatchRegistry()
    dispatch.register(NodeType.FOLDER, FolderResponder())
    dispatch.register(NodeType.PAGE, PageResponder())
    dispatch.register(NodeType.RESOURCE, ResourceResponder())
    return dispatch
