"""Resolution API endpoints.

Report which node and workspace a path resolves to, without dispatching to
the node's responder.
"""

from aiohttp import web

from contentmap.app_keys import mapper_key
from contentmap.core.path import Path
from contentmap.core.resolver import INTERNAL_NAMESPACE
from contentmap.core.types import URLPath
from contentmap.errors import MalformedPathError
from contentmap.middleware import get_context


def create_resolve_routes(namespace: str = INTERNAL_NAMESPACE) -> list[web.RouteDef]:
    return [
        web.get(f"/{namespace}/resolve/{{path:.*}}", get_resolution),
        web.get(f"/{namespace}/workspace", get_workspace),
    ]


async def get_resolution(request: web.Request) -> web.Response:
    requested = URLPath(f"/{request.match_info['path']}")
    mapper = request.app[mapper_key]
    ctx = get_context(request)

    try:
        node = mapper.resolver.locate(Path.parse(requested), ctx)
    except MalformedPathError:
        node = None

    if node is None:
        return web.json_response(
            {"error": "Node not found", "path": requested},
            status=404,
        )

    return web.json_response(
        {
            "requested": requested,
            "workspace": node.workspace,
            "node": {
                "path": str(node.path),
                "type": node.node_type.value,
                "uri": str(mapper.translator.path_for_node(node)),
            },
        },
    )


async def get_workspace(request: web.Request) -> web.Response:
    mapper = request.app[mapper_key]
    resolution = mapper.workspaces.resolve(get_context(request))
    return web.json_response(
        {"workspace": resolution.workspace, "source": resolution.source.value},
    )
