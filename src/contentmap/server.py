"""aiohttp server for contentmap.

Application factory and route registration for standalone server mode.
"""

import logging

from aiohttp import web

from contentmap.api.resolve import create_resolve_routes
from contentmap.app_keys import config_key, mapper_key
from contentmap.config import Config
from contentmap.core.dispatch import NodeDispatchRegistry
from contentmap.core.store import ContentRepository, WorkspaceRegistry
from contentmap.mapper import ContentMapper
from contentmap.middleware import content_middleware

logger = logging.getLogger(__name__)


def create_app(
    config: Config,
    *,
    repository: ContentRepository | None = None,
    registry: WorkspaceRegistry | None = None,
    dispatch: NodeDispatchRegistry | None = None,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        repository: Content repository (default: filesystem at content.root_dir)
        registry: Workspace registry (default: filesystem at content.root_dir)
        dispatch: Responder table (default: built-in responders)

    Returns:
        Configured aiohttp application
    """
    app = web.Application(middlewares=[content_middleware])

    mapper = ContentMapper.from_config(
        config,
        repository=repository,
        registry=registry,
        dispatch=dispatch,
    )
    app[config_key] = config
    app[mapper_key] = mapper

    app.router.add_routes(create_resolve_routes(config.routing.internal_namespace))

    return app


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    logger.info(f"Serving content from {config.content.root_dir}")
    web.run_app(app, host=config.server.host, port=config.server.port)
