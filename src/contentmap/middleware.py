"""aiohttp middleware that routes requests through the content resolver.

Each request gets a fresh RequestContext. GET and HEAD requests outside
the internal routing namespace are offered to the PathResolver first; when
it finds no handler the request falls through to the regular router. Any
workspace cookie change recorded during the request is applied to the
response on the way out, including HTTP errors raised by the router.
"""

import logging

from aiohttp import hdrs, web

from contentmap.app_keys import mapper_key
from contentmap.core.context import RequestContext
from contentmap.core.dispatch import Handler
from contentmap.core.workspace import CookieAction, CookieCommand
from contentmap.errors import RefererDecodeError

logger = logging.getLogger(__name__)

CONTEXT_KEY = "contentmap.context"
CONTENT_METHODS = frozenset({hdrs.METH_GET, hdrs.METH_HEAD})


def create_context(request: web.Request) -> RequestContext:
    return RequestContext(
        url=request.rel_url,
        query=request.query,
        referer=request.headers.get(hdrs.REFERER),
        cookies=request.cookies,
    )


def get_context(request: web.Request) -> RequestContext:
    """Return the request's context, creating it for requests the middleware skipped."""
    ctx: RequestContext | None = request.get(CONTEXT_KEY)
    if ctx is None:
        ctx = create_context(request)
        request[CONTEXT_KEY] = ctx
    return ctx


def apply_cookie_command(
    response: web.StreamResponse,
    command: CookieCommand | None,
) -> None:
    """Apply a pending workspace cookie change to a response."""
    if command is None or response.prepared:
        return
    if command.action is CookieAction.SET:
        response.set_cookie(command.name, command.value, path=command.path)
    else:
        response.del_cookie(command.name, path=command.path)


@web.middleware
async def content_middleware(
    request: web.Request,
    handler: Handler,
) -> web.StreamResponse:
    mapper = request.app[mapper_key]
    ctx = get_context(request)

    try:
        if request.method not in CONTENT_METHODS:
            response = await handler(request)
        elif mapper.resolver.is_internal(ctx.url):
            response = await handler(request)
        else:
            content_handler = mapper.resolver.resolve(ctx)
            if content_handler is None:
                response = await handler(request)
            else:
                response = await content_handler(request)
    except RefererDecodeError as e:
        logger.warning(f"Rejecting request with malformed referer: {e}")
        raise web.HTTPBadRequest(text=str(e)) from e
    except web.HTTPException as exc:
        apply_cookie_command(exc, ctx.cookie_command)
        raise

    apply_cookie_command(response, ctx.cookie_command)
    return response
