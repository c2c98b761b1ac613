"""Ancestor-walking request resolver.

The request path is tried as is, then with its last segment dropped, and so
on up to the root, until a node is found whose responder produces a
handler. Deep links into content that is rendered by an ancestor (e.g.,
"/blog/2024/post" handled by the "/blog" node) resolve this way.
"""

import logging
from collections.abc import Iterable

from yarl import URL

from contentmap.core.context import RequestContext
from contentmap.core.dispatch import Handler, NodeDispatchRegistry
from contentmap.core.mapping import UriPathTranslator
from contentmap.core.nodes import ContentNode, Found, LookupFailed
from contentmap.core.path import Path
from contentmap.errors import MalformedPathError

logger = logging.getLogger(__name__)

RESERVED_PREFIXES = frozenset({"webdav", "jcrwebdav"})
INTERNAL_NAMESPACE = "api"


def url_segments(url: URL) -> list[str]:
    return [s for s in url.path.split("/") if s]


class PathResolver:
    """Resolves request URLs to handlers produced by node responders.

    Never generates URLs; use UriPathTranslator.path_for_node for that.
    """

    def __init__(
        self,
        translator: UriPathTranslator,
        dispatch: NodeDispatchRegistry,
        *,
        reserved_prefixes: Iterable[str] = RESERVED_PREFIXES,
        internal_namespace: str = INTERNAL_NAMESPACE,
    ) -> None:
        self._translator = translator
        self._dispatch = dispatch
        self._reserved_prefixes = frozenset(reserved_prefixes)
        self._internal_namespace = internal_namespace

    @property
    def translator(self) -> UriPathTranslator:
        return self._translator

    def is_reserved(self, url: URL) -> bool:
        """Check whether the URL belongs to a namespace this resolver never claims."""
        segments = url_segments(url)
        return bool(segments) and segments[0] in self._reserved_prefixes

    def is_internal(self, url: URL) -> bool:
        segments = url_segments(url)
        return bool(segments) and segments[0] == self._internal_namespace

    def compatibility_score(self, url: URL) -> int:
        """Score how specifically this resolver can handle the URL.

        Internal routing URLs score 0; anything else scores its segment
        count so that callers ranking resolvers try this one first.
        """
        if self.is_internal(url):
            return 0
        return len(url_segments(url))

    def resolve(self, ctx: RequestContext) -> Handler | None:
        """Resolve the request to a handler.

        Returns:
            Handler from the deepest node whose responder accepts, or None

        Raises:
            RefererDecodeError: If workspace selection hits a malformed referer
            WorkspaceConfigurationError: If no workspace can be determined
        """
        if self.is_reserved(ctx.url):
            logger.debug(f"Not claiming reserved path {ctx.url.path}")
            return None

        path = self._request_path(ctx)
        if path is None:
            return None

        for candidate in path.walk_to_root():
            node = self._lookup(candidate, ctx)
            if node is None:
                continue
            handler = self._dispatch.respond(node, ctx.query)
            if handler is not None:
                logger.debug(f"Resolved {path} to {node.node_type.value} node {node.path}")
                return handler

        logger.debug(f"No handler for {path}")
        return None

    def locate(self, path: Path, ctx: RequestContext) -> ContentNode | None:
        """Find the deepest existing node on the way from path to the root.

        Responders are not consulted.
        """
        for candidate in path.walk_to_root():
            node = self._lookup(candidate, ctx)
            if node is not None:
                return node
        return None

    def _request_path(self, ctx: RequestContext) -> Path | None:
        try:
            return Path.parse(ctx.url.path).to_absolute()
        except MalformedPathError as e:
            logger.warning(f"Malformed request path {ctx.url.path!r}: {e}")
            return None

    def _lookup(self, candidate: Path, ctx: RequestContext) -> ContentNode | None:
        result = self._translator.node_for_path(candidate, ctx)
        if isinstance(result, Found):
            return result.node
        if isinstance(result, LookupFailed):
            logger.warning(f"Lookup failed for {candidate}: {result.detail}")
        return None
