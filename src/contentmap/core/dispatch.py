"""Responder lookup keyed by node type."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Protocol

from aiohttp import web

from contentmap.core.nodes import ContentNode, NodeType

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


class Responder(Protocol):
    """Turns a node into a request handler, or declines with None."""

    def respond(self, node: ContentNode, params: Mapping[str, str]) -> Handler | None: ...


class NodeDispatchRegistry:
    """Table of responders, at most one per node type.

    Populated at startup and read-only while serving.
    """

    def __init__(self) -> None:
        self._responders: dict[NodeType, Responder] = {}

    def register(self, node_type: NodeType, responder: Responder) -> None:
        """Register the responder for a node type.

        Raises:
            ValueError: If the node type already has a responder
        """
        if node_type in self._responders:
            raise ValueError(f"Responder already registered for {node_type.value} nodes")
        self._responders[node_type] = responder

    def responder_for(self, node: ContentNode) -> Responder | None:
        return self._responders.get(node.node_type)

    def respond(self, node: ContentNode, params: Mapping[str, str]) -> Handler | None:
        responder = self.responder_for(node)
        if responder is None:
            logger.debug(f"No responder for {node.node_type.value} node {node.path}")
            return None
        return responder.respond(node, params)
