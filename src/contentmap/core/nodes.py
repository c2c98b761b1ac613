"""Content node handles and lookup results."""

import pathlib
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from contentmap.core.path import Path
from contentmap.core.types import WorkspaceId


class NodeType(Enum):
    """Kind of content stored at a node. Responders are registered per kind."""

    FOLDER = "folder"
    PAGE = "page"
    RESOURCE = "resource"


@dataclass(frozen=True)
class ContentNode:
    """Handle to an item in a workspace's content store.

    Nodes are produced by a store lookup for the duration of one request and
    are never persisted.
    """

    path: Path
    workspace: WorkspaceId
    node_type: NodeType
    source: pathlib.Path | None = None
    properties: Mapping[str, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class Found:
    """Lookup located a node."""

    node: ContentNode


@dataclass(frozen=True)
class NotFound:
    """No node exists at the looked up path."""


@dataclass(frozen=True)
class LookupFailed:
    """Lookup could not be completed."""

    detail: str


LookupResult = Found | NotFound | LookupFailed
