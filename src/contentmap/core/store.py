"""Content repository and workspace registry.

The resolver only needs three questions answered: does a workspace exist,
does a node exist at a physical path in that workspace, and what is it.
Two implementations are provided: an in-memory repository for embedding and
tests, and a filesystem repository where each directory below a root is a
workspace.

Filesystem layout:
    content/
    ├── published/              # workspace
    │   ├── index.html          # PAGE node at /index.html
    │   └── guide/              # FOLDER node at /guide
    │       ├── index.html
    │       └── logo.png        # RESOURCE node at /guide/logo.png
    └── draft/
        └── ...
"""

import logging
import pathlib
import threading
from collections.abc import Iterable, Iterator
from typing import Protocol

from contentmap.core.nodes import ContentNode, NodeType
from contentmap.core.path import Path
from contentmap.core.types import WorkspaceId
from contentmap.errors import ContentStoreError

logger = logging.getLogger(__name__)

PAGE_SUFFIXES = frozenset({".html", ".htm", ".md", ".txt"})


class ContentStore(Protocol):
    """View of a single workspace's content."""

    def exists(self, path: Path) -> bool: ...

    def get(self, path: Path) -> ContentNode: ...


class ContentRepository(Protocol):
    """Hands out the content store for a workspace."""

    def store_for(self, workspace: WorkspaceId) -> ContentStore: ...


class WorkspaceRegistry(Protocol):
    """Authoritative answer to whether a workspace exists."""

    def exists(self, workspace: WorkspaceId) -> bool: ...


def is_valid_workspace_id(workspace: str) -> bool:
    """Check that a workspace id can safely name a directory."""
    if not workspace or workspace in (".", ".."):
        return False
    return "/" not in workspace and "\\" not in workspace


class InMemoryContentStore:
    """Dictionary backed content store for one workspace."""

    def __init__(self, workspace: WorkspaceId) -> None:
        self._workspace = workspace
        self._nodes: dict[Path, ContentNode] = {}

    @property
    def workspace(self) -> WorkspaceId:
        return self._workspace

    def add(
        self,
        path: Path | str,
        node_type: NodeType = NodeType.PAGE,
        **properties: str,
    ) -> ContentNode:
        """Add a node, replacing any node already stored at the path.

        Args:
            path: Physical node path
            node_type: Kind of node
            **properties: Node properties (e.g., content="<p>Hi</p>")

        Returns:
            The stored node
        """
        if isinstance(path, str):
            path = Path.parse(path)
        node = ContentNode(
            path=path,
            workspace=self._workspace,
            node_type=node_type,
            properties=dict(properties),
        )
        self._nodes[path] = node
        return node

    def remove(self, path: Path) -> None:
        self._nodes.pop(path, None)

    def exists(self, path: Path) -> bool:
        return path in self._nodes

    def get(self, path: Path) -> ContentNode:
        try:
            return self._nodes[path]
        except KeyError:
            raise ContentStoreError(
                f"No node at {path} in workspace {self._workspace!r}"
            ) from None

    def __iter__(self) -> Iterator[ContentNode]:
        return iter(list(self._nodes.values()))


class InMemoryRepository:
    """Collection of in-memory stores keyed by workspace."""

    def __init__(self) -> None:
        self._stores: dict[WorkspaceId, InMemoryContentStore] = {}

    def workspace(self, workspace: str) -> InMemoryContentStore:
        """Return the store for a workspace, creating it if needed."""
        key = WorkspaceId(workspace)
        store = self._stores.get(key)
        if store is None:
            store = InMemoryContentStore(key)
            self._stores[key] = store
        return store

    def store_for(self, workspace: WorkspaceId) -> InMemoryContentStore:
        store = self._stores.get(workspace)
        if store is None:
            raise ContentStoreError(f"Unknown workspace: {workspace!r}")
        return store


class InMemoryWorkspaceRegistry:
    """Workspace registry safe for concurrent readers.

    Readers see an immutable snapshot; writers replace it under a lock.
    """

    def __init__(self, workspaces: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._workspaces: frozenset[str] = frozenset(workspaces)

    def add(self, workspace: str) -> None:
        with self._lock:
            self._workspaces = self._workspaces | {workspace}

    def remove(self, workspace: str) -> None:
        with self._lock:
            self._workspaces = self._workspaces - {workspace}

    def exists(self, workspace: WorkspaceId) -> bool:
        return workspace in self._workspaces

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._workspaces))


class FileSystemContentStore:
    """Content store backed by one workspace directory."""

    def __init__(self, base_dir: pathlib.Path, workspace: WorkspaceId) -> None:
        self._base_dir = base_dir
        self._workspace = workspace

    @property
    def base_dir(self) -> pathlib.Path:
        return self._base_dir

    def _locate(self, path: Path) -> pathlib.Path:
        return self._base_dir.joinpath(*path.segments)

    def exists(self, path: Path) -> bool:
        location = self._locate(path)
        try:
            return location.is_dir() or location.is_file()
        except OSError as e:
            raise ContentStoreError(f"Cannot access {location}: {e}") from e

    def get(self, path: Path) -> ContentNode:
        location = self._locate(path)
        try:
            if location.is_dir():
                node_type = NodeType.FOLDER
            elif location.is_file():
                node_type = _file_node_type(location)
            else:
                raise ContentStoreError(
                    f"No node at {path} in workspace {self._workspace!r}"
                )
        except OSError as e:
            raise ContentStoreError(f"Cannot access {location}: {e}") from e

        return ContentNode(
            path=path,
            workspace=self._workspace,
            node_type=node_type,
            source=location,
        )


class FileSystemRepository:
    """Repository where each directory below root_dir is a workspace."""

    def __init__(self, root_dir: pathlib.Path) -> None:
        self._root_dir = root_dir

    @property
    def root_dir(self) -> pathlib.Path:
        return self._root_dir

    def store_for(self, workspace: WorkspaceId) -> FileSystemContentStore:
        if not is_valid_workspace_id(workspace):
            raise ContentStoreError(f"Invalid workspace id: {workspace!r}")
        base_dir = self._root_dir / workspace
        try:
            found = base_dir.is_dir()
        except OSError as e:
            raise ContentStoreError(f"Cannot open workspace {workspace!r}: {e}") from e
        if not found:
            raise ContentStoreError(f"Workspace directory not found: {base_dir}")
        return FileSystemContentStore(base_dir, workspace)


class FileSystemWorkspaceRegistry:
    """Workspace registry answering from the directories below root_dir."""

    def __init__(self, root_dir: pathlib.Path) -> None:
        self._root_dir = root_dir

    def exists(self, workspace: WorkspaceId) -> bool:
        if not is_valid_workspace_id(workspace):
            return False
        try:
            return (self._root_dir / workspace).is_dir()
        except OSError as e:
            logger.warning(f"Cannot check workspace {workspace!r}: {e}")
            return False

    def workspaces(self) -> list[str]:
        """List workspace ids in name order."""
        if not self._root_dir.is_dir():
            return []
        return sorted(p.name for p in self._root_dir.iterdir() if p.is_dir())


def _file_node_type(location: pathlib.Path) -> NodeType:
    if location.suffix.lower() in PAGE_SUFFIXES:
        return NodeType.PAGE
    return NodeType.RESOURCE
