"""Translation between node store paths and public URI paths.

Two pluggable steps sit between a URI and a stored node:

    URI path  <--UriMapping-->  logical path  <--NodePathTranslator-->  physical path

The URI mapping is deployment policy (e.g., mounting the site under a
prefix). The node path translator hides where web content lives inside the
store (e.g., under "/site/web").
"""

from typing import Protocol

from contentmap.core.context import RequestContext
from contentmap.core.nodes import ContentNode, Found, LookupFailed, LookupResult, NotFound
from contentmap.core.path import ROOT, Path
from contentmap.core.store import ContentRepository
from contentmap.core.workspace import WorkspaceResolver
from contentmap.errors import ContentStoreError, MalformedPathError


class UriMapping(Protocol):
    """Bidirectional mapping between logical node paths and URI paths."""

    def logical_path_for_uri(self, uri_path: Path) -> Path | None: ...

    def uri_path_for_logical(self, logical_path: Path) -> Path: ...


class NodePathTranslator(Protocol):
    """Maps logical node paths to physical store paths and back."""

    def to_physical(self, logical_path: Path) -> Path: ...

    def to_logical(self, physical_path: Path) -> Path: ...


class PrefixUriMapping:
    """Serve the logical tree below a URI prefix.

    With the root prefix the mapping is the identity. URIs outside the
    prefix do not map to any node.
    """

    def __init__(self, prefix: Path = ROOT) -> None:
        self._prefix = prefix

    @property
    def prefix(self) -> Path:
        return self._prefix

    def logical_path_for_uri(self, uri_path: Path) -> Path | None:
        if not uri_path.starts_with(self._prefix):
            return None
        return uri_path.relative_to(self._prefix)

    def uri_path_for_logical(self, logical_path: Path) -> Path:
        return self._prefix.join(logical_path)


class SiteRootTranslator:
    """Places the logical web tree under a fixed store path."""

    def __init__(self, site_root: Path = Path(("site", "web"))) -> None:
        self._site_root = site_root

    @property
    def site_root(self) -> Path:
        return self._site_root

    def to_physical(self, logical_path: Path) -> Path:
        return self._site_root.join(logical_path)

    def to_logical(self, physical_path: Path) -> Path:
        return physical_path.relative_to(self._site_root)


class UriPathTranslator:
    """Converts between content nodes and the URI paths that address them."""

    def __init__(
        self,
        mapping: UriMapping,
        node_paths: NodePathTranslator,
        repository: ContentRepository,
        workspaces: WorkspaceResolver,
    ) -> None:
        self._mapping = mapping
        self._node_paths = node_paths
        self._repository = repository
        self._workspaces = workspaces

    def path_for_node(self, node: ContentNode) -> Path:
        """Build the URI path that addresses a node.

        Raises:
            MalformedPathError: If the node lies outside the published tree
        """
        logical = self._node_paths.to_logical(node.path)
        return self._mapping.uri_path_for_logical(logical)

    def node_for_path(self, uri_path: Path, ctx: RequestContext) -> LookupResult:
        """Look up the node a URI path addresses in the request's workspace.

        Store faults and malformed paths are reported as LookupFailed.
        Workspace resolution errors propagate.

        Args:
            uri_path: URI path to look up
            ctx: Request context used to pick the workspace

        Returns:
            Found, NotFound or LookupFailed
        """
        logical = self._mapping.logical_path_for_uri(uri_path.to_absolute())
        if logical is None:
            return NotFound()

        try:
            physical = self._node_paths.to_physical(logical)
            workspace = self._workspaces.get_workspace(ctx)
            store = self._repository.store_for(workspace)
            if not store.exists(physical):
                return NotFound()
            return Found(store.get(physical))
        except (ContentStoreError, MalformedPathError) as e:
            return LookupFailed(str(e))
