"""Core type definitions."""

from typing import NewType

# URL path as received from the client (e.g., "/guide", "/domain/page")
# Distinct from node Path to catch type mismatches
URLPath = NewType("URLPath", str)

# Workspace identifier (e.g., "published", "draft")
WorkspaceId = NewType("WorkspaceId", str)
