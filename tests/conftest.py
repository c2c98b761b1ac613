"""Shared test fixtures."""

from pathlib import Path

import pytest
from contentmap.config import (
    Config,
    ContentConfig,
    RoutingConfig,
    ServerConfig,
    WorkspaceConfig,
)
from contentmap.core.store import InMemoryRepository, InMemoryWorkspaceRegistry


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with a tmp_path content root.

    Creates the content root with "published" and "draft" workspace
    directories; "published" is the default workspace.
    """
    root_dir = tmp_path / "content"
    (root_dir / "published").mkdir(parents=True, exist_ok=True)
    (root_dir / "draft").mkdir(parents=True, exist_ok=True)

    return Config(
        server=ServerConfig(),
        content=ContentConfig(root_dir=root_dir, default_workspace="published"),
        routing=RoutingConfig(),
        workspace=WorkspaceConfig(),
    )


@pytest.fixture
def repository() -> InMemoryRepository:
    """In-memory repository with empty "published" and "draft" workspaces."""
    repo = InMemoryRepository()
    repo.workspace("published")
    repo.workspace("draft")
    return repo


@pytest.fixture
def registry() -> InMemoryWorkspaceRegistry:
    return InMemoryWorkspaceRegistry(["published", "draft"])
