"""Wiring of the resolution components from configuration."""

from __future__ import annotations

from dataclasses import dataclass

from contentmap.config import Config
from contentmap.core.dispatch import NodeDispatchRegistry
from contentmap.core.mapping import PrefixUriMapping, SiteRootTranslator, UriPathTranslator
from contentmap.core.path import Path
from contentmap.core.resolver import PathResolver
from contentmap.core.store import (
    ContentRepository,
    FileSystemRepository,
    FileSystemWorkspaceRegistry,
    WorkspaceRegistry,
)
from contentmap.core.workspace import WorkspaceResolver, static_default
from contentmap.responders import create_default_dispatch


@dataclass(frozen=True)
class ContentMapper:
    """Resolution components shared by all requests of one application."""

    resolver: PathResolver
    translator: UriPathTranslator
    workspaces: WorkspaceResolver
    dispatch: NodeDispatchRegistry

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        repository: ContentRepository | None = None,
        registry: WorkspaceRegistry | None = None,
        dispatch: NodeDispatchRegistry | None = None,
    ) -> ContentMapper:
        """Build the components described by a configuration.

        Args:
            config: Application configuration
            repository: Content repository (default: filesystem at content.root_dir)
            registry: Workspace registry (default: filesystem at content.root_dir)
            dispatch: Responder table (default: built-in responders)

        Returns:
            Wired ContentMapper
        """
        if repository is None:
            repository = FileSystemRepository(config.content.root_dir)
        if registry is None:
            registry = FileSystemWorkspaceRegistry(config.content.root_dir)
        if dispatch is None:
            dispatch = create_default_dispatch()

        workspaces = WorkspaceResolver(
            registry,
            static_default(config.content.default_workspace),
            param_name=config.workspace.param_name,
            cookie_name=config.workspace.cookie_name,
        )
        translator = UriPathTranslator(
            PrefixUriMapping(Path.parse(config.content.uri_prefix)),
            SiteRootTranslator(Path.parse(config.content.site_root)),
            repository,
            workspaces,
        )
        resolver = PathResolver(
            translator,
            dispatch,
            reserved_prefixes=config.routing.reserved_prefixes,
            internal_namespace=config.routing.internal_namespace,
        )
        return cls(
            resolver=resolver,
            translator=translator,
            workspaces=workspaces,
            dispatch=dispatch,
        )
