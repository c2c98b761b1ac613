"""Configuration management for contentmap.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from contentmap.core.resolver import INTERNAL_NAMESPACE, RESERVED_PREFIXES
from contentmap.core.workspace import WORKSPACE_COOKIE, WORKSPACE_PARAM

CONFIG_FILENAME = "contentmap.toml"


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class ContentConfig:
    """Content repository configuration."""

    root_dir: Path = field(default_factory=lambda: Path("content"))
    default_workspace: str | None = None
    site_root: str = "/"
    uri_prefix: str = "/"


@dataclass
class RoutingConfig:
    """Request routing configuration."""

    reserved_prefixes: list[str] = field(
        default_factory=lambda: sorted(RESERVED_PREFIXES),
    )
    internal_namespace: str = INTERNAL_NAMESPACE


@dataclass
class WorkspaceConfig:
    """Workspace selection configuration."""

    param_name: str = WORKSPACE_PARAM
    cookie_name: str = WORKSPACE_COOKIE


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    content: ContentConfig
    routing: RoutingConfig
    workspace: WorkspaceConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for contentmap.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        return cls(
            server=ServerConfig(),
            content=ContentConfig(),
            routing=RoutingConfig(),
            workspace=WorkspaceConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        config_dir = path.parent

        return cls(
            server=cls._parse_server(data.get("server")),
            content=cls._parse_content(data.get("content"), config_dir),
            routing=cls._parse_routing(data.get("routing")),
            workspace=cls._parse_workspace(data.get("workspace")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_content(cls, data: object, config_dir: Path) -> ContentConfig:
        """Parse content configuration section.

        Args:
            data: Raw content section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            ContentConfig instance
        """
        if data is None:
            return ContentConfig(root_dir=config_dir / "content")

        if not isinstance(data, dict):
            raise ValueError("content section must be a dictionary")

        root_dir = data.get("root_dir", "content")
        if not isinstance(root_dir, str):
            raise ValueError("content.root_dir must be a string")

        default_workspace = data.get("default_workspace")
        if default_workspace is not None and not isinstance(default_workspace, str):
            raise ValueError("content.default_workspace must be a string")

        site_root = data.get("site_root", "/")
        if not isinstance(site_root, str):
            raise ValueError("content.site_root must be a string")

        uri_prefix = data.get("uri_prefix", "/")
        if not isinstance(uri_prefix, str):
            raise ValueError("content.uri_prefix must be a string")

        return ContentConfig(
            root_dir=config_dir / root_dir,
            default_workspace=default_workspace,
            site_root=site_root,
            uri_prefix=uri_prefix,
        )

    @classmethod
    def _parse_routing(cls, data: object) -> RoutingConfig:
        if data is None:
            return RoutingConfig()

        if not isinstance(data, dict):
            raise ValueError("routing section must be a dictionary")

        prefixes_raw = data.get("reserved_prefixes")
        reserved_prefixes = sorted(RESERVED_PREFIXES)
        if prefixes_raw is not None:
            if not isinstance(prefixes_raw, list):
                raise ValueError("routing.reserved_prefixes must be a list")
            reserved_prefixes = []
            for item in prefixes_raw:
                if not isinstance(item, str):
                    raise ValueError("routing.reserved_prefixes items must be strings")
                reserved_prefixes.append(item)

        internal_namespace = data.get("internal_namespace", INTERNAL_NAMESPACE)
        if not isinstance(internal_namespace, str) or not internal_namespace:
            raise ValueError("routing.internal_namespace must be a non-empty string")

        return RoutingConfig(
            reserved_prefixes=reserved_prefixes,
            internal_namespace=internal_namespace,
        )

    @classmethod
    def _parse_workspace(cls, data: object) -> WorkspaceConfig:
        if data is None:
            return WorkspaceConfig()

        if not isinstance(data, dict):
            raise ValueError("workspace section must be a dictionary")

        param_name = data.get("param_name", WORKSPACE_PARAM)
        if not isinstance(param_name, str) or not param_name:
            raise ValueError("workspace.param_name must be a non-empty string")

        cookie_name = data.get("cookie_name", WORKSPACE_COOKIE)
        if not isinstance(cookie_name, str) or not cookie_name:
            raise ValueError("workspace.cookie_name must be a non-empty string")

        return WorkspaceConfig(param_name=param_name, cookie_name=cookie_name)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        root_dir: Path | None = None,
        default_workspace: str | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            root_dir: Override content.root_dir
            default_workspace: Override content.default_workspace

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        content = self.content
        if root_dir is not None or default_workspace is not None:
            content = replace(
                self.content,
                root_dir=root_dir if root_dir is not None else self.content.root_dir,
                default_workspace=(
                    default_workspace
                    if default_workspace is not None
                    else self.content.default_workspace
                ),
            )

        return replace(self, server=server, content=content)
