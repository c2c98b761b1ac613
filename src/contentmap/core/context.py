"""Per-request resolution state."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from yarl import URL

if TYPE_CHECKING:
    from contentmap.core.workspace import CookieCommand, WorkspaceResolution


@dataclass
class RequestContext:
    """State for resolving one request.

    Created when a request starts and dropped when it ends. The memoized
    workspace resolution and the pending cookie command are written by
    WorkspaceResolver and read by the web layer when the response goes out.
    """

    url: URL
    query: Mapping[str, str] = field(default_factory=dict)
    referer: str | None = None
    cookies: Mapping[str, str] = field(default_factory=dict)
    workspace: WorkspaceResolution | None = None
    cookie_command: CookieCommand | None = None

    @classmethod
    def for_url(
        cls,
        url: str | URL,
        *,
        referer: str | None = None,
        cookies: Mapping[str, str] | None = None,
    ) -> RequestContext:
        """Build a context from a bare URL, taking query parameters from it."""
        if isinstance(url, str):
            url = URL(url)
        return cls(
            url=url,
            query=url.query,
            referer=referer,
            cookies=dict(cookies or {}),
        )
