"""Workspace selection for requests.

Which workspace a request reads from is decided by the first rule that
applies:

1. An explicit workspace query parameter. Used verbatim for this call only.
2. A resolution already made earlier in the same request.
3. The same parameter embedded in the Referer's query string.
4. The workspace cookie.
5. The deployment default, when the candidate from 3 or 4 is missing or
   names a workspace the registry does not know.

Results reached through 3-5 are memoized on the request and produce a
cookie command: the cookie pins any non-default workspace and is cleared
once the request is back on the default.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote_plus

from contentmap.core.context import RequestContext
from contentmap.core.store import WorkspaceRegistry
from contentmap.core.types import WorkspaceId
from contentmap.errors import RefererDecodeError, WorkspaceConfigurationError

logger = logging.getLogger(__name__)

WORKSPACE_PARAM = "brix-workspace"
WORKSPACE_COOKIE = "brix-revision"

DefaultWorkspaceProvider = Callable[[RequestContext], WorkspaceId | None]

# "%" not followed by two hex digits
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class WorkspaceSource(Enum):
    """Rule that produced a workspace resolution."""

    PARAMETER = "parameter"
    REFERER = "referer"
    COOKIE = "cookie"
    DEFAULT = "default"


@dataclass(frozen=True)
class WorkspaceResolution:
    """Workspace chosen for a request and the rule that chose it."""

    workspace: WorkspaceId
    source: WorkspaceSource


class CookieAction(Enum):
    SET = "set"
    CLEAR = "clear"


@dataclass(frozen=True)
class CookieCommand:
    """Cookie change the web layer applies to the outgoing response."""

    action: CookieAction
    name: str
    value: str = ""
    path: str = "/"


def static_default(workspace: str | None) -> DefaultWorkspaceProvider:
    """Default-workspace provider that always answers the same id."""
    value = WorkspaceId(workspace) if workspace is not None else None

    def provider(ctx: RequestContext) -> WorkspaceId | None:
        return value

    return provider


def decode_query_token(token: str) -> str:
    """URL-decode one key=value token of a query string.

    Raises:
        RefererDecodeError: If the token has a truncated or invalid escape
    """
    if _BAD_ESCAPE.search(token):
        raise RefererDecodeError(f"Malformed percent-encoding in {token!r}")
    try:
        return unquote_plus(token, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as e:
        raise RefererDecodeError(f"Invalid UTF-8 escape in {token!r}") from e


def extract_workspace_from_referer(
    referer: str,
    param_name: str = WORKSPACE_PARAM,
) -> WorkspaceId | None:
    """Find a workspace parameter in a referer URL's query string.

    Tokens are decoded in order until the first "<param_name>=<value>" with a
    non-empty value; tokens after it are not inspected.

    Args:
        referer: Referer header value
        param_name: Workspace parameter name

    Returns:
        Workspace id, or None if the referer carries no hint

    Raises:
        RefererDecodeError: If a token before the match is malformed
    """
    _, separator, query = referer.partition("?")
    if not separator or not query:
        return None

    prefix = f"{param_name}="
    for token in query.split("&"):
        decoded = decode_query_token(token)
        if decoded.startswith(prefix):
            value = decoded[len(prefix) :]
            if value:
                return WorkspaceId(value)
    return None


def resolve_workspace(
    *,
    referer: str | None,
    cookie_value: str | None,
    exists: Callable[[WorkspaceId], bool],
    default: WorkspaceId | None,
    param_name: str = WORKSPACE_PARAM,
) -> WorkspaceResolution:
    """Pick a workspace from the referer hint, the cookie and the default.

    Args:
        referer: Referer header value, if any
        cookie_value: Workspace cookie value, if any
        exists: Registry existence predicate
        default: Deployment default workspace
        param_name: Workspace parameter name looked up in the referer

    Returns:
        The resolution

    Raises:
        RefererDecodeError: If the referer query string is malformed
        WorkspaceConfigurationError: If nothing valid remains and there is no default
    """
    candidate: WorkspaceId | None = None
    source = WorkspaceSource.DEFAULT

    hint = extract_workspace_from_referer(referer, param_name) if referer else None
    if hint is not None:
        candidate, source = hint, WorkspaceSource.REFERER
    elif cookie_value:
        candidate, source = WorkspaceId(cookie_value), WorkspaceSource.COOKIE

    if candidate is not None and not exists(candidate):
        logger.debug(f"Ignoring unknown workspace {candidate!r} from {source.value}")
        candidate = None

    if candidate is not None:
        return WorkspaceResolution(candidate, source)

    if default is None:
        raise WorkspaceConfigurationError(
            "Could not resolve workspace to use for this request"
        )
    return WorkspaceResolution(default, WorkspaceSource.DEFAULT)


def cookie_command_for(
    resolution: WorkspaceResolution,
    cookie_value: str | None,
    default: WorkspaceId | None,
    cookie_name: str = WORKSPACE_COOKIE,
) -> CookieCommand | None:
    """Decide how the workspace cookie changes after a resolution.

    Args:
        resolution: Resolution reached through referer, cookie or default
        cookie_value: Cookie value sent with the request (None if absent)
        default: Deployment default workspace
        cookie_name: Workspace cookie name

    Returns:
        SET for a non-default workspace, CLEAR when back on the default with a
        cookie present, None otherwise
    """
    if resolution.workspace != default:
        return CookieCommand(CookieAction.SET, cookie_name, resolution.workspace)
    if cookie_value is not None:
        return CookieCommand(CookieAction.CLEAR, cookie_name)
    return None


class WorkspaceResolver:
    """Resolves the workspace of a request against a workspace registry."""

    def __init__(
        self,
        registry: WorkspaceRegistry,
        default_workspace: DefaultWorkspaceProvider,
        *,
        param_name: str = WORKSPACE_PARAM,
        cookie_name: str = WORKSPACE_COOKIE,
    ) -> None:
        self._registry = registry
        self._default_workspace = default_workspace
        self._param_name = param_name
        self._cookie_name = cookie_name

    @property
    def param_name(self) -> str:
        return self._param_name

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    def get_workspace(self, ctx: RequestContext) -> WorkspaceId:
        """Return the workspace the request operates against."""
        return self.resolve(ctx).workspace

    def resolve(self, ctx: RequestContext) -> WorkspaceResolution:
        """Resolve the workspace of a request, recording side effects on ctx.

        Raises:
            RefererDecodeError: If the referer query string is malformed
            WorkspaceConfigurationError: If no workspace can be determined
        """
        explicit = ctx.query.get(self._param_name)
        if explicit is not None:
            return WorkspaceResolution(WorkspaceId(explicit), WorkspaceSource.PARAMETER)

        if ctx.workspace is not None:
            return ctx.workspace

        cookie_value = ctx.cookies.get(self._cookie_name)
        default = self._default_workspace(ctx)
        resolution = resolve_workspace(
            referer=ctx.referer,
            cookie_value=cookie_value,
            exists=self._registry.exists,
            default=default,
            param_name=self._param_name,
        )
        logger.debug(
            f"Resolved workspace {resolution.workspace!r} from {resolution.source.value}"
        )

        ctx.workspace = resolution
        ctx.cookie_command = cookie_command_for(
            resolution, cookie_value, default, self._cookie_name
        )
        return resolution
