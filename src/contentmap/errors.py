"""Exceptions raised by contentmap."""


class ContentmapError(Exception):
    """Base class for all contentmap errors."""


class ContentStoreError(ContentmapError):
    """Content store could not answer a lookup."""


class MalformedPathError(ContentmapError, ValueError):
    """Path string or segment cannot be represented as a node path."""


class WorkspaceConfigurationError(ContentmapError):
    """No workspace could be determined for the current request."""


class RefererDecodeError(ContentmapError, ValueError):
    """Referer query string contains malformed percent-encoding."""
