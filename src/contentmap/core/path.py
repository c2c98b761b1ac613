"""Hierarchical paths for content nodes and URIs.

A Path is an immutable sequence of segments rooted at "/". The same type is
used for public URI paths, logical node paths and physical store paths;
which of the three a value represents is decided by the code holding it.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from contentmap.errors import MalformedPathError

SEPARATOR = "/"


@dataclass(frozen=True, slots=True)
class Path:
    """Absolute hierarchical path.

    The root path has no segments. Segments are never empty, never "." and
    never contain the separator. Parent references ("..") are rejected rather
    than collapsed so that a request can never climb out of its root.
    """

    segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for segment in self.segments:
            if segment == "..":
                raise MalformedPathError("Parent references are not allowed in paths")
            if not segment or segment == "." or SEPARATOR in segment:
                raise MalformedPathError(f"Invalid path segment: {segment!r}")

    @classmethod
    def parse(cls, value: str) -> Path:
        """Parse a slash separated path.

        Leading, trailing and repeated separators are ignored, as are "."
        segments, so "a//b/./" and "/a/b" parse to the same path.

        Args:
            value: Path string, absolute or relative

        Returns:
            Normalized absolute Path

        Raises:
            MalformedPathError: If the path contains a ".." segment
        """
        return cls(tuple(s for s in value.split(SEPARATOR) if s and s != "."))

    @property
    def depth(self) -> int:
        """Number of segments below the root."""
        return len(self.segments)

    def is_root(self) -> bool:
        return not self.segments

    def parent(self) -> Path:
        """Return the path without its last segment. The root is its own parent."""
        if self.is_root():
            return self
        return Path(self.segments[:-1])

    def to_absolute(self) -> Path:
        # Parsed paths are always anchored at the root.
        return self

    def join(self, other: Path) -> Path:
        """Append the segments of another path."""
        return Path(self.segments + other.segments)

    def starts_with(self, prefix: Path) -> bool:
        return self.segments[: prefix.depth] == prefix.segments

    def relative_to(self, prefix: Path) -> Path:
        """Strip a leading prefix.

        Raises:
            MalformedPathError: If this path is not located under prefix
        """
        if not self.starts_with(prefix):
            raise MalformedPathError(f"{self} is not located under {prefix}")
        return Path(self.segments[prefix.depth :])

    def walk_to_root(self) -> Iterator[Path]:
        """Yield this path followed by each ancestor, ending with the root."""
        current = self
        while True:
            yield current
            parent = current.parent()
            if current.is_root() or parent == current:
                return
            current = parent

    def __str__(self) -> str:
        return SEPARATOR + SEPARATOR.join(self.segments)


ROOT = Path()
