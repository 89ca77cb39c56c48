"""
URI canonicalization for activity records.

Turns a raw, possibly relative, possibly URL-escaped activity URI into a
fully qualified URI with identity shortcuts resolved, so that the same
logical endpoint always normalizes to the same string.
"""

from __future__ import annotations

import logging
from urllib.parse import unquote, urlsplit

from permaudit.config.analysis_config import DEFAULT_GRAPH_BASE_URL
from permaudit.models.activity import (
    CanonicalUri,
    Generation,
    ID_PLACEHOLDER,
    VERSION_LABELS,
)

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = ("http", "https")


class InvalidUriError(ValueError):
    """Exception raised when an activity URI cannot be canonicalized."""

    def __init__(self, message: str, uri: str | None = None):
        self.uri = uri
        suffix = f": {uri!r}" if uri is not None else ""
        super().__init__(f"{message}{suffix}")


class UriCanonicalizer:
    """
    Canonicalizes activity URIs against the Graph API roots.

    Relative URIs are resolved against the configured base URL. The
    "me" shortcut becomes "users/{id}" and any segment containing "@"
    (user principal names, mail addresses) becomes "{id}". Query strings
    and fragments are dropped.
    """

    def __init__(self, base_url: str = DEFAULT_GRAPH_BASE_URL):
        """
        Initialize the canonicalizer.

        Args:
            base_url: Scheme and host of the Graph API
        """
        self.base_url = base_url.strip().rstrip("/").lower()
        parts = urlsplit(self.base_url)
        if parts.scheme not in _ALLOWED_SCHEMES or not parts.netloc:
            raise ValueError(f"Invalid Graph base URL: {base_url!r}")
        self._host = parts.netloc
        self._roots = {
            generation: f"{self.base_url}/{generation.version_label}"
            for generation in (Generation.V1, Generation.BETA)
        }

    @property
    def roots(self) -> dict[Generation, str]:
        """API root URL per generation."""
        return dict(self._roots)

    def canonicalize(self, uri: str) -> CanonicalUri:
        """
        Canonicalize an activity URI.

        Args:
            uri: Raw activity URI, relative ("/v1.0/me") or absolute

        Returns:
            CanonicalUri with the absolute URI, the path below the API
            root and the inferred generation

        Raises:
            InvalidUriError: If the URI is empty or cannot be parsed
        """
        if not isinstance(uri, str) or not uri.strip():
            raise InvalidUriError("Empty activity URI", uri if isinstance(uri, str) else None)

        text = unquote(uri.strip().strip("/"))
        if not text:
            raise InvalidUriError("Activity URI has no content", uri)

        if "://" not in text:
            if text.lower() == self._host or text.lower().startswith(self._host + "/"):
                text = f"{urlsplit(self.base_url).scheme}://{text}"
            else:
                text = f"{self.base_url}/{text}"

        try:
            parts = urlsplit(text)
            # Accessing the port validates it
            parts.port
        except ValueError as e:
            raise InvalidUriError(f"Unparsable activity URI ({e})", uri) from e

        scheme = parts.scheme.lower()
        if scheme not in _ALLOWED_SCHEMES:
            raise InvalidUriError(f"Unsupported URI scheme '{parts.scheme}'", uri)
        if not parts.netloc or not parts.hostname:
            raise InvalidUriError("Activity URI has no host", uri)

        segments = self._resolve_segments(parts.path)
        path = "".join(f"/{s}" for s in segments)
        absolute_uri = f"{scheme}://{parts.netloc.lower()}{path}"

        for generation, root in self._roots.items():
            if absolute_uri == root or absolute_uri.startswith(root + "/"):
                return CanonicalUri(
                    absolute_uri=absolute_uri,
                    path=absolute_uri[len(root):],
                    generation=generation,
                )

        logger.debug(f"URI outside known API roots: {absolute_uri}")
        return CanonicalUri(
            absolute_uri=absolute_uri,
            path="",
            generation=Generation.UNKNOWN,
        )

    def _resolve_segments(self, path: str) -> list[str]:
        """Drop empty segments and replace identity shortcuts."""
        segments: list[str] = []
        for index, segment in enumerate(s for s in path.split("/") if s):
            if index == 0 and segment.lower() in VERSION_LABELS:
                segments.append(segment.lower())
            elif segment == "me":
                segments.extend(["users", ID_PLACEHOLDER])
            elif "@" in segment:
                segments.append(ID_PLACEHOLDER)
            else:
                # Decoded "%" is re-escaped so the result decodes to itself
                segments.append(segment.replace("%", "%25"))
        return segments


def canonicalize_uri(
    uri: str,
    base_url: str = DEFAULT_GRAPH_BASE_URL,
) -> CanonicalUri:
    """
    Canonicalize a single activity URI.

    Args:
        uri: Raw activity URI
        base_url: Scheme and host of the Graph API

    Returns:
        CanonicalUri

    Raises:
        InvalidUriError: If the URI cannot be canonicalized
    """
    return UriCanonicalizer(base_url).canonicalize(uri)
