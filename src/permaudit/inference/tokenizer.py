"""
Endpoint tokenization.

Reduces a canonical URI (or a catalog endpoint template) to the shape of
the endpoint: identifier-like path segments are replaced by a fixed
placeholder so that "/users/3f2a.../messages/AAMk12..." and the catalog
template "/users/{user-id}/messages/{message-id}" compare equal.

The same functions are applied to live activity paths and to catalog
templates so both sides share one canonicalization rule.
"""

from __future__ import annotations

import re

from permaudit.models.activity import CanonicalUri, ID_PLACEHOLDER, VERSION_LABELS

# Any "{...}" placeholder used by catalog templates
_TEMPLATE_PLACEHOLDER_RE = re.compile(r"\{[^{}/]*\}")

# OData function-call or key syntax: name(args)
_FUNCTION_CALL_RE = re.compile(r"^[^()]*\(.*\)$")


def _has_digit(text: str) -> bool:
    return any(ch.isdigit() for ch in text)


def is_identifier_segment(segment: str) -> bool:
    """
    Check whether a path segment identifies a specific resource.

    GUIDs and numeric IDs always contain a digit; OData function calls
    carry their arguments inline. Version labels are never identifiers.
    """
    if segment in VERSION_LABELS:
        return False
    return _has_digit(segment) or bool(_FUNCTION_CALL_RE.match(segment))


def _tokenize_segment(segment: str, is_last: bool) -> str:
    if not is_identifier_segment(segment):
        return segment
    if not is_last:
        return ID_PLACEHOLDER
    if "(" in segment:
        name = segment.split("(", 1)[0]
        if not name or _has_digit(name):
            name = ID_PLACEHOLDER
        return f"{name}/{ID_PLACEHOLDER}"
    return ID_PLACEHOLDER


def tokenize(uri: str) -> str:
    """
    Replace identifier-like segments of a URI or path with the placeholder.

    Absolute URIs keep their scheme and host prefix; root-relative paths
    are returned root-relative. A URI with no path segments is returned
    as its prefix.

    Args:
        uri: Absolute URI or path (e.g. "/users/42/manager")

    Returns:
        Tokenized string without a trailing slash

    Example:
        >>> tokenize("/users/42/getMemberGroups(x=1)")
        '/users/{id}/getMemberGroups/{id}'
    """
    prefix = ""
    path = uri
    if "://" in uri:
        scheme, rest = uri.split("://", 1)
        host, _, path = rest.partition("/")
        prefix = f"{scheme}://{host}"

    segments = [s for s in path.split("/") if s]
    if not segments:
        return prefix

    last = len(segments) - 1
    tokens = [_tokenize_segment(s, i == last) for i, s in enumerate(segments)]
    return (prefix + "/" + "/".join(tokens)).rstrip("/")


def tokenize_endpoint(canonical: CanonicalUri) -> str:
    """
    Tokenize the path of a canonical URI below its API root.

    Args:
        canonical: Output of the canonicalizer

    Returns:
        Tokenized path (e.g. "/users/{id}"); empty for unknown generations
    """
    return tokenize(canonical.path)


def normalize_template(template: str) -> str:
    """Replace every catalog "{...}" placeholder with the engine placeholder."""
    return _TEMPLATE_PLACEHOLDER_RE.sub(ID_PLACEHOLDER, template)


def tokenize_template(template: str) -> str:
    """
    Normalize and tokenize a catalog endpoint template.

    Args:
        template: Catalog template (e.g. "/users/{user-id}/photos/{size}")

    Returns:
        Tokenized template comparable with tokenized activity paths
    """
    template = template.strip()
    if template and not template.startswith("/") and "://" not in template:
        template = "/" + template
    return tokenize(normalize_template(template))
