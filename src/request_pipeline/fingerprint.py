"""Request fingerprinting for duplicate-request cancellation.

Two requests are considered the same logical request when their method,
url, body and query parameters match. Body and params are serialized as
query strings with keys sorted at every nesting level, so the insertion
order of mapping keys never affects the fingerprint.
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote


def compute_fingerprint(
    method: str,
    url: str,
    body: Any = None,
    params: Any = None,
) -> str:
    """Compute the dedup identity of a request.

    The result is ``method&url&serialize(body)&serialize(params)`` with the
    method lower-cased. Absent body or params contribute an empty segment.

    Args:
        method: HTTP method (case-insensitive)
        url: Request url or path, used verbatim
        body: Request body (mapping, sequence, scalar, str or bytes)
        params: Query parameters

    Returns:
        The fingerprint string

    Examples:
        >>> compute_fingerprint("GET", "/users", None, {"id": 2, "active": True})
        'get&/users&&active=true&id=2'
        >>> compute_fingerprint("post", "/tags", {"tags": ["a", "b"]})
        'post&/tags&tags=a&tags=b&'
    """
    components = [
        (method or "").lower(),
        url or "",
        serialize(body),
        serialize(params),
    ]
    return "&".join(components)


def serialize(value: Any) -> str:
    """Serialize a value as a key-sorted query string.

    Mappings become ``key=value`` pairs, nested mappings use bracket keys
    (``a[b]=1``) and sequences repeat their key (``a=1&a=2``). Keys are
    sorted ascending at each level and percent-encoded along with values.

    Args:
        value: Value to serialize

    Returns:
        Encoded query string, empty for None or empty containers
    """
    if value is None:
        return ""

    if isinstance(value, (bytes, bytearray)):
        return quote(bytes(value), safe="")

    if isinstance(value, str):
        return quote(value, safe="")

    if not isinstance(value, (Mapping, list, tuple)):
        return quote(_scalar(value), safe="")

    return "&".join(
        f"{quote(key, safe='')}={quote(val, safe='')}" for key, val in encode_pairs(value)
    )


def encode_pairs(value: Mapping | list | tuple) -> list[tuple[str, str]]:
    """Flatten a structured value into unencoded ``(key, value)`` pairs.

    These are the pairs behind ``serialize``; the pipeline also sends them
    on the wire as query parameters and form fields, so nested structures
    arrive as ``filter[name]=a`` rather than a Python repr.

    Examples:
        >>> encode_pairs({"filter": {"name": "a"}, "ids": [1, 2]})
        [('filter[name]', 'a'), ('ids', '1'), ('ids', '2')]
    """
    pairs: list[tuple[str, str]] = []
    if isinstance(value, Mapping):
        for key in sorted(value, key=str):
            _flatten(str(key), value[key], pairs)
    else:
        for index, item in enumerate(value):
            _flatten(str(index), item, pairs)
    return pairs


def _flatten(prefix: str, value: Any, pairs: list[tuple[str, str]]) -> None:
    """Append the encoded pairs for ``value`` under ``prefix``."""
    if isinstance(value, Mapping):
        for key in sorted(value, key=str):
            _flatten(f"{prefix}[{key}]", value[key], pairs)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _flatten(prefix, item, pairs)
    else:
        pairs.append((prefix, _scalar(value)))


def _scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)
