"""Helpers for bracketed form field names like ``tx_blog_post[post][title]``."""

from __future__ import annotations

from typing import Any, Iterable


def parse_field_name(name: str) -> list[str]:
    """Split a bracketed field name into its segments.

    ``"a[b][]"`` -> ``["a", "b", ""]``. An empty segment stands for ``[]``.
    """
    return [part.rstrip("]") for part in name.split("[")]


def array_key(segment: str) -> str | int:
    """Canonical dict key for a name segment: ``"3"`` -> ``3``, ``"03"`` stays a string."""
    if segment.isascii() and segment.isdigit() and (segment == "0" or not segment.startswith("0")):
        return int(segment)
    return segment


def next_index(container: dict) -> int:
    indexes = [key for key in container if isinstance(key, int)]
    return max(indexes) + 1 if indexes else 0


def unflatten(pairs: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Build nested dicts from ``(field name, value)`` pairs.

    ``[]`` appends under the next integer key, after any explicit ``[0]``
    style indexes. When a name is used both as a leaf and as a branch, the
    last pair wins.
    """
    arguments: dict[Any, Any] = {}
    for name, value in pairs:
        segments = parse_field_name(name)
        current = arguments
        for segment in segments[:-1]:
            key = next_index(current) if segment == "" else array_key(segment)
            child = current.get(key)
            if not isinstance(child, dict):
                child = {}
                current[key] = child
            current = child
        last = segments[-1]
        current[next_index(current) if last == "" else array_key(last)] = value
    return arguments


def namespaced(arguments: dict[str, Any], namespace: str) -> dict[str, Any]:
    """Return the arguments submitted under a plugin namespace.

    With an empty namespace every argument belongs to the plugin.
    """
    if not namespace:
        return arguments
    scoped = arguments.get(namespace)
    return scoped if isinstance(scoped, dict) else {}
