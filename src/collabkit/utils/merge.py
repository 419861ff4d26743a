"""Dictionary merge and dotted-path helpers.

"""

from __future__ import annotations

from typing import Any, Dict

PATH_SEPARATOR = "."


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge.

    Args:
        base (Dict[str, Any]): Mapping that provides the starting values.
        override (Dict[str, Any]): Mapping whose values win on conflict.

    Returns:
        Dict[str, Any]: New mapping; nested mappings are merged recursively.

    Side Effects / I/O:
        - Primarily performs in-memory transformations.

    Examples:
        >>> from collabkit.utils.merge import deep_merge
        >>> deep_merge({"api": {"timeout": 20}}, {"api": {"base_url": "http://x"}})
        {'api': {'timeout': 20, 'base_url': 'http://x'}}

    """
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def set_path(tree: Dict[str, Any], path: str, value: Any) -> Dict[str, Any]:
    """Assign ``value`` at a dotted ``path`` inside ``tree``.

    Args:
        tree (Dict[str, Any]): Nested mapping updated in place.
        path (str): ``.``-delimited location, e.g. ``"profile.phone"``.
        value (Any): Value stored at the final segment.

    Returns:
        Dict[str, Any]: The same ``tree`` object, for chaining.

    Side Effects / I/O:
        - Mutates ``tree``. Intermediate segments that are missing or hold a
          non-mapping value are replaced by a fresh ``{}`` (last writer wins).

    Examples:
        >>> from collabkit.utils.merge import set_path
        >>> set_path({}, "goLive.start", "2025-01-01")
        {'goLive': {'start': '2025-01-01'}}

    """
    parts = path.split(PATH_SEPARATOR)
    node = tree
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value
    return tree


def get_path(tree: Dict[str, Any], path: str) -> Any:
    """Read the value stored at a dotted ``path``.

    Args:
        tree (Dict[str, Any]): Nested mapping to read from.
        path (str): ``.``-delimited location.

    Returns:
        Any: Value found at the final segment.

    Raises:
        KeyError: Raised when any segment of ``path`` is absent.

    Examples:
        >>> from collabkit.utils.merge import get_path
        >>> get_path({"profile": {"name": "Ada"}}, "profile.name")
        'Ada'

    """
    node: Any = tree
    for part in path.split(PATH_SEPARATOR):
        if not isinstance(node, dict) or part not in node:
            raise KeyError(path)
        node = node[part]
    return node
