"""Value coercion and nested-tree reconstruction for dotted field keys.

"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping

from collabkit.utils.merge import PATH_SEPARATOR, set_path

FieldSnapshot = Dict[str, str]
PathTree = Dict[str, Any]

_NON_PHONE_CHARS = re.compile(r"[^0-9+]")


def coerce_phone(value: str) -> str:
    return _NON_PHONE_CHARS.sub("", str(value))


def coerce_value(key: str, value: str) -> str:
    """Coerce a raw field value based on the suffix of its full dotted key.

    Args:
        key (str): Full dotted key, including the namespace segment.
        value (str): Raw string collected from the field.

    Returns:
        str: Digits and ``+`` only for keys ending in ``phone`` (any case);
        the unchanged value otherwise.

    Examples:
        >>> from collabkit.contract.paths import coerce_value
        >>> coerce_value("purple.profile.phone", "+1 (555) 222-3333")
        '+15552223333'

    """
    if key.lower().endswith("phone"):
        return coerce_phone(value)
    return value


def build_tree(snapshot: Mapping[str, str], namespace: str) -> PathTree:
    """Rebuild the nested tree for every key under ``<namespace>.``.

    Args:
        snapshot (Mapping[str, str]): Flat dotted key -> raw value mapping.
        namespace (str): Leading segment selecting the keys to merge.

    Returns:
        PathTree: Fresh nested mapping; ``{}`` when no key matches.

    Side Effects / I/O:
        - Primarily performs in-memory transformations; ``snapshot`` is not
          modified.

    Examples:
        >>> from collabkit.contract.paths import build_tree
        >>> build_tree({"yellow.goLive.start": "2025-01-01"}, "yellow")
        {'goLive': {'start': '2025-01-01'}}

    """
    prefix = namespace + PATH_SEPARATOR
    tree: PathTree = {}
    for key, value in snapshot.items():
        if not key.startswith(prefix):
            continue
        set_path(tree, key[len(prefix) :], coerce_value(key, value))
    return tree
