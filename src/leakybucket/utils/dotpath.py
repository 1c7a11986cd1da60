"""Dot-path access into nested dictionaries.

Bucket metadata is a plain nested ``dict``.  These helpers address values
inside it with dot-separated keys, so ``"user.id"`` refers to
``data["user"]["id"]``.  None of them interpret the values they store.
"""

from __future__ import annotations

from typing import Any

_MISSING = object()


def split_path(path: str) -> list[str]:
    """Split *path* on dots.

    Raises
    ------
    ValueError
        If *path* is empty or contains an empty segment (``"a..b"``).
    """
    parts = path.split(".")
    if not path or any(part == "" for part in parts):
        raise ValueError(f"invalid data key: {path!r}")
    return parts


def _walk(data: dict, parts: list[str]) -> Any:
    node: Any = data
    for part in parts:
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


def has_path(data: dict, path: str) -> bool:
    """Return ``True`` if *path* resolves to a value in *data*.

    A stored ``None`` counts as present.
    """
    return _walk(data, split_path(path)) is not _MISSING


def get_path(data: dict, path: str, default: Any = None) -> Any:
    """Return the value at *path*, or *default* when it does not resolve."""
    value = _walk(data, split_path(path))
    return default if value is _MISSING else value


def set_path(data: dict, path: str, value: Any) -> None:
    """Store *value* at *path*, creating intermediate dicts as needed.

    An intermediate value that is not a dict is replaced by an empty dict.
    """
    parts = split_path(path)
    node = data
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def delete_path(data: dict, path: str) -> bool:
    """Remove the value at *path*.

    Returns ``True`` if something was removed.  Parent dicts left empty by
    the removal are kept.
    """
    parts = split_path(path)
    parent = _walk(data, parts[:-1]) if len(parts) > 1 else data
    if not isinstance(parent, dict) or parts[-1] not in parent:
        return False
    del parent[parts[-1]]
    return True
