"""Typed access to object value trees.

An object's value is a tree of dictionaries and lists whose leaves are
ints, floats, bools and strings. Fields are addressed with dotted paths
(``"m_Father.m_PathID"``); a numeric segment indexes into a list
(``"m_Component.0.component"``).
"""

import copy
from collections.abc import Iterator
from typing import Any, TypeVar

from .errors import TypeMismatch
from .types import FILE_ID_FIELD, PATH_ID_FIELD, ObjectRef

T = TypeVar("T")

_MISSING = object()


def _kind_name(value: Any) -> str:
    if value is _MISSING:
        return "missing field"
    return type(value).__name__


def _is_kind(value: Any, kind: type) -> bool:
    # bool is an int subclass but never a valid stand-in for one
    if kind is int and isinstance(value, bool):
        return False
    if kind is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, kind)


def is_reference(node: Any) -> bool:
    """Return True if ``node`` is a serialized reference field."""
    return isinstance(node, dict) and FILE_ID_FIELD in node and PATH_ID_FIELD in node


class ValueTree:
    """Typed accessor over a mutable value tree.

    Reads and writes fail with TypeMismatch instead of coercing values
    of the wrong kind.

    Example:
        >>> tree = ValueTree({"m_Name": "Door", "m_Father": {"m_FileID": 0, "m_PathID": 4}})
        >>> tree.get("m_Name", str)
        'Door'
        >>> tree.get_ref("m_Father")
        ObjectRef(file_id=0, path_id=4)
    """

    def __init__(self, data: dict[str, Any]):
        self._data = data

    @property
    def data(self) -> dict[str, Any]:
        """The underlying tree (shared, not copied)."""
        return self._data

    def _walk(self, segments: list[str], path: str) -> Any:
        node: Any = self._data
        for segment in segments:
            if isinstance(node, dict):
                node = node.get(segment, _MISSING)
            elif isinstance(node, list) and segment.isdigit() and int(segment) < len(node):
                node = node[int(segment)]
            else:
                node = _MISSING
            if node is _MISSING:
                raise TypeMismatch(path, "existing field", _kind_name(_MISSING))
        return node

    def has(self, path: str) -> bool:
        try:
            self._walk(path.split("."), path)
        except TypeMismatch:
            return False
        return True

    def get(self, path: str, kind: type[T]) -> T:
        """Read the field at ``path``, which must hold a ``kind`` value.

        Args:
            path: Dotted field path
            kind: Expected Python type (int, str, bool, float, list or dict)

        Returns:
            The field value (lists and dicts are returned by reference)

        Raises:
            TypeMismatch: If the field is missing or of another kind
        """
        value = self._walk(path.split("."), path)
        if not _is_kind(value, kind):
            raise TypeMismatch(path, kind.__name__, _kind_name(value))
        return value  # type: ignore[no-any-return]

    def set(self, path: str, value: Any) -> None:
        """Write ``value`` to the field at ``path``.

        A new key may be created inside an existing dictionary. An existing
        field keeps its kind: writing a str over an int raises.

        Raises:
            TypeMismatch: If the parent is missing or the kinds differ
        """
        segments = path.split(".")
        parent = self._walk(segments[:-1], path)
        leaf = segments[-1]

        if isinstance(parent, dict):
            current = parent.get(leaf, _MISSING)
            if current is not _MISSING and not _is_kind(value, type(current)):
                raise TypeMismatch(path, _kind_name(current), _kind_name(value))
            parent[leaf] = value
        elif isinstance(parent, list) and leaf.isdigit() and int(leaf) < len(parent):
            current = parent[int(leaf)]
            if not _is_kind(value, type(current)):
                raise TypeMismatch(path, _kind_name(current), _kind_name(value))
            parent[int(leaf)] = value
        else:
            raise TypeMismatch(path, "dict or list parent", _kind_name(parent))

    def get_ref(self, path: str) -> ObjectRef:
        """Read the reference field at ``path``."""
        return ObjectRef(
            self.get(f"{path}.{FILE_ID_FIELD}", int),
            self.get(f"{path}.{PATH_ID_FIELD}", int),
        )

    def set_ref(self, path: str, ref: ObjectRef) -> None:
        """Point the reference field at ``path`` to ``ref``."""
        self.set(f"{path}.{FILE_ID_FIELD}", ref.file_id)
        self.set(f"{path}.{PATH_ID_FIELD}", ref.path_id)

    def iter_references(self) -> Iterator[tuple[str, dict[str, Any]]]:
        """Yield ``(path, node)`` for every reference field in the tree.

        The node is the live dictionary, so callers may rewrite it in place.
        Reference fields are not descended into.
        """
        stack: list[tuple[str, Any]] = [("", self._data)]
        while stack:
            prefix, node = stack.pop()
            if is_reference(node) and prefix:
                yield prefix, node
                continue
            if isinstance(node, dict):
                items = list(node.items())
            elif isinstance(node, list):
                items = [(str(i), child) for i, child in enumerate(node)]
            else:
                continue
            # Reversed so fields come out in document order
            for key, child in reversed(items):
                if isinstance(child, (dict, list)):
                    stack.append((f"{prefix}.{key}" if prefix else key, child))

    def copy(self) -> "ValueTree":
        """Return a deep copy of this tree."""
        return ValueTree(copy.deepcopy(self._data))

    def __repr__(self) -> str:
        return f"ValueTree({self._data!r})"
