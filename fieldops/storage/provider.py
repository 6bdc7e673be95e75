from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional


class _DeleteField:
    def __repr__(self) -> str:
        return "DELETE_FIELD"


# Update-map value that removes the field instead of setting it
DELETE_FIELD = _DeleteField()


@dataclass
class Document:
    id: str
    data: Dict[str, Any] = field(default_factory=dict)
    version: int = 1


class DocumentStore:
    """
    Key/value document API. Field presence and types inside `data` are not guaranteed.

    `list` returns insertion order by default; with `descending` and no
    `order_by` it returns the most recently written documents first.
    """

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    def list(
        self,
        collection: str,
        where: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        raise NotImplementedError

    def add(self, collection: str, data: Mapping[str, Any], doc_id: Optional[str] = None) -> Document:
        raise NotImplementedError

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any],
        expected_version: Optional[int] = None,
    ) -> Document:
        raise NotImplementedError


def get_path(data: Mapping[str, Any], path: str) -> Any:
    """Read a dotted field path; any missing or non-dict hop yields None."""
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def apply_updates(data: Dict[str, Any], fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Apply a partial update map in place.

    Keys may be dotted paths; intermediate maps are created as needed and a
    non-dict intermediate value is replaced. DELETE_FIELD removes the leaf.
    """
    for path, value in fields.items():
        parts = path.split(".")
        target = data
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                if value is DELETE_FIELD:
                    target = None
                    break
                child = {}
                target[part] = child
            target = child
        if target is None:
            continue
        if value is DELETE_FIELD:
            target.pop(parts[-1], None)
        else:
            target[parts[-1]] = encode_value(value)
    return data


def encode_value(value: Any) -> Any:
    """Convert datetimes (at any depth) to ISO-8601 strings so documents stay JSON."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [encode_value(v) for v in value]
    return value


def sort_key(value: Any):
    # None sorts last in ascending order; mixed types compare by their string form
    return (value is None, str(value) if value is not None else "")
