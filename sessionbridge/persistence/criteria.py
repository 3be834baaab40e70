"""
Translation of document criteria into SQLAlchemy WHERE clauses.

Criteria are plain dicts keyed by mapped attribute name. A bare value means
equality; a dict value holds one or more operators::

    {"sid": "sess123", "expires_at": {"$gt": now}}
"""

from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy import ColumnElement, func, inspect

from sessionbridge.core.errors import CriteriaError

Criteria = Mapping[str, Any]


def _starts_with(column: Any, value: str) -> ColumnElement[bool]:
    # LIKE is case-insensitive for ASCII on SQLite
    return func.substr(column, 1, len(value)) == value


OPERATORS: Dict[str, Callable[[Any, Any], ColumnElement[bool]]] = {
    "$eq": lambda column, value: column == value,
    "$ne": lambda column, value: column != value,
    "$gt": lambda column, value: column > value,
    "$gte": lambda column, value: column >= value,
    "$lt": lambda column, value: column < value,
    "$lte": lambda column, value: column <= value,
    "$in": lambda column, value: column.in_(list(value)),
    "$startswith": _starts_with,
}


def resolve_column(model: type, field: str) -> Any:
    """Return the mapped column attribute for ``field`` on ``model``."""
    attrs = inspect(model).column_attrs
    if field not in attrs:
        raise CriteriaError(f"{model.__name__} has no field {field!r}")
    return getattr(model, field)


def build_clauses(model: type, criteria: Optional[Criteria]) -> List[ColumnElement[bool]]:
    """Build the list of WHERE clauses for ``criteria``; empty matches all."""
    clauses: List[ColumnElement[bool]] = []
    for field, condition in (criteria or {}).items():
        column = resolve_column(model, field)
        if not isinstance(condition, Mapping):
            clauses.append(column == condition)
            continue
        for operator, value in condition.items():
            try:
                build = OPERATORS[operator]
            except KeyError:
                raise CriteriaError(
                    f"Unsupported operator {operator!r} on field {field!r}"
                ) from None
            clauses.append(build(column, value))
    return clauses
