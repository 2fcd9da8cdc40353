"""Compile query-string parameters into a listing plan.

Keys such as ``tuition[lte]=10000`` are tokenized into ``(field, operator, value)``
terms; ``select``, ``sort``, ``page`` and ``limit`` are control keys and never
become filters.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

CONTROL_KEYS = frozenset({"select", "sort", "page", "limit"})
DEFAULT_SORT = "-createdAt"
DEFAULT_LIMIT = 25


class Operator(str, Enum):
    EQ = "eq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    # Keys the grammar does not understand; they compile to a filter matching nothing
    UNSUPPORTED = "unsupported"


# Suffix token -> operator. New operators only need an entry here.
SUFFIX_OPERATORS: dict[str, Operator] = {
    "gt": Operator.GT,
    "gte": Operator.GTE,
    "lt": Operator.LT,
    "lte": Operator.LTE,
    "in": Operator.IN,
}

_KEY_PATTERN = re.compile(r"^(?P<field>[^\[\]]+)(?:\[(?P<suffix>[^\[\]]*)\])?$")


@dataclass(frozen=True, slots=True)
class FilterTerm:
    field: str
    operator: Operator
    value: str | tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SortKey:
    field: str
    descending: bool = False


@dataclass(frozen=True, slots=True)
class QueryPlan:
    filters: tuple[FilterTerm, ...] = ()
    select: tuple[str, ...] | None = None
    sort: tuple[SortKey, ...] = (SortKey("createdAt", descending=True),)
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def take(self) -> int:
        return self.limit


@dataclass(frozen=True, slots=True)
class Expansion:
    """Replace a relation reference with the referenced record(s) in the output."""

    relation: str
    fields: tuple[str, ...] | None = None


@dataclass(slots=True)
class Page:
    items: list[dict[str, Any]]
    total: int
    pagination: dict[str, dict[str, int]] = field(default_factory=dict)

    def envelope(self) -> dict[str, Any]:
        return {
            "success": True,
            "count": len(self.items),
            "pagination": self.pagination,
            "data": self.items,
        }


def tokenize_key(key: str) -> tuple[str, Operator]:
    """Split ``field[op]`` into its field name and operator.

    Malformed keys and unknown suffixes are not rejected; they yield
    ``Operator.UNSUPPORTED`` so the listing comes back empty.
    """
    match = _KEY_PATTERN.match(key)
    if match is None:
        return key, Operator.UNSUPPORTED

    suffix = match.group("suffix")
    if suffix is None:
        return match.group("field"), Operator.EQ

    operator = SUFFIX_OPERATORS.get(suffix)
    if operator is None:
        return match.group("field"), Operator.UNSUPPORTED
    return match.group("field"), operator


def tokenize(params: Mapping[str, str]) -> tuple[FilterTerm, ...]:
    """Turn every non-control parameter into a filter term."""
    terms: list[FilterTerm] = []
    for key, raw in params.items():
        if key in CONTROL_KEYS:
            continue
        field_name, operator = tokenize_key(key)
        if operator is Operator.IN:
            value: str | tuple[str, ...] = _split_csv(raw)
        else:
            value = raw
        terms.append(FilterTerm(field_name, operator, value))
    return tuple(terms)


def parse_sort(raw: str | None) -> tuple[SortKey, ...]:
    keys = []
    for token in _split_csv(raw or DEFAULT_SORT):
        if token.startswith("-"):
            keys.append(SortKey(token[1:], descending=True))
        else:
            keys.append(SortKey(token.lstrip("+")))
    keys = [key for key in keys if key.field]
    if not keys:
        return parse_sort(DEFAULT_SORT)
    return tuple(keys)


def compile_query(params: Mapping[str, str], *, default_limit: int = DEFAULT_LIMIT) -> QueryPlan:
    """Build a deterministic listing plan from flat query parameters."""
    select_raw = params.get("select")
    select = _split_csv(select_raw) if select_raw else None

    return QueryPlan(
        filters=tokenize(params),
        select=select or None,
        sort=parse_sort(params.get("sort")),
        page=_positive_int(params.get("page"), 1),
        limit=_positive_int(params.get("limit"), default_limit),
    )


def build_pagination(page: int, limit: int, total: int) -> dict[str, dict[str, int]]:
    """Navigation links; each key is present only when that page exists."""
    pagination: dict[str, dict[str, int]] = {}
    skip = (page - 1) * limit
    if skip + limit < total:
        pagination["next"] = {"page": page + 1, "limit": limit}
    if page > 1:
        pagination["prev"] = {"page": page - 1, "limit": limit}
    return pagination


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _positive_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default
