"""Interpretation of list query parameters.

Turns the raw `page`, `limit`, `sortby` and `populate` query-string values
into an immutable `QueryPlan` that repositories apply to a select
statement. The planner is pure and never raises: malformed input falls
back to defaults, and whether the sort field or relations actually exist
is left to the executor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT = "name"
DESC_PREFIX = "Desc"

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")
# largest offset a signed 64-bit database integer can hold
MAX_OFFSET = 2**63 - 1


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class IncludeSpec:
    """One eager-loaded relation, optionally with relations loaded inside it."""

    relation: str
    nested: tuple[IncludeSpec, ...] = ()


@dataclass(frozen=True)
class RelationNode:
    """A relation an entity may eager-load and the relations allowed inside it."""

    name: str
    children: tuple[RelationNode, ...] = ()


@dataclass(frozen=True)
class RelationSchema:
    """Populate vocabulary of one entity.

    `aliases` maps lower-case client tokens to canonical relation names;
    `tree` lists the relations reachable from the entity. A child node is
    only included when its parent is.
    """

    aliases: Mapping[str, str]
    tree: tuple[RelationNode, ...] = ()


@dataclass(frozen=True)
class QueryPlan:
    limit: int
    offset: int
    page: int
    sort_field: str
    sort_order: SortOrder
    includes: tuple[IncludeSpec, ...] = field(default_factory=tuple)


def parse_int(raw: Optional[str], default: int) -> int:
    """Parse the leading integer of `raw`.

    `"12abc"` gives 12 and `"3.9"` gives 3. Absent, empty or non-numeric
    input, and a parsed zero, give `default`.
    """
    if raw is None:
        return default
    m = _LEADING_INT.match(str(raw))
    if not m:
        return default
    value = int(m.group(1))
    return value or default


def resolve_pagination(
    page: Optional[str],
    limit: Optional[str],
    max_limit: Optional[int] = None,
    default_limit: int = DEFAULT_LIMIT,
) -> tuple[int, int, int]:
    """Return `(page, limit, offset)` for the raw values.

    Negative values are clamped to 1 and `limit` is capped at `max_limit`
    when one is given. `page` is capped so the offset still fits in
    `MAX_OFFSET`.
    """
    resolved_limit = min(max(1, parse_int(limit, default_limit)), MAX_OFFSET)
    if max_limit is not None:
        resolved_limit = min(resolved_limit, max_limit)
    resolved_page = min(max(1, parse_int(page, DEFAULT_PAGE)), MAX_OFFSET // resolved_limit + 1)
    return resolved_page, resolved_limit, (resolved_page - 1) * resolved_limit


def resolve_sort(sortby: Optional[str]) -> tuple[str, SortOrder]:
    """Split `sortby` into field and direction; a `Desc` prefix means descending."""
    sortby = sortby or DEFAULT_SORT
    if sortby.startswith(DESC_PREFIX):
        return sortby[len(DESC_PREFIX):], SortOrder.DESC
    return sortby, SortOrder.ASC


def populate_tokens(populate: Optional[str]) -> list[str]:
    """Lower-case, comma-split and trimmed tokens of `populate`."""
    if not populate:
        return []
    return [t.strip() for t in populate.lower().split(",") if t.strip()]


def resolve_includes(populate: Optional[str], schema: RelationSchema) -> tuple[IncludeSpec, ...]:
    """Build the include graph requested by `populate`.

    Tokens the schema does not know are ignored.
    """
    requested = {schema.aliases[t] for t in populate_tokens(populate) if t in schema.aliases}
    return _walk(schema.tree, requested)


def _walk(nodes: Iterable[RelationNode], requested: set[str]) -> tuple[IncludeSpec, ...]:
    out = []
    for node in nodes:
        if node.name not in requested:
            continue
        out.append(IncludeSpec(node.name, _walk(node.children, requested)))
    return tuple(out)


def for_list(
    params: Mapping[str, Optional[str]],
    schema: RelationSchema,
    max_limit: Optional[int] = None,
    default_limit: int = DEFAULT_LIMIT,
) -> QueryPlan:
    """Plan for a "get all" request from its raw query parameters."""
    page, limit, offset = resolve_pagination(params.get("page"), params.get("limit"), max_limit, default_limit)
    sort_field, sort_order = resolve_sort(params.get("sortby"))
    return QueryPlan(
        limit=limit,
        offset=offset,
        page=page,
        sort_field=sort_field,
        sort_order=sort_order,
        includes=resolve_includes(params.get("populate"), schema),
    )


def for_single(params: Mapping[str, Optional[str]], schema: RelationSchema) -> tuple[IncludeSpec, ...]:
    """Includes for a "get by id" request; pagination and sorting do not apply."""
    return resolve_includes(params.get("populate"), schema)
