"""
YQL statement builder.

Three independent flows, each a small state machine whose intermediate
objects expose only the calls that are legal from that point:

    select(fields).from_(table)[.where(...)|.or_where(...)]*[.order_by(col)][.limit(n)[.offset(m)]].build()
    upsert(row).into(table).build()
    bulk_upsert((param_name, {column: type})).into(table).build()

Builders only produce strings: nothing is parsed, validated or executed here.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, NamedTuple, Sequence, Union

logger = logging.getLogger(__name__)

# Documented upper bound for LIMIT; callers enforce it, the builder does not.
MAX_ROWS = 1000

TERMINATOR = ";"

Scalar = Union[None, str, int, float, bool]
Paging = Union[str, int]


class InvalidArgument(ValueError):
    """Raised when a required argument (table name) is missing or empty."""


class StructDescriptor(NamedTuple):
    """Bound parameter name (e.g. ``$rows``) and ordered column -> type mapping."""
    name: str
    fields: Mapping[str, str]


def _require_table(table_name: str | None) -> str:
    if not table_name:
        raise InvalidArgument("Table name required")
    return table_name


_EXPONENT_PADDING = re.compile(r"e([+-])0*(?=\d)")


def _render_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    # integral floats stay integer literals (1.0 -> 1, 1e16 -> 10000000000000000)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return _EXPONENT_PADDING.sub(r"e\1", repr(value))


def render_literal(value: Any) -> str:
    """Render one row value as a statement literal.

    Numbers follow JavaScript number formatting, so ``1.0`` renders as ``1``
    and NaN as ``NaN``. Strings are quoted as-is: embedded quotes are not
    escaped.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f"'{value}'"
    if isinstance(value, float):
        return _render_float(value)
    return f"{value}"


# ---------------- SELECT ----------------

@dataclass(frozen=True)
class _SelectSession:
    query: str
    where: str | None = None
    order_by: str | None = None
    limit: str | None = None
    offset: str | None = None

    def with_predicates(self, predicates: Iterable[str] | None, operator: str) -> "_SelectSession":
        # generators are truthy even when empty
        predicates = list(predicates or ())
        if not predicates:
            return self
        clause = f"{self.where} {operator} " if self.where else "WHERE "
        for idx, item in enumerate(predicates):
            if idx == 0:
                clause += f"({item})"
            else:
                clause += f" {operator} ({item})"
        return replace(self, where=clause)

    def render(self) -> str:
        parts = [self.query]
        for section in (self.where, self.order_by, self.limit, self.offset):
            if section:
                parts.append(section)
        return " ".join(parts) + TERMINATOR


class _SelectState:
    __slots__ = ("_session",)

    def __init__(self, session: _SelectSession):
        self._session = session

    def build(self) -> str:
        """Return the finished statement; calling it again yields the same string."""
        sql = self._session.render()
        logger.debug("built select: %s", sql)
        return sql


class FinalSelect(_SelectState):
    """After ``offset``: only ``build`` remains."""


class LimitedSelect(_SelectState):
    """After ``limit``: ``offset`` or ``build``."""

    def offset(self, value: Paging) -> FinalSelect:
        # falsy values (0, "") mean "no offset"
        if value:
            return FinalSelect(replace(self._session, offset=f"OFFSET {value}"))
        return FinalSelect(self._session)


class OrderedSelect(_SelectState):
    """After ``order_by``: ``limit`` or ``build``."""

    def limit(self, value: Paging) -> LimitedSelect:
        return LimitedSelect(replace(self._session, limit=f"LIMIT {value}"))


class FilteredSelect(OrderedSelect):
    """After ``from_``/``where``/``or_where``: more predicates, ordering, limit or build."""

    def where(self, predicates: Iterable[str] | None = None) -> "FilteredSelect":
        return FilteredSelect(self._session.with_predicates(predicates, "AND"))

    def or_where(self, predicates: Iterable[str] | None = None) -> "FilteredSelect":
        return FilteredSelect(self._session.with_predicates(predicates, "OR"))

    def order_by(self, column: str) -> OrderedSelect:
        return OrderedSelect(replace(self._session, order_by=f"ORDER BY {column}"))


class SelectStart:
    """After ``select``: a table must be named next."""
    __slots__ = ("_session",)

    def __init__(self, fields: Sequence[str] | None = None):
        rendered = ", ".join(fields) if fields else "*"
        self._session = _SelectSession(query=f"SELECT {rendered}")

    def from_(self, table_name: str) -> FilteredSelect:
        table_name = _require_table(table_name)
        return FilteredSelect(replace(self._session, query=f"{self._session.query} FROM {table_name}"))


# ---------------- UPSERT ----------------

class UpsertInto:
    """Finished single-row upsert."""
    __slots__ = ("_query",)

    def __init__(self, query: str):
        self._query = query

    def build(self) -> str:
        return self._query + TERMINATOR


class UpsertStart:
    """Column list and values rendered from ``row``; a table must be named next.

    Column order and value order both follow the mapping's iteration order.
    Primary-key presence is the caller's concern.
    """
    __slots__ = ("_clause",)

    def __init__(self, row: Mapping[str, Scalar]):
        columns = ", ".join(row.keys())
        values = ", ".join(render_literal(v) for v in row.values())
        self._clause = f"({columns}) VALUES ({values})"

    def into(self, table_name: str) -> UpsertInto:
        table_name = _require_table(table_name)
        return UpsertInto(f"UPSERT INTO {table_name} {self._clause}")


# ---------------- BULK UPSERT ----------------

def _declare(struct: StructDescriptor) -> str:
    members = ",\n".join(f"{column}: {type_name}" for column, type_name in struct.fields.items())
    return f"DECLARE {struct.name} AS List<Struct<\n{members}>>;\n"


def _upsert_from_table(table_name: str, struct: StructDescriptor) -> str:
    columns = ",\n".join(struct.fields.keys())
    return f"UPSERT INTO {table_name}\nSELECT\n{columns}\nFROM AS_TABLE({struct.name});"


class BulkUpsertInto:
    """Finished bulk upsert: DECLARE of the typed list plus UPSERT ... SELECT FROM AS_TABLE."""
    __slots__ = ("_struct", "_table_name")

    def __init__(self, struct: StructDescriptor, table_name: str):
        self._struct = struct
        self._table_name = table_name

    def build(self) -> str:
        return _declare(self._struct) + "\n" + _upsert_from_table(self._table_name, self._struct)


class BulkUpsertStart:
    """Captures the struct descriptor; no text is produced until ``build``.

    The row set itself is bound to ``descriptor.name`` by whoever executes the
    statement.
    """
    __slots__ = ("_struct",)

    def __init__(self, descriptor: StructDescriptor | Sequence[Any]):
        name, fields = descriptor
        self._struct = StructDescriptor(name, dict(fields))

    @property
    def param_name(self) -> str:
        return self._struct.name

    def into(self, table_name: str) -> BulkUpsertInto:
        return BulkUpsertInto(self._struct, _require_table(table_name))


# ---------------- entry points ----------------

class QueryBuilder:
    """Stateless factory; every call starts an independent builder session."""

    def select(self, fields: Sequence[str] | None = None) -> SelectStart:
        return SelectStart(fields)

    def upsert(self, row: Mapping[str, Scalar]) -> UpsertStart:
        return UpsertStart(row)

    def bulk_upsert(self, descriptor: StructDescriptor | Sequence[Any]) -> BulkUpsertStart:
        return BulkUpsertStart(descriptor)

    def remove(self) -> None:
        """Reserved; deleting rows is not supported yet and this does nothing."""
        return None


_builder = QueryBuilder()

select = _builder.select
upsert = _builder.upsert
bulk_upsert = _builder.bulk_upsert
remove = _builder.remove
