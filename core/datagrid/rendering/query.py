"""
sqlgrid - Declarative SQL data grids for Django
Copyright © 2025 Ilona Tag

This file is part of sqlgrid.

sqlgrid is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as
published by the Free Software Foundation, either version 3 of
the License, or (at your option) any later version.

sqlgrid is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with sqlgrid. If not, see <https://www.gnu.org/licenses/>.

Contact: <https://github.com/elevata-labs/elevata>.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from datagrid.exceptions import ArgumentError

from .criteria import compile_criteria
from .grammars import Grammar
from .resolver import ColumnResolver

if TYPE_CHECKING:
  from datagrid.state import GridConfig, GridRequest


SORT_DIRECTIONS = ("asc", "desc")


class JoinType(str, Enum):
  JOIN = "join"
  INNER = "inner"
  LEFT = "left"
  RIGHT = "right"
  OUTER = "outer"

  @property
  def keyword(self) -> str:
    if self is JoinType.JOIN:
      return "JOIN"
    return f"{self.value.upper()} JOIN"

  @classmethod
  def parse(cls, value: "JoinType | str") -> "JoinType":
    if isinstance(value, JoinType):
      return value
    text = str(value).strip().lower()
    if text.endswith(" join"):
      text = text[: -len(" join")].strip()
    try:
      return cls(text)
    except ValueError as exc:
      allowed = ", ".join(t.value for t in cls)
      raise ArgumentError(
        f"Unsupported join type {value!r}. Allowed: {allowed}."
      ) from exc


@dataclass(frozen=True)
class JoinSpec:
  """
  One JOIN clause.

  `operands` is a flat list read in triples (left, operator, right),
  optionally chained with further tokens such as "and":

    JoinSpec("authors as a", ["a.id", "=", "b.author_id"], "left")
  """
  table: str
  operands: tuple[str, ...]
  join_type: JoinType = JoinType.JOIN

  def __post_init__(self) -> None:
    if not self.operands:
      raise ArgumentError(f"Join on {self.table!r} needs at least one operand triple.")
    object.__setattr__(self, "operands", tuple(self.operands))
    object.__setattr__(self, "join_type", JoinType.parse(self.join_type))

  @classmethod
  def coerce(cls, value: "JoinSpec | Sequence[Any]") -> "JoinSpec":
    if isinstance(value, JoinSpec):
      return value
    if len(value) != 3:
      raise ArgumentError(
        "A join must be given as (table, operands, join_type)."
      )
    table, operands, join_type = value
    return cls(table, operands, join_type)


@dataclass(frozen=True)
class SortSpec:
  columns: tuple[str, ...]
  direction: str = "asc"


@dataclass
class GridQuery:
  """Compiled statement pair plus the pagination values they were built with."""
  data_sql: str
  count_sql: str
  params: list = field(default_factory=list)
  page: int = 1
  limit: int = 0
  offset: int = 0
  sort: Optional[SortSpec] = None


def render_from(table: str, joins: Sequence[JoinSpec], resolver: ColumnResolver) -> str:
  """Render `<table> [<type> JOIN <table> ON <operands>]...`."""
  sql = resolver.quote(table)
  for join in joins:
    on = " ".join(resolver.quote(op) for op in join.operands)
    sql += f" {join.join_type.keyword} {resolver.quote(join.table)} ON {on}"
  return sql


def resolve_sort(config: "GridConfig", request: "GridRequest") -> tuple[Optional[SortSpec], bool]:
  """
  Return (sort, from_request).

  A request sort overrides the configured one only when it carries both
  a field and a valid direction. Anything else is ignored.
  """
  override = request.sort_override
  if override is not None:
    field_name, direction = override
    return SortSpec(columns=(field_name,), direction=direction), True
  return config.sort, False


def _order_by(sort: SortSpec, resolver: ColumnResolver, trusted: bool) -> str:
  cols = ", ".join(resolver.quote(c, trusted=trusted) for c in sort.columns)
  return f"{cols} {sort.direction.upper()}"


def build_query(
  config: "GridConfig",
  request: "GridRequest",
  grammar: Grammar,
  *,
  grid: Any = None,
  criteria: Optional[Mapping[str, Any]] = None,
  paginate: bool = True,
) -> GridQuery:
  """
  Build the data and count statements for a grid configuration.

  `criteria` defaults to the configured criteria; the grid passes a
  per-render copy after the search callback had a chance to extend it.
  """
  resolver = ColumnResolver(grammar)

  columns = ", ".join(resolver.quote(c) for c in config.columns) or "*"
  source = render_from(config.table, config.joins, resolver)

  where = compile_criteria(
    config.criteria if criteria is None else criteria,
    resolver,
    grid,
    grammar.placeholder,
  )

  data_parts = [f"SELECT {columns} FROM {source}"]
  count_parts = []
  if where:
    data_parts.append(f"WHERE {where.sql}")
    count_parts.append(f"WHERE {where.sql}")

  if config.group:
    group = ", ".join(resolver.quote(c) for c in config.group)
    data_parts.append(f"GROUP BY {group}")

  sort, from_request = resolve_sort(config, request)
  if (
    sort is None
    and paginate
    and grammar.pagination_requires_order
    and config.countable_column != "*"
  ):
    sort = SortSpec(columns=(config.countable_column,), direction="asc")

  if sort is not None:
    data_parts.append(f"ORDER BY {_order_by(sort, resolver, trusted=not from_request)}")

  page = request.page
  limit = int(config.limit)
  offset = (page - 1) * limit
  if paginate:
    data_parts.append(grammar.pagination_clause(limit, offset))

  countable = resolver.countable(config.countable_column)
  if config.group and countable == "*":
    # COUNT(DISTINCT *) is not valid SQL; count the groups instead
    grouped = " ".join([f"SELECT 1 FROM {source}"] + count_parts + [f"GROUP BY {group}"])
    count_sql = f"SELECT COUNT(*) AS total FROM ({grouped}) grouped_rows"
  else:
    distinct = "DISTINCT " if config.group else ""
    count_sql = " ".join(
      [f"SELECT COUNT({distinct}{countable}) AS total FROM {source}"] + count_parts
    )

  return GridQuery(
    data_sql=" ".join(data_parts),
    count_sql=count_sql,
    params=list(where.params),
    page=page,
    limit=limit,
    offset=offset,
    sort=sort,
  )


def render_display_sql(sql: str, params: Sequence[Any], grammar: Grammar) -> str:
  """
  Inline parameters into SQL for the diagnostics block.

  Display only: values are quoted with the grammar's value quote and the
  result is never executed.
  """
  marker = grammar.placeholder
  pieces = sql.split(marker)
  if len(pieces) - 1 != len(params):
    return sql
  out = [pieces[0]]
  for value, piece in zip(params, pieces[1:]):
    out.append(grammar.quote_value(value))
    out.append(piece)
  return "".join(out)
