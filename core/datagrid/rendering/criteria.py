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
from typing import Any, Callable, Iterable, Mapping

from .resolver import ColumnResolver

# (grid, params) -> SQL fragment placed after the resolved column,
# e.g. "LIKE ?" after pushing "%term%" onto params.
CriterionCallback = Callable[[Any, list], str]


@dataclass
class CompiledCriteria:
  sql: str = ""
  params: list = field(default_factory=list)

  def __bool__(self) -> bool:
    return bool(self.sql)


def compile_criteria(
  criteria: Mapping[str, Any],
  resolver: ColumnResolver,
  grid: Any,
  placeholder: str,
) -> CompiledCriteria:
  """
  Compile a criteria map into a WHERE body and its parameter list.

  Literal criteria compile first, then callback criteria, each group in
  declaration order. Fragment order and parameter order therefore always
  agree, and static parameters precede callback parameters.
  """
  literals = [(c, v) for c, v in criteria.items() if not callable(v)]
  callbacks = [(c, v) for c, v in criteria.items() if callable(v)]

  fragments: list[str] = []
  params: list = []

  for column, value in literals:
    fragments.append(f"{resolver.quote(column)} = {placeholder}")
    params.append(value)

  for column, callback in callbacks:
    custom_params: list = []
    fragment = callback(grid, custom_params)
    fragments.append(f"{resolver.quote(column)} {fragment}".rstrip())
    params.extend(custom_params)

  return CompiledCriteria(sql=" AND ".join(fragments), params=params)


# ---------------------------------------------------------------------------
# Ready-made criterion callbacks
# ---------------------------------------------------------------------------

def like(term: str, *, contains: bool = True) -> CriterionCallback:
  """Criterion callback for `<col> LIKE ?` with an optional %...% wrap."""
  value = f"%{term}%" if contains else term

  def _criterion(grid, params: list) -> str:
    params.append(value)
    return f"LIKE {grid.placeholder}"

  return _criterion


def in_(values: Iterable[Any]) -> CriterionCallback:
  """Criterion callback for `<col> IN (?, ?, ...)`."""
  items = list(values)

  def _criterion(grid, params: list) -> str:
    if not items:
      # IN () is invalid SQL; an empty list matches nothing
      return "IN (NULL)"
    params.extend(items)
    return "IN (" + ", ".join([grid.placeholder] * len(items)) + ")"

  return _criterion


def between(low: Any, high: Any) -> CriterionCallback:
  """Criterion callback for `<col> BETWEEN ? AND ?`."""

  def _criterion(grid, params: list) -> str:
    params.extend([low, high])
    return f"BETWEEN {grid.placeholder} AND {grid.placeholder}"

  return _criterion
