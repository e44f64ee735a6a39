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

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from datagrid.exceptions import UnknownDialectError

"""
Grammar table.

A grammar is the small set of per-dialect rules the grid needs:
how to quote identifiers, how to quote values for display, which
placeholder the DB-API driver expects and how to render pagination.
"""


@dataclass(frozen=True)
class Grammar:
  name: str

  # (open, close) identifier quote characters, e.g. ("[", "]") for mssql
  identifier_quote: tuple[str, str]

  # Used for diagnostics output only, parameters are always bound
  value_quote: str

  # e.g. "LIMIT {limit} OFFSET {offset}"
  pagination_pattern: str

  # DB-API paramstyle marker understood by the connection's driver
  placeholder: str = "%s"

  # Some dialects (OFFSET ... FETCH) reject pagination without ORDER BY
  pagination_requires_order: bool = False

  @property
  def quote_chars(self) -> tuple[str, ...]:
    return tuple(dict.fromkeys(self.identifier_quote))

  def quote_identifier(self, part: str) -> str:
    """Wrap a single identifier part in the grammar's quote characters."""
    open_char, close_char = self.identifier_quote
    return f"{open_char}{part.strip()}{close_char}"

  def pagination_clause(self, limit: int, offset: int) -> str:
    return (
      self.pagination_pattern
      .replace("{limit}", str(int(limit)))
      .replace("{offset}", str(int(offset)))
    )

  def quote_value(self, value: Any) -> str:
    """
    Render a value as a literal for human-readable SQL previews.
    Never used for statements that are sent to the database.
    """
    if value is None:
      return "NULL"
    if isinstance(value, bool):
      return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float, Decimal)):
      return str(value)
    if isinstance(value, (date, datetime)):
      value = value.isoformat()
    q = self.value_quote
    s = str(value).replace(q, q + q)
    return f"{q}{s}{q}"


BUILTIN_GRAMMARS: Dict[str, Grammar] = {
  "mysql": Grammar(
    name="mysql",
    identifier_quote=("`", "`"),
    value_quote="'",
    pagination_pattern="LIMIT {limit} OFFSET {offset}",
    placeholder="%s",
  ),
  "pgsql": Grammar(
    name="pgsql",
    identifier_quote=('"', '"'),
    value_quote="'",
    pagination_pattern="LIMIT {limit} OFFSET {offset}",
    placeholder="%s",
  ),
  "sqlite": Grammar(
    name="sqlite",
    identifier_quote=('"', '"'),
    value_quote="'",
    pagination_pattern="LIMIT {limit} OFFSET {offset}",
    placeholder="?",
  ),
  "mssql": Grammar(
    name="mssql",
    identifier_quote=("[", "]"),
    value_quote="'",
    pagination_pattern="OFFSET {offset} ROWS FETCH NEXT {limit} ROWS ONLY",
    placeholder="%s",
    pagination_requires_order=True,
  ),
}


def grammar_from_dict(name: str, data: Dict[str, Any]) -> Grammar:
  """
  Build a Grammar from a plain mapping (YAML entry).

  `identifier_quote` may be a single string (same open/close character)
  or a two-element list.
  """
  quote = data.get("identifier_quote", '"')
  if isinstance(quote, str):
    quote = (quote, quote)
  else:
    quote = tuple(quote)
  if len(quote) != 2:
    raise ValueError(
      f"Grammar {name!r}: identifier_quote must be one character or an (open, close) pair."
    )

  pattern = data.get("pagination_pattern")
  if not pattern or "{limit}" not in pattern:
    raise ValueError(
      f"Grammar {name!r}: pagination_pattern must contain a {{limit}} placeholder."
    )

  return Grammar(
    name=name,
    identifier_quote=quote,
    value_quote=data.get("value_quote", "'"),
    pagination_pattern=pattern,
    placeholder=data.get("placeholder", "%s"),
    pagination_requires_order=bool(data.get("pagination_requires_order", False)),
  )


def get_available_grammar_names(path: Optional[str] = None) -> list[str]:
  return sorted(_grammar_registry(path))


def get_grammar(name: str, path: Optional[str] = None) -> Grammar:
  """
  Return the grammar registered under `name`.

  Raises:
      UnknownDialectError: if no grammar is declared for the name.
  """
  registry = _grammar_registry(path)
  key = (name or "").lower()

  try:
    return registry[key]
  except KeyError as exc:
    available = ", ".join(sorted(registry))
    raise UnknownDialectError(
      f"Unknown SQL dialect: {name!r}. "
      f"Available dialects: {available}."
    ) from exc


def _grammar_registry(path: Optional[str] = None) -> Dict[str, Grammar]:
  # Local import: config reads Django settings lazily
  from datagrid.config.grammars import load_declared_grammars

  registry = dict(BUILTIN_GRAMMARS)
  registry.update(load_declared_grammars(path))
  return registry
