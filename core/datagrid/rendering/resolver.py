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

import re
from dataclasses import dataclass
from typing import Optional

from .grammars import Grammar

# Expressions starting with this marker are passed through untouched.
RAW_MARKER = "!"

# Tokens that are returned as-is so join operand lists can reuse resolve().
OPERATOR_TOKENS = frozenset({
  "+", "-", "*", "/", "%", "&", "|", "^", "=",
  ">", "<", ">=", "<=", "<>", "!=",
  "+=", "-=", "*=", "/=", "%=", "&=", "^-=", "|*=",
  "all", "and", "any", "between", "exists", "in",
  "like", "not", "or", "some", "is", "null",
})

_ALIAS_SPLIT = re.compile(r"\s+as\s+", re.IGNORECASE)
_UNSAFE = ("'", '"', "`", "--")


@dataclass(frozen=True)
class ResolvedColumn:
  sql: str
  name: str
  alias: Optional[str] = None
  qualifier: Optional[str] = None
  raw: bool = False

  @property
  def has_alias(self) -> bool:
    return self.alias is not None


class ColumnResolver:
  """
  Turn column/table expressions into quoted SQL fragments.

    resolve("a.b as c")  -> `a`.`b` as `c`   (mysql)
    resolve("!count(*)") -> count(*)          (raw bypass)
    resolve(">=")        -> >=                (operator token)
  """

  def __init__(self, grammar: Grammar):
    self.grammar = grammar

  def clean(self, text: str) -> str:
    """Strip characters that could break out of a quoted identifier."""
    for token in _UNSAFE + self.grammar.quote_chars:
      text = text.replace(token, "")
    return text

  def resolve(self, expr: str, trusted: bool = True) -> ResolvedColumn:
    """
    Resolve a single expression.

    `trusted=False` is used for request-supplied input: the operator
    passthrough and the raw bypass marker are not honoured.
    """
    text = str(expr).strip()

    if trusted:
      if text.lower() in OPERATOR_TOKENS:
        return ResolvedColumn(sql=text, name=text)

      if text.startswith(RAW_MARKER):
        body = text.strip(RAW_MARKER)
        return ResolvedColumn(sql=body, name=body, raw=True)
    else:
      text = text.lstrip(RAW_MARKER)

    text = self.clean(text)
    parts = _ALIAS_SPLIT.split(text, maxsplit=1)
    base = parts[0].strip()
    alias = parts[1].strip() if len(parts) > 1 else None

    segments = [s.strip() for s in base.split(".")]
    qualifier = ".".join(segments[:-1]) or None

    sql = ".".join(
      s if s == "*" else self.grammar.quote_identifier(s)
      for s in segments
    )
    if alias is not None:
      sql = f"{sql} as {self.grammar.quote_identifier(alias)}"

    return ResolvedColumn(
      sql=sql,
      name=alias if alias is not None else segments[-1],
      alias=alias,
      qualifier=qualifier,
    )

  def quote(self, expr: str, trusted: bool = True) -> str:
    return self.resolve(expr, trusted=trusted).sql

  def countable(self, expr: str) -> str:
    """Quoted form of `expr` without its alias, used inside COUNT()."""
    base = strip_alias(expr)
    if base == "*":
      return base
    return self.resolve(base).sql


def strip_alias(expr: str) -> str:
  """Drop a trailing `as <alias>` but keep a raw marker if present."""
  return _ALIAS_SPLIT.split(str(expr).strip(), maxsplit=1)[0].strip()


def bare_name(expr: str) -> str:
  """
  Grammar-independent label of an expression: the alias if one is given,
  otherwise the last dotted segment. Used as cast key and header label.
  """
  text = str(expr).strip()
  if text.startswith(RAW_MARKER):
    text = text.strip(RAW_MARKER)
  else:
    for token in _UNSAFE:
      text = text.replace(token, "")
  parts = _ALIAS_SPLIT.split(text, maxsplit=1)
  if len(parts) > 1:
    return parts[1].strip()
  return parts[0].split(".")[-1].strip()
