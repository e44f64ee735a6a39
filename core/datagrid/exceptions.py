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

from typing import Any, Sequence


class ArgumentError(ValueError):
  """A builder call was made with missing or unusable arguments."""


class UnknownDialectError(ValueError):
  """A connection resolved to a dialect that has no declared grammar."""


class QueryError(RuntimeError):
  """
  The execution adapter failed on a grid statement.

  Carries the raw SQL, bound parameters and connection alias so the caller
  can report what was sent to the database.
  """

  def __init__(
    self,
    message: str,
    *,
    sql: str,
    connection: str,
    params: Sequence[Any] = (),
  ) -> None:
    super().__init__(f"{message}. Raw Query [{connection}] : {sql}")
    self.sql = sql
    self.connection = connection
    self.params = list(params)
