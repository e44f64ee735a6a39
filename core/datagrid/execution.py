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

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from django.db import DatabaseError, connections

from datagrid.exceptions import QueryError

logger = logging.getLogger(__name__)


class BaseExecutionAdapter:
  """
  Runs one statement and returns its rows as ordered dicts.

  Implementations must bind `params` positionally and never interpolate
  values into the SQL text.
  """

  def execute(
    self,
    sql: str,
    params: Sequence[Any],
    options: Optional[Mapping[str, Any]],
    connection: str,
  ) -> List[Dict[str, Any]]:
    raise NotImplementedError


class DjangoExecutionAdapter(BaseExecutionAdapter):
  """
  Execution through django.db.connections.

  Supported options:
    - max_rows: fetch at most this many rows (fetchmany)
  """

  def execute(self, sql, params, options, connection):
    options = options or {}
    logger.debug("datagrid [%s]: %s params=%r", connection, sql, list(params))

    try:
      with connections[connection].cursor() as cursor:
        cursor.execute(sql, list(params))
        if cursor.description is None:
          return []
        columns = [col[0] for col in cursor.description]

        max_rows = options.get("max_rows")
        rows = cursor.fetchmany(int(max_rows)) if max_rows else cursor.fetchall()
    except DatabaseError as exc:
      raise QueryError(str(exc), sql=sql, params=params, connection=connection) from exc

    return [dict(zip(columns, row)) for row in rows]
