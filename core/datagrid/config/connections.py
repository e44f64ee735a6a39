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

import os
from typing import Optional

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, connections

# Django backend vendor -> grammar name
VENDOR_GRAMMARS = {
  "mysql": "mysql",
  "postgresql": "pgsql",
  "sqlite": "sqlite",
  "microsoft": "mssql",
}


def get_default_connection() -> str:
  cfg = getattr(settings, "SQLGRID", {})
  return cfg.get("default_connection") or DEFAULT_DB_ALIAS


def resolve_driver(connection: Optional[str] = None, explicit: Optional[str] = None) -> str:
  """
  Resolve the grammar name for a connection alias from (in order):

  1. explicit argument (grid-level override)
  2. settings.SQLGRID["connections"][alias]["driver"]
  3. SQLGRID_DRIVER env var
  4. the Django backend vendor of the connection

  The result is not validated here; get_grammar() raises for names
  without a grammar.
  """
  # 1) Explicit override
  if explicit:
    return explicit.lower()

  alias = connection or get_default_connection()

  # 2) Per-connection declaration
  declared = getattr(settings, "SQLGRID", {}).get("connections", {}).get(alias, {})
  if declared.get("driver"):
    return str(declared["driver"]).lower()

  # 3) Env override
  env_name = os.getenv("SQLGRID_DRIVER")
  if env_name:
    return env_name.lower()

  # 4) Backend vendor
  vendor = connections[alias].vendor
  return VENDOR_GRAMMARS.get(vendor, vendor)
