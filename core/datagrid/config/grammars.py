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
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

import yaml
from django.conf import settings

from datagrid.rendering.grammars import Grammar, grammar_from_dict

"""
Declared grammars.

Projects can add dialects (or override a built-in one) without code by
declaring them in sqlgrid_grammars.yaml:

  grammars:
    oracle:
      identifier_quote: '"'
      value_quote: "'"
      placeholder: "%s"
      pagination_pattern: "OFFSET {offset} ROWS FETCH NEXT {limit} ROWS ONLY"
      pagination_requires_order: true
"""


def _find_grammars_path(explicit_path: str | None = None) -> Path | None:
  """
  Locate sqlgrid_grammars.yaml:

  1. explicit_path argument
  2. settings.SQLGRID["grammars_path"]
  3. SQLGRID_GRAMMARS_PATH env var
  4. config/sqlgrid_grammars.yaml relative to the repository and CWD

  A path named in 1-3 must exist. The fallback locations are optional,
  None is returned if none of them exists.

  Raises:
      FileNotFoundError: if an explicitly configured path does not exist.
  """
  configured = (
    explicit_path
    or getattr(settings, "SQLGRID", {}).get("grammars_path")
    or os.getenv("SQLGRID_GRAMMARS_PATH")
  )
  if configured:
    path = Path(configured)
    if not path.exists():
      raise FileNotFoundError(
        f"Grammar file {path} not found. "
        "Check SQLGRID['grammars_path'] or SQLGRID_GRAMMARS_PATH."
      )
    return path

  here = Path(__file__).resolve()
  for candidate in (
    here.parents[3] / "config" / "sqlgrid_grammars.yaml",
    Path.cwd() / "config" / "sqlgrid_grammars.yaml",
  ):
    if candidate.exists():
      return candidate

  return None


def load_declared_grammars(path: Optional[str] = None) -> Dict[str, Grammar]:
  """Load grammars declared in YAML, keyed by lower-case name."""
  found = _find_grammars_path(path)
  if found is None:
    return {}

  return dict(_parse_grammar_file(str(found), found.stat().st_mtime_ns))


@lru_cache(maxsize=32)
def _parse_grammar_file(path: str, mtime_ns: int) -> Dict[str, Grammar]:
  """Parse a grammar file once per path and modification time."""
  with open(path, "r") as f:
    data = yaml.safe_load(f) or {}

  declared = data.get("grammars") or {}
  return {
    str(name).lower(): grammar_from_dict(str(name).lower(), entry or {})
    for name, entry in declared.items()
  }
