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

import pytest

from datagrid.grid import Datagrid
from tests._grid_test_helpers import BOOK_ROWS, SpyExecutor


@pytest.fixture(autouse=True)
def clear_sqlgrid_env(monkeypatch):
  """Keep grammar/driver env overrides out of every test."""
  monkeypatch.delenv("SQLGRID_DRIVER", raising=False)
  monkeypatch.delenv("SQLGRID_GRAMMARS_PATH", raising=False)
  yield


@pytest.fixture
def make_book_grid():
  """
  Factory for the books/authors grid used across the render tests.

  The grid runs against a SpyExecutor, so no database is touched.
  """
  def _make(driver="mysql", rows=BOOK_ROWS, total=None, name="books", cls=Datagrid):
    executor = SpyExecutor(rows, total)
    grid = cls(name, executor=executor)
    grid.set_connection("default", driver)
    grid.set_table("books as b", [("authors as a", ["a.id", "=", "b.author_id"], "left")])
    grid.set_column("b.id", "b.title as Title", "a.name as Author")
    return grid, executor

  return _make
