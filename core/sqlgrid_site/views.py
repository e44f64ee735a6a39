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

from datagrid.grid import Datagrid
from datagrid.rendering.criteria import like
from datagrid.views import DatagridView


def search_content_types(grid, criteria, keywords):
  criteria["model"] = like(keywords)


class ContentTypeGridView(DatagridView):
  """Demo grid over django_content_type."""

  def get_grid(self, request):
    grid = Datagrid("contentTypes")
    grid.set_table("django_content_type")
    grid.set_column("id", "app_label as App", "model as Model")
    grid.set_sort("app_label", "asc")
    grid.set_editable(False)
    grid.set_limit(20)
    grid.on_search(search_content_types)
    return grid
