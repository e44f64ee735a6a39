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

import logging

from django.http import HttpResponse
from django.shortcuts import render
from django.utils.html import escape
from django.views import View

from datagrid.exceptions import QueryError, UnknownDialectError
from datagrid.state import GridRequest

logger = logging.getLogger(__name__)


def _render_grid_error(prefix: str, exc: Exception) -> HttpResponse:
  logger.exception("%s: %s", prefix, exc)
  return HttpResponse(
    f'<div class="alert alert-danger py-1 px-2 mb-0 small">'
    f'{prefix}: {escape(str(exc))}'
    f'</div>',
    status=500,
  )


class DatagridView(View):
  """
  Serve one grid for GET (listing, paging, sorting, search) and POST
  (bulk delete and other form-triggered events).

  Subclasses implement get_grid(request). With template_name set, the
  rendered grid is passed to the template as `grid_html`; otherwise the
  fragment is returned as is.
  """

  template_name = None

  def get_grid(self, request):
    raise NotImplementedError("DatagridView subclasses must implement get_grid(request).")

  def get_context_data(self, **kwargs):
    return kwargs

  def render_grid(self, request):
    grid = self.get_grid(request)
    try:
      html = grid.render(GridRequest.from_request(request))
    except (QueryError, UnknownDialectError) as exc:
      return _render_grid_error("Data grid failed", exc)

    if self.template_name:
      context = self.get_context_data(grid=grid, grid_html=html)
      return render(request, self.template_name, context)
    return HttpResponse(html)

  def get(self, request, *args, **kwargs):
    return self.render_grid(request)

  def post(self, request, *args, **kwargs):
    return self.render_grid(request)
