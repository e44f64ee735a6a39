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

from django.utils.html import format_html
from django.utils.safestring import SafeString
from django.utils.translation import gettext as _

from datagrid.grid import Datagrid
from datagrid.html import Element, join_html
from datagrid.pagination import build_pagination
from datagrid.state import GridRequest, ResultSet


class ReportGrid(Datagrid):
  """
  Read-only grid for printable reports.

  Same query pipeline as Datagrid, never editable, with a print area
  (record count, current page, print button) and pagination above the table.
  """

  def __init__(self, name: str = "reportgrid", action: str = "", method: str = "POST", target: str = "submitExec", **kwargs):
    super().__init__(name, action, method, target, **kwargs)
    self.config.editable = False

  def set_editable(self, status: bool = True) -> "ReportGrid":
    # Reports stay read-only
    return self

  def build_print_area(self, result: ResultSet, request: GridRequest) -> SafeString:
    limit = self.config.limit
    page = result.query.page if result.query is not None else request.page

    label = format_html(
      "<strong>{}</strong> {} {} ({} {}) ",
      result.total,
      _("record(s) found. Currently displaying page"),
      page,
      limit,
      _("record each page"),
    )
    print_button = Element("a", {
      "class": "s-btn btn btn-default printReport notAJAX",
      "href": "#",
      "onclick": "window.print()",
    }, _("Print Current Page"))

    paging = None
    if result.total > limit:
      paging = Element("div", {"class": "paging-area"}, build_pagination(
        lambda number: self.url(request, page=number),
        result.total,
        limit,
        page,
      ))

    return join_html(
      paging,
      Element("div", {"class": "s-print__page-info printPageInfo"}, label, print_button),
    )

  def render_result(self, result: ResultSet, request: GridRequest) -> SafeString:
    report = super().render_result(result, request)
    return join_html(self.build_print_area(result, request), report)
