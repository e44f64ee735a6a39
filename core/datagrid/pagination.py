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

from typing import Callable

from django.core.paginator import Paginator
from django.utils.translation import gettext as _

from datagrid.html import Element


def build_pagination(
  url_for_page: Callable[[int], str],
  total: int,
  limit: int,
  current: int,
) -> Element:
  """
  Page links for `total` rows shown `limit` per page.

  `url_for_page(n)` returns the href for page n. The row count is all the
  paginator needs, so it runs over a range instead of a queryset.
  """
  paginator = Paginator(range(total), limit)
  page = paginator.get_page(current)

  nav = Element("span", {"class": "pagingList"})

  if page.has_previous():
    nav.append(
      Element("a", {"class": "first_link", "href": url_for_page(1)}, _("First Page")),
      Element("a", {"class": "prev_link", "href": url_for_page(page.previous_page_number())}, _("Previous")),
    )

  for number in paginator.get_elided_page_range(page.number, on_each_side=2, on_ends=1):
    if number == Paginator.ELLIPSIS:
      nav.append(Element("span", {"class": "ellipsis"}, number))
    elif number == page.number:
      nav.append(Element("b", {"class": "current"}, number))
    else:
      nav.append(Element("a", {"href": url_for_page(number)}, number))

  if page.has_next():
    nav.append(
      Element("a", {"class": "next_link", "href": url_for_page(page.next_page_number())}, _("Next")),
      Element("a", {"class": "last_link", "href": url_for_page(paginator.num_pages)}, _("Last Page")),
    )

  return nav
