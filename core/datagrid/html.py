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

from typing import Any, Dict, Optional

from django.forms.utils import flatatt
from django.utils.html import conditional_escape, format_html
from django.utils.safestring import SafeString, mark_safe

VOID_ELEMENTS = frozenset({
  "area", "base", "br", "col", "embed", "hr", "img", "input",
  "link", "meta", "param", "source", "track", "wbr",
})


class Element:
  """
  Minimal HTML element builder.

  Attribute values and text children are escaped; children that are
  Elements or SafeStrings are inserted as markup.

    Element("td", {"valign": "top"}, "a < b")  -> <td valign="top">a &lt; b</td>
  """

  def __init__(self, tag: str, attrs: Optional[Dict[str, Any]] = None, *children: Any):
    self.tag = tag
    self.attrs: Dict[str, Any] = dict(attrs or {})
    self.children: list = list(children)

  def set(self, name: str, value: Any) -> "Element":
    self.attrs[name] = value
    return self

  def append(self, *children: Any) -> "Element":
    self.children.extend(children)
    return self

  def __html__(self) -> SafeString:
    attrs = flatatt({k: _attr_value(v) for k, v in self.attrs.items() if v is not None})
    if self.tag in VOID_ELEMENTS:
      return format_html("<{}{} />", self.tag, attrs)
    body = mark_safe("".join(conditional_escape(c) for c in self.children if c is not None))
    return format_html("<{}{}>{}</{}>", self.tag, attrs, body, self.tag)

  def __str__(self) -> str:
    return self.__html__()


def _attr_value(value: Any) -> Any:
  # flatatt renders True as a bare attribute and drops False
  if isinstance(value, bool):
    return value
  return str(value)


def join_html(*parts: Any) -> SafeString:
  """Concatenate elements/strings into one safe string, escaping plain text."""
  return mark_safe("".join(conditional_escape(p) for p in parts if p is not None))
