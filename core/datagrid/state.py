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

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from django.conf import settings
from django.http import QueryDict

from datagrid.rendering.query import SORT_DIRECTIONS, GridQuery, JoinSpec, SortSpec

# GridConfig is built up incrementally by the owning screen. GridRequest is
# the explicit request context for one render call. ResultSet is derived
# fresh on every fetch and never cached by the grid itself.


# (grid, raw value, full row) -> cell content
CastCallback = Callable[[Any, Any, Dict[str, Any]], Any]
# (grid, criteria copy, keywords) -> None; may add criteria entries
SearchCallback = Callable[[Any, Dict[str, Any], str], None]
# (grid) -> None
EventCallback = Callable[[Any], None]
# (result, keywords) -> banner markup
MatchCallback = Callable[["ResultSet", str], Any]
# (grid, result) -> None
ResultCallback = Callable[[Any, "ResultSet"], None]


class GridStatus(str, Enum):
  CONFIGURING = "configuring"
  FETCHING = "fetching"
  EMPTY = "empty"
  POPULATED = "populated"
  RENDERED = "rendered"


class GridEvent(str, Enum):
  SEARCH = "search"
  FETCH = "fetch"
  CACHED = "cached"
  EDIT = "edit"
  DELETE = "delete"
  MATCH = "match"


@dataclass
class EventHandler:
  callback: EventCallback
  # Request key whose presence fires the event
  trigger: str


@dataclass
class SearchHandler:
  callback: SearchCallback
  keyword_param: str = "keywords"


@dataclass
class ActionBar:
  """Texts and names of the bulk-action bar; empty values use defaults."""
  question: str = ""
  label: str = ""
  css_class: str = "s-btn btn btn-danger"
  name: str = "delete"


@dataclass
class EditableForm:
  id: str = "datagrid"
  name: str = "datagrid"
  action: str = ""
  method: str = "POST"
  target: str = "submitExec"


def _default_limit() -> int:
  return int(getattr(settings, "SQLGRID", {}).get("default_limit", 30))


@dataclass
class GridConfig:
  table: str = ""
  joins: List[JoinSpec] = field(default_factory=list)
  columns: List[str] = field(default_factory=list)
  countable_column: str = "*"
  criteria: Dict[str, Any] = field(default_factory=dict)
  group: List[str] = field(default_factory=list)
  sort: Optional[SortSpec] = None
  limit: int = field(default_factory=_default_limit)

  # Interface
  editable: bool = True
  queueable: bool = False
  invisible: Set[str] = field(default_factory=set)
  unsortable: Set[str] = field(default_factory=set)
  widths: Dict[str, Any] = field(default_factory=dict)
  casts: Dict[str, CastCallback] = field(default_factory=dict)
  bar: ActionBar = field(default_factory=ActionBar)
  form: EditableForm = field(default_factory=EditableForm)
  identity_param: str = "itemID"
  hidden_inputs: Dict[str, str] = field(default_factory=dict)

  # Events
  on_search: Optional[SearchHandler] = None
  on_fetch: Optional[ResultCallback] = None
  on_cached: Optional[ResultCallback] = None
  on_edit: Optional[EventHandler] = None
  on_delete: Optional[EventHandler] = None
  on_match: Optional[MatchCallback] = None
  # Plugin-defined events, keyed by event name
  custom_events: Dict[str, EventHandler] = field(default_factory=dict)

  # Connection
  connection: Optional[str] = None
  driver: Optional[str] = None


@dataclass(frozen=True)
class GridRequest:
  """
  Read-only view of the request parameters a grid consumes.

  `query` holds the query string (page, sort, current URL state), `data`
  the merged GET and POST parameters (search keywords, event triggers).
  """
  query: QueryDict
  data: QueryDict
  path: str = ""

  @classmethod
  def from_request(cls, request) -> "GridRequest":
    data = request.GET.copy()
    for key, values in request.POST.lists():
      data.setlist(key, values)
    return cls(query=request.GET.copy(), data=data, path=request.path)

  @classmethod
  def from_query(cls, query_string: str = "", path: str = "", post: str = "") -> "GridRequest":
    """Build a context without a Django request (tests, management commands)."""
    query = QueryDict(query_string, mutable=True)
    data = query.copy()
    for key, values in QueryDict(post).lists():
      data.setlist(key, values)
    return cls(query=query, data=data, path=path)

  def get(self, key: str, default: Any = None) -> Any:
    return self.data.get(key, default)

  def has(self, key: str) -> bool:
    return key in self.data

  @property
  def page(self) -> int:
    try:
      page = int(self.query.get("page", 1))
    except (TypeError, ValueError):
      page = 1
    return max(page, 1)

  @property
  def sort_override(self) -> Optional[tuple[str, str]]:
    field_name = self.query.get("field")
    direction = (self.query.get("dir") or "").lower()
    if not field_name or direction not in SORT_DIRECTIONS:
      return None
    return field_name, direction


@dataclass
class ResultSet:
  rows: List[Dict[str, Any]] = field(default_factory=list)
  total: int = 0
  elapsed: float = 0.0
  query: Optional[GridQuery] = None
  keywords: str = ""

  @property
  def status(self) -> GridStatus:
    return GridStatus.POPULATED if self.total > 0 else GridStatus.EMPTY

  @property
  def columns(self) -> List[str]:
    return list(self.rows[0].keys()) if self.rows else []

  @property
  def query_time_ms(self) -> float:
    return round(self.elapsed * 1000, 2)
