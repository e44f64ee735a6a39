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
import time
from typing import Any, Iterable, Mapping, Optional

from django.conf import settings
from django.http import QueryDict
from django.utils.html import escapejs, format_html
from django.utils.safestring import SafeString
from django.utils.translation import gettext as _

from datagrid.config.connections import get_default_connection, resolve_driver
from datagrid.exceptions import ArgumentError
from datagrid.execution import BaseExecutionAdapter, DjangoExecutionAdapter
from datagrid.html import Element, join_html
from datagrid.pagination import build_pagination
from datagrid.rendering.grammars import Grammar, get_grammar
from datagrid.rendering.query import (
  SORT_DIRECTIONS,
  GridQuery,
  JoinSpec,
  SortSpec,
  build_query,
  render_display_sql,
)
from datagrid.rendering.resolver import ColumnResolver, bare_name, strip_alias
from datagrid.signals import HookRegistry
from datagrid.state import (
  CastCallback,
  EditableForm,
  EventCallback,
  EventHandler,
  GridConfig,
  GridEvent,
  GridRequest,
  GridStatus,
  MatchCallback,
  ResultCallback,
  ResultSet,
  SearchCallback,
  SearchHandler,
)

logger = logging.getLogger(__name__)

_UNSET = object()


def clean_name(value: str) -> str:
  """Strip quote characters and comment markers from a form/grid name."""
  for token in ("'", '"', "`", "--"):
    value = value.replace(token, "")
  return value


class Datagrid:
  """
  Declarative SQL data grid.

  A screen configures the grid incrementally and calls render() with the
  current request context:

    grid = Datagrid("books")
    grid.set_table("books as b", [("authors as a", ["a.id", "=", "b.author_id"], "left")])
    grid.set_column("b.id", "b.title as Title", "a.name as Author")
    grid.set_criteria("b.active", 1)
    html = grid.render(GridRequest.from_request(request))

  Every render() runs the data and count statements again; pass a
  ResultSet from fetch() to render it without querying.
  """

  def __init__(
    self,
    name: str = "datagrid",
    action: str = "",
    method: str = "POST",
    target: str = "submitExec",
    *,
    connection: Optional[str] = None,
    executor: Optional[BaseExecutionAdapter] = None,
    hooks: Optional[HookRegistry] = None,
  ):
    self.name = clean_name(name)
    self.config = GridConfig(
      form=EditableForm(
        id=self.name,
        name=self.name,
        action=action,
        method=method,
        target=target,
      ),
      connection=connection,
    )
    self.executor = executor or DjangoExecutionAdapter()
    self.hooks = hooks or HookRegistry()
    self.status = GridStatus.CONFIGURING
    self.result: Optional[ResultSet] = None
    # Request of the render in progress, for event callbacks
    self.request: Optional[GridRequest] = None
    self._active_grammar: Optional[Grammar] = None

  # ---------------------------------------------------------------------------
  # Connection / grammar
  # ---------------------------------------------------------------------------
  @property
  def connection(self) -> str:
    return self.config.connection or get_default_connection()

  @property
  def driver(self) -> str:
    return resolve_driver(self.connection, self.config.driver)

  @property
  def grammar(self) -> Grammar:
    if self._active_grammar is not None:
      return self._active_grammar
    return get_grammar(self.driver)

  @property
  def placeholder(self) -> str:
    """Parameter marker for criterion callbacks building their own fragments."""
    return self.grammar.placeholder

  @property
  def resolver(self) -> ColumnResolver:
    return ColumnResolver(self.grammar)

  def set_connection(self, connection: str, driver: Optional[str] = None) -> "Datagrid":
    self.config.connection = connection
    self.config.driver = driver
    return self

  # ---------------------------------------------------------------------------
  # Builder API
  # ---------------------------------------------------------------------------
  def set_table(self, table: str, joins: Iterable[Any] = ()) -> "Datagrid":
    """Main table plus joins given as JoinSpec or (table, operands, type)."""
    if not table:
      raise ArgumentError("set_table() needs a table expression.")
    self.config.table = table
    self.config.joins = [JoinSpec.coerce(j) for j in joins]
    return self

  def set_column(self, *columns: str) -> "Datagrid":
    if not columns:
      raise ArgumentError("set_column() needs at least 1 argument.")
    self.config.columns = list(columns)
    self.config.countable_column = strip_alias(columns[0])
    return self

  def set_column_width(self, widths: Mapping[str, Any]) -> "Datagrid":
    self.config.widths = dict(widths)
    return self

  def set_editable(self, status: bool = True) -> "Datagrid":
    self.config.editable = bool(status)
    return self

  def set_queueable(self, status: bool = True) -> "Datagrid":
    """Editable variant that offers a single ADD column instead of edit links."""
    self.config.queueable = bool(status)
    return self

  def set_criteria(self, column: Any, value: Any = _UNSET) -> "Datagrid":
    """
    Add criteria.

      set_criteria("status", 1)
      set_criteria("title", like("django"))
      set_criteria({"status": 1, "lang": "en"})
      set_criteria([("status", 1), ("lang", "en")])
    """
    if value is _UNSET:
      if isinstance(column, str):
        raise ArgumentError(f"set_criteria({column!r}) needs a value.")
      items = column.items() if isinstance(column, Mapping) else column
      for col, val in items:
        self.config.criteria[col] = val
      return self

    if not isinstance(column, str):
      raise ArgumentError("set_criteria(column, value) needs a column name.")
    self.config.criteria[column] = value
    return self

  def set_group(self, *columns: str) -> "Datagrid":
    if not columns:
      raise ArgumentError("set_group() needs at least 1 argument.")
    self.config.group = list(columns)
    return self

  def set_sort(self, columns: Any, direction: str = "asc") -> "Datagrid":
    direction = (direction or "").lower()
    if direction not in SORT_DIRECTIONS:
      logger.warning("Ignoring sort on %r: invalid direction %r", columns, direction)
      return self
    if isinstance(columns, str):
      columns = [columns]
    self.config.sort = SortSpec(columns=tuple(columns), direction=direction)
    return self

  def set_unsort(self, columns: Any) -> "Datagrid":
    if isinstance(columns, str):
      columns = [columns]
    self.config.unsortable.update(columns)
    return self

  def set_invisible_column(self, columns: Iterable[str]) -> "Datagrid":
    self.config.invisible = set(columns)
    return self

  def set_limit(self, limit: int) -> "Datagrid":
    if int(limit) <= 0:
      raise ArgumentError(f"Page limit must be positive, got {limit!r}.")
    self.config.limit = int(limit)
    return self

  def set_action_bar(
    self,
    *,
    question: Optional[str] = None,
    label: Optional[str] = None,
    css_class: Optional[str] = None,
    name: Optional[str] = None,
  ) -> "Datagrid":
    bar = self.config.bar
    if question is not None:
      bar.question = question
    if label is not None:
      bar.label = label
    if css_class is not None:
      bar.css_class = css_class
    if name is not None:
      bar.name = name
    return self

  def set_hidden_input(self, name: str, value: Any) -> "Datagrid":
    self.config.hidden_inputs[name] = str(value)
    return self

  def cast(self, column: str, callback: CastCallback) -> str:
    """
    Register a display transform for a column and return the column, so it
    can be used inline: grid.set_column("id", grid.cast("price", fmt)).
    """
    self.config.casts[bare_name(column)] = callback
    return column

  # ---------------------------------------------------------------------------
  # Events
  # ---------------------------------------------------------------------------
  def on_search(self, callback: SearchCallback, keyword_param: str = "keywords") -> "Datagrid":
    self.config.on_search = SearchHandler(callback=callback, keyword_param=keyword_param)
    return self

  def on_edit(self, callback: EventCallback, trigger: str = "edit") -> "Datagrid":
    self.config.on_edit = EventHandler(callback=callback, trigger=trigger)
    return self

  def on_delete(self, callback: EventCallback, trigger: Optional[str] = None) -> "Datagrid":
    """Default trigger is the action bar's hidden input name ("delete")."""
    self.config.on_delete = EventHandler(callback=callback, trigger=trigger or "")
    return self

  def on_fetch(self, callback: ResultCallback) -> "Datagrid":
    self.config.on_fetch = callback
    return self

  def on_cached(self, callback: ResultCallback) -> "Datagrid":
    self.config.on_cached = callback
    return self

  def on_match(self, callback: MatchCallback) -> "Datagrid":
    self.config.on_match = callback
    return self

  def register_event(self, name: str, callback: EventCallback, trigger: Optional[str] = None) -> "Datagrid":
    key = name.lower()
    self.config.custom_events[key] = EventHandler(callback=callback, trigger=trigger or key)
    return self

  def _triggered_handlers(self) -> list[tuple[str, EventHandler]]:
    handlers = list(self.config.custom_events.items())
    if self.config.on_delete is not None:
      handlers.append((GridEvent.DELETE.value, self.config.on_delete))
    if self.config.on_edit is not None:
      handlers.append((GridEvent.EDIT.value, self.config.on_edit))
    return handlers

  def _trigger_key(self, handler: EventHandler) -> str:
    if handler is self.config.on_delete and not handler.trigger:
      return self.config.bar.name or "delete"
    return handler.trigger

  def dispatch_events(self, request: GridRequest) -> list[str]:
    """
    Fire request-triggered events (custom, delete, edit).

    Observers on the hook registry (and `datagrid_event` receivers) run
    first and may bypass the default handler. Returns the names of the
    events whose default handler ran.
    """
    fired = []
    for name, handler in self._triggered_handlers():
      if not request.has(self._trigger_key(handler)):
        continue
      if self.hooks.dispatch(name, self, request):
        logger.debug("datagrid %s: default %s handler bypassed", self.name, name)
        continue
      handler.callback(self)
      fired.append(name)
    return fired

  # ---------------------------------------------------------------------------
  # Query
  # ---------------------------------------------------------------------------
  def search_keywords(self, request: GridRequest) -> str:
    search = self.config.on_search
    if search is None:
      return ""
    return (request.get(search.keyword_param) or "").strip()

  def build_query(self, request: GridRequest, paginate: bool = True) -> GridQuery:
    """Compile the statement pair without executing anything."""
    grammar = get_grammar(self.driver)
    self._active_grammar = grammar
    try:
      criteria = dict(self.config.criteria)
      keywords = self.search_keywords(request)
      if keywords:
        self.config.on_search.callback(self, criteria, keywords)
      return build_query(
        self.config,
        request,
        grammar,
        grid=self,
        criteria=criteria,
        paginate=paginate,
      )
    finally:
      self._active_grammar = None

  def fetch(self, request: GridRequest) -> ResultSet:
    """
    Run the data statement, then the count statement.

    Without a configured table this is a no-op returning an empty result.
    Execution errors propagate as QueryError.
    """
    if not self.config.table:
      return ResultSet()

    self.status = GridStatus.FETCHING
    query = self.build_query(request)

    started = time.perf_counter()
    rows = self.executor.execute(query.data_sql, query.params, None, self.connection)
    elapsed = time.perf_counter() - started

    count_rows = self.executor.execute(query.count_sql, query.params, {"max_rows": 1}, self.connection)
    # Single-column row; some backends upper-case the alias
    total = int(next(iter(count_rows[0].values()), 0) or 0) if count_rows else 0

    result = ResultSet(
      rows=rows,
      total=total,
      elapsed=elapsed,
      query=query,
      keywords=self.search_keywords(request),
    )
    logger.debug(
      "datagrid %s: %s rows of %s on page %s (%.5fs)",
      self.name, len(rows), total, query.page, elapsed,
    )

    self.status = result.status
    if self.config.on_fetch is not None:
      self.config.on_fetch(self, result)
    return result

  def export_rows(self, request: GridRequest) -> list[dict]:
    """All matching rows, without pagination."""
    if not self.config.table:
      return []
    query = self.build_query(request, paginate=False)
    return self.executor.execute(query.data_sql, query.params, None, self.connection)

  # ---------------------------------------------------------------------------
  # URL helper
  # ---------------------------------------------------------------------------
  def url(self, request: GridRequest, **params: Any) -> str:
    """
    Form action URL with `params` merged into its query string.

    If the configured action has no query string, the current request's
    query string is used as the base.
    """
    action = self.config.form.action or request.path
    base, _sep, query_string = action.partition("?")
    query = QueryDict(query_string, mutable=True) if query_string else request.query.copy()
    for key, value in params.items():
      query[key] = str(value)
    encoded = query.urlencode()
    return f"{base}?{encoded}" if encoded else base

  # ---------------------------------------------------------------------------
  # Render pipeline
  # ---------------------------------------------------------------------------
  def visible_columns(self, result: ResultSet) -> list[str]:
    columns = result.columns
    if self.config.editable:
      columns = columns[1:]
    return [c for c in columns if c not in self.config.invisible]

  def _active_sort(self, request: GridRequest) -> Optional[tuple[str, str]]:
    override = request.sort_override
    if override is not None:
      return override
    sort = self.config.sort
    if sort is not None and len(sort.columns) == 1:
      return bare_name(sort.columns[0]), sort.direction
    return None

  def build_header(self, result: ResultSet, request: GridRequest) -> Element:
    cells: list = []

    if self.config.editable:
      if self.config.queueable:
        cells.append(_("ADD"))
      else:
        cells.extend([_("DELETE"), _("EDIT")])

    active = self._active_sort(request)
    for label in self.visible_columns(result):
      if not self.config.editable or label in self.config.unsortable:
        cells.append(label)
        continue

      direction = "desc"
      if active is not None and active[0] == label:
        direction = "desc" if active[1] == "asc" else "asc"

      cells.append(Element("a", {"href": self.url(request, field=label, dir=direction)}, label))

    return Element("tr", {"class": "dataListHeader"}, *[Element("th", {}, c) for c in cells])

  def _editable_cells(self, identity: Any, row_number: int, request: GridRequest) -> list[Element]:
    td_attrs = {"align": "center", "valign": "top", "style": "width: 5%"}
    param = self.config.identity_param

    cells = [
      Element("td", td_attrs, Element("input", {
        "id": f"cbRow{row_number}",
        "class": "selected-row",
        "type": "checkbox",
        "name": f"{param}[]",
        "value": "" if identity is None else str(identity),
      })),
    ]

    if not self.config.queueable:
      edit_key = self.config.on_edit.trigger if self.config.on_edit else GridEvent.EDIT.value
      edit_params = {param: identity, edit_key: "true"}
      post_data = QueryDict(mutable=True)
      for key, value in edit_params.items():
        post_data[key] = str(value)
      cells.append(Element("td", td_attrs, Element("a", {
        "class": "editLink",
        "href": self.url(request, **edit_params),
        "postdata": post_data.urlencode(),
        "title": _("Edit"),
      })))

    return cells

  def build_body(self, result: ResultSet, request: GridRequest) -> list[Element]:
    editable = self.config.editable
    rows = []

    for row_number, row in enumerate(result.rows, start=1):
      # Row identity is taken before casts and before the column is hidden
      identity = next(iter(row.values()), None)

      cells = []
      for index, (column, value) in enumerate(row.items()):
        if editable and index == 0:
          continue
        if column in self.config.invisible:
          continue

        cast = self.config.casts.get(column)
        content = cast(self, value, row) if cast is not None else value

        attrs = {"valign": "top"}
        if column in self.config.widths:
          attrs["width"] = self.config.widths[column]
        cells.append(Element("td", attrs, "" if content is None else content))

      if editable:
        cells = self._editable_cells(identity, row_number, request) + cells

      rows.append(Element("tr", {
        "class": "alterCell2" if row_number % 2 == 0 else "alterCell",
        "style": "cursor: pointer",
        "row": row_number,
      }, *cells))

    return rows

  def build_action_bar(self, result: ResultSet, request: GridRequest) -> Element:
    bar = self.config.bar
    question = bar.question or _("Are You Sure Want to DELETE Selected Data?")
    label = bar.label or _("Delete Selected Data")
    name = bar.name or "delete"

    if self.config.editable:
      form_name = escapejs(self.config.form.name)
      action = Element(
        "td",
        {},
        Element("input", {"type": "hidden", "name": name, "value": "yes"}),
        Element("input", {
          "class": bar.css_class,
          "type": "button",
          "onclick": f"chboxFormSubmit('{form_name}', '{escapejs(question)}', 1)",
          "value": label,
        }),
        Element("input", {"class": "check-all button btn btn-default", "type": "button", "value": _("Check All")}),
        Element("input", {"class": "uncheck-all button btn btn-default ml-1", "type": "button", "value": _("Uncheck All")}),
      )
    else:
      action = Element("td", {"width": "50%"})

    paging = None
    if result.total > self.config.limit:
      query = result.query
      current = query.page if query is not None else 1
      paging = Element("td", {"class": "paging-area"}, build_pagination(
        lambda page: self.url(request, page=page),
        result.total,
        self.config.limit,
        current,
      ))

    return Element(
      "table",
      {"class": "datagrid-action-bar", "cellspacing": 0, "cellpadding": 5, "style": "width: 100%"},
      Element("tr", {}, action, paging),
    )

  def build_search_info(self, result: ResultSet) -> Any:
    if self.config.on_match is not None:
      return self.config.on_match(result, result.keywords)
    if not result.keywords:
      return ""
    return Element("div", {"class": "infoBox"}, format_html(
      _("Found <strong>{}</strong> results for <em>{}</em>, query took <b>{}</b> ms"),
      result.total,
      result.keywords,
      result.query_time_ms,
    ))

  def build_debug(self, result: ResultSet, iframe: Element) -> Element:
    query = result.query
    if query is None:
      lines = ["no table configured"]
    else:
      grammar = get_grammar(self.driver)
      lines = [
        f"connection: {self.connection} ({grammar.name})",
        f"main: {render_display_sql(query.data_sql, query.params, grammar)}",
        f"count: {render_display_sql(query.count_sql, query.params, grammar)}",
        f"parameters: {query.params!r}",
        f"total: {result.total}",
        f"query time: {result.query_time_ms} ms",
      ]
    return Element("div", {"class": "debug"}, Element("pre", {}, "\n".join(lines)), iframe)

  def table_shell(self, *rows: Any) -> Element:
    return Element("table", {"id": self.name, "class": "s-table table"}, *rows)

  def render(self, request: GridRequest, result: Optional[ResultSet] = None) -> SafeString:
    """
    Render the grid for one request.

    Request-triggered events fire first, then the data is fetched (or the
    given `result` is reused) and the HTML is assembled.
    """
    self.request = request
    self.dispatch_events(request)

    if result is None:
      result = self.fetch(request)
    elif self.config.on_cached is not None:
      self.config.on_cached(self, result)
    self.result = result

    return self.render_result(result, request)

  def render_result(self, result: ResultSet, request: GridRequest) -> SafeString:
    form = self.config.form
    debug = _debug_enabled()
    iframe = Element("iframe", {
      "id": form.target,
      "name": form.target,
      "class": "d-block" if debug else "d-none",
    })
    prefix = self.build_debug(result, iframe) if debug else None

    if result.status is GridStatus.EMPTY:
      no_data = Element(
        "tr",
        {"row": 0, "style": "cursor: pointer;"},
        Element("td", {"class": "s-table__no-data", "align": "center"}, _("No Data")),
      )
      output = join_html(prefix, self.table_shell(no_data))
      self.status = GridStatus.RENDERED
      return output

    table = self.table_shell(self.build_header(result, request), *self.build_body(result, request))
    search_info = self.build_search_info(result)
    bar = self.build_action_bar(result, request)
    hidden = [
      Element("input", {"name": name, "type": "hidden", "value": value})
      for name, value in self.config.hidden_inputs.items()
    ]

    if self.config.editable:
      grid_html = Element("form", {
        "id": form.id,
        "name": form.name,
        "action": self.url(request),
        "method": form.method,
        "target": form.target,
      }, *hidden, bar, table, bar)
    else:
      grid_html = join_html(*hidden, bar, table, bar)

    output = join_html(prefix if debug else iframe, search_info, grid_html)
    self.status = GridStatus.RENDERED
    return output


def _debug_enabled() -> bool:
  cfg = getattr(settings, "SQLGRID", {})
  flag = cfg.get("debug")
  if flag is None:
    return bool(getattr(settings, "DEBUG", False))
  return bool(flag)
