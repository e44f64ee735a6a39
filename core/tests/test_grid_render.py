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
from django.utils.safestring import mark_safe

from datagrid.exceptions import ArgumentError
from datagrid.grid import Datagrid
from datagrid.rendering.criteria import like
from datagrid.state import GridRequest, GridStatus

from tests._grid_test_helpers import SpyExecutor


def books_request(query_string="", post=""):
  return GridRequest.from_query(query_string, path="/books/", post=post)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def test_builder_calls_chain():
  grid = Datagrid("books", executor=SpyExecutor())
  assert grid.set_table("books").set_column("id").set_limit(10) is grid


def test_builder_rejects_missing_arguments():
  grid = Datagrid("books", executor=SpyExecutor())
  with pytest.raises(ArgumentError):
    grid.set_column()
  with pytest.raises(ArgumentError):
    grid.set_table("")
  with pytest.raises(ArgumentError):
    grid.set_limit(0)
  with pytest.raises(ArgumentError):
    grid.set_group()


def test_first_column_becomes_countable():
  grid = Datagrid("books", executor=SpyExecutor())
  grid.set_column("b.id as ID", "b.title")
  assert grid.config.countable_column == "b.id"


def test_cast_returns_column_and_keys_by_label():
  grid = Datagrid("books", executor=SpyExecutor())
  column = grid.cast("b.title as Title", lambda g, value, row: value)
  assert column == "b.title as Title"
  assert "Title" in grid.config.casts


def test_form_names_are_cleaned():
  grid = Datagrid("bo'ok\"s", executor=SpyExecutor())
  assert grid.name == "books"
  assert grid.config.form.id == "books"


# ---------------------------------------------------------------------------
# Empty output
# ---------------------------------------------------------------------------

def test_unconfigured_grid_renders_shell_without_query():
  executor = SpyExecutor()
  grid = Datagrid("books", executor=executor)

  html = grid.render(books_request())

  assert executor.calls == []
  assert 'class="s-table__no-data"' in html
  assert "No Data" in html
  assert "<form" not in html
  assert grid.status is GridStatus.RENDERED


def test_zero_total_skips_header_and_body(make_book_grid, monkeypatch):
  grid, executor = make_book_grid(rows=[], total=0)

  def fail(*args, **kwargs):
    raise AssertionError("header/body must not be built for an empty result")

  monkeypatch.setattr(grid, "build_header", fail)
  monkeypatch.setattr(grid, "build_body", fail)

  html = grid.render(books_request())

  assert len(executor.calls) == 2
  assert '<tr row="0" style="cursor: pointer;">' in html
  assert '<table class="s-table table" id="books">' in html
  assert grid.result.status is GridStatus.EMPTY


# ---------------------------------------------------------------------------
# Editable grid
# ---------------------------------------------------------------------------

def test_editable_row_uses_first_column_as_identity(make_book_grid):
  grid, _executor = make_book_grid()

  html = grid.render(books_request())

  assert (
    '<input class="selected-row" id="cbRow1" name="itemID[]" type="checkbox" value="7" />'
    in html
  )
  assert 'href="/books/?itemID=7&amp;edit=true"' in html
  assert 'postdata="itemID=7&amp;edit=true"' in html
  assert 'class="editLink"' in html
  # The identity column itself is not displayed
  assert '<td valign="top">7</td>' not in html
  assert '<td valign="top">Dune</td>' in html


def test_rows_alternate_classes(make_book_grid):
  grid, _executor = make_book_grid()

  html = grid.render(books_request())

  assert '<tr class="alterCell" row="1" style="cursor: pointer">' in html
  assert '<tr class="alterCell2" row="2" style="cursor: pointer">' in html


def test_editable_header_has_actions_and_sort_links(make_book_grid):
  grid, _executor = make_book_grid()

  html = grid.render(books_request())

  assert "<th>DELETE</th><th>EDIT</th>" in html
  assert '<a href="/books/?field=Title&amp;dir=desc">Title</a>' in html
  assert '<a href="/books/?field=Author&amp;dir=desc">Author</a>' in html
  assert "<th>id</th>" not in html


def test_sort_link_toggles_active_field(make_book_grid):
  grid, _executor = make_book_grid()

  html = grid.render(books_request("field=Title&dir=desc"))

  assert '<a href="/books/?field=Title&amp;dir=asc">Title</a>' in html
  assert '<a href="/books/?field=Author&amp;dir=desc">Author</a>' in html


def test_configured_sort_marks_active_field(make_book_grid):
  grid, _executor = make_book_grid()
  grid.set_sort("Title", "desc")

  html = grid.render(books_request())

  assert '<a href="/books/?field=Title&amp;dir=asc">Title</a>' in html


def test_unsortable_column_is_plain_text(make_book_grid):
  grid, _executor = make_book_grid()
  grid.set_unsort("Author")

  html = grid.render(books_request())

  assert "<th>Author</th>" in html


def test_queueable_grid_has_add_column_and_no_edit_link(make_book_grid):
  grid, _executor = make_book_grid()
  grid.set_queueable()

  html = grid.render(books_request())

  assert "<th>ADD</th>" in html
  assert "<th>EDIT</th>" not in html
  assert "editLink" not in html
  assert 'id="cbRow1"' in html


def test_editable_output_is_wrapped_in_form(make_book_grid):
  grid, _executor = make_book_grid()
  grid.set_hidden_input("mod", "bibliography")

  html = grid.render(books_request())

  assert html.startswith('<iframe class="d-none" id="submitExec" name="submitExec"></iframe>')
  assert '<form action="/books/" id="books" method="POST" name="books" target="submitExec">' in html
  assert '<input name="mod" type="hidden" value="bibliography" />' in html
  # Action bar above and below the table
  assert html.count('class="datagrid-action-bar"') == 2
  assert '<input name="delete" type="hidden" value="yes" />' in html
  assert 'value="Delete Selected Data"' in html
  assert "chboxFormSubmit(" in html
  assert 'class="check-all button btn btn-default"' in html
  assert 'class="uncheck-all button btn btn-default ml-1"' in html


def test_action_bar_texts_can_be_changed(make_book_grid):
  grid, _executor = make_book_grid()
  grid.set_action_bar(label="Remove", question="Really?", name="remove")

  html = grid.render(books_request())

  assert 'value="Remove"' in html
  assert "Really?" in html
  assert '<input name="remove" type="hidden" value="yes" />' in html


def test_form_action_query_string_is_kept(make_book_grid):
  executor = SpyExecutor([{"id": 7, "Title": "Dune"}])
  grid = Datagrid("books", action="/admin/books/?mod=bibliography", executor=executor)
  grid.set_connection("default", "mysql").set_table("books").set_column("id", "title as Title")

  html = grid.render(books_request("page=2"))

  assert 'action="/admin/books/?mod=bibliography"' in html
  assert 'href="/admin/books/?mod=bibliography&amp;itemID=7&amp;edit=true"' in html


# ---------------------------------------------------------------------------
# Read-only grid
# ---------------------------------------------------------------------------

def test_read_only_grid_shows_all_columns_without_form(make_book_grid):
  grid, _executor = make_book_grid()
  grid.set_editable(False)

  html = grid.render(books_request())

  assert "<form" not in html
  assert "<th>id</th><th>Title</th><th>Author</th>" in html
  assert '<td valign="top">7</td>' in html
  assert "selected-row" not in html
  assert '<td width="50%"></td>' in html


# ---------------------------------------------------------------------------
# Cells
# ---------------------------------------------------------------------------

def test_cast_output_is_escaped_unless_safe(make_book_grid):
  grid, _executor = make_book_grid()
  grid.cast("b.title as Title", lambda g, value, row: mark_safe(f"<b>{value}</b>"))
  grid.cast("a.name as Author", lambda g, value, row: f"<i>{value}</i>")

  html = grid.render(books_request())

  assert "<b>Dune</b>" in html
  assert "&lt;i&gt;Herbert&lt;/i&gt;" in html


def test_cast_sees_raw_row(make_book_grid):
  grid, _executor = make_book_grid()
  seen = []
  grid.cast("b.title as Title", lambda g, value, row: seen.append(row["id"]) or value)

  grid.render(books_request())

  assert seen == [7, 8]


def test_raw_cell_values_are_escaped():
  executor = SpyExecutor([{"id": 1, "title": "<script>x</script>"}])
  grid = Datagrid("books", executor=executor).set_connection("default", "mysql")
  grid.set_table("books").set_column("id", "title")

  html = grid.render(books_request())

  assert "<script>" not in html
  assert "&lt;script&gt;x&lt;/script&gt;" in html


def test_invisible_columns_and_widths(make_book_grid):
  grid, _executor = make_book_grid()
  grid.set_invisible_column(["Author"])
  grid.set_column_width({"Title": "60%"})

  html = grid.render(books_request())

  assert "Herbert" not in html
  assert "field=Author" not in html
  assert '<td valign="top" width="60%">Dune</td>' in html


def test_none_values_render_empty():
  executor = SpyExecutor([{"id": 1, "title": None}])
  grid = Datagrid("books", executor=executor).set_connection("default", "mysql")
  grid.set_table("books").set_column("id", "title")

  html = grid.render(books_request())

  assert '<td valign="top"></td>' in html
  assert "None" not in html


# ---------------------------------------------------------------------------
# Pagination and search
# ---------------------------------------------------------------------------

def test_pagination_shown_when_total_exceeds_limit(make_book_grid):
  grid, _executor = make_book_grid(total=95)

  html = grid.render(books_request("page=2"))

  assert 'class="paging-area"' in html
  assert '<b class="current">2</b>' in html
  assert 'class="last_link" href="/books/?page=4"' in html


def test_no_pagination_for_single_page(make_book_grid):
  grid, _executor = make_book_grid()
  assert "paging-area" not in grid.render(books_request())


def test_search_callback_extends_a_copy_of_criteria(make_book_grid):
  grid, executor = make_book_grid()
  grid.set_criteria("b.active", 1)
  grid.on_search(lambda g, criteria, keywords: criteria.update({"b.title": like(keywords)}))

  html = grid.render(books_request("keywords=dune"))

  data_call = executor.calls[0]
  assert "WHERE `b`.`active` = %s AND `b`.`title` LIKE %s" in data_call["sql"]
  assert data_call["params"] == [1, "%dune%"]
  assert executor.calls[1]["params"] == [1, "%dune%"]
  assert grid.config.criteria == {"b.active": 1}
  assert '<div class="infoBox">Found <strong>2</strong> results for <em>dune</em>' in html


def test_search_keywords_are_escaped_in_banner(make_book_grid):
  grid, _executor = make_book_grid()
  grid.on_search(lambda g, criteria, keywords: None)

  html = grid.render(books_request("keywords=%3Cb%3E"))

  assert "<em>&lt;b&gt;</em>" in html


def test_search_is_skipped_without_keywords(make_book_grid):
  grid, executor = make_book_grid()
  calls = []
  grid.on_search(lambda g, criteria, keywords: calls.append(keywords))

  html = grid.render(books_request())

  assert calls == []
  assert "infoBox" not in html
  assert "WHERE" not in executor.calls[0]["sql"]


def test_match_callback_replaces_banner(make_book_grid):
  grid, _executor = make_book_grid()
  grid.on_search(lambda g, criteria, keywords: None, keyword_param="q")
  grid.on_match(lambda result, keywords: mark_safe(f"<p>{result.total} for {keywords}</p>"))

  html = grid.render(books_request("q=dune"))

  assert "<p>2 for dune</p>" in html
  assert "infoBox" not in html


# ---------------------------------------------------------------------------
# Re-query policy
# ---------------------------------------------------------------------------

def test_every_render_queries_again(make_book_grid):
  grid, executor = make_book_grid()

  grid.render(books_request())
  grid.render(books_request())

  assert len(executor.calls) == 4


def test_rendering_is_idempotent(make_book_grid):
  grid, _executor = make_book_grid()
  grid.set_criteria("b.active", 1)
  grid.on_search(lambda g, criteria, keywords: criteria.update({"b.title": like(keywords)}))
  request = books_request("page=1&field=Title&dir=asc")

  assert grid.render(request) == grid.render(request)


def test_given_result_is_rendered_without_query(make_book_grid):
  grid, executor = make_book_grid()
  cached = []
  grid.on_cached(lambda g, result: cached.append(result))

  result = grid.fetch(books_request())
  assert len(executor.calls) == 2

  first = grid.render(books_request(), result=result)
  second = grid.render(books_request(), result=result)

  assert len(executor.calls) == 2
  assert cached == [result, result]
  assert first == second


def test_fetch_callback_sees_result(make_book_grid):
  grid, _executor = make_book_grid(total=2)
  fetched = []
  grid.on_fetch(lambda g, result: fetched.append((g, result.total, len(result.rows))))

  grid.render(books_request())

  assert fetched == [(grid, 2, 2)]


def test_count_statement_fetches_one_row(make_book_grid):
  grid, executor = make_book_grid()
  grid.fetch(books_request())
  assert executor.calls[0]["options"] is None
  assert executor.calls[1]["options"] == {"max_rows": 1}
  assert executor.calls[1]["connection"] == "default"


def test_export_rows_are_unpaginated(make_book_grid):
  grid, executor = make_book_grid()

  rows = grid.export_rows(books_request("page=3"))

  assert rows == [dict(r) for r in executor.rows]
  assert len(executor.calls) == 1
  assert "LIMIT" not in executor.calls[0]["sql"]


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

def test_debug_block_replaces_hidden_iframe(make_book_grid, settings):
  settings.SQLGRID = {"debug": True}
  grid, _executor = make_book_grid()
  grid.set_criteria("b.active", 1)

  html = grid.render(books_request())

  assert html.startswith('<div class="debug"><pre>')
  assert "WHERE `b`.`active` = 1" in html
  assert "parameters: [1]" in html
  assert 'class="d-block"' in html
  assert 'class="d-none"' not in html


def test_debug_follows_django_debug(make_book_grid, settings):
  settings.SQLGRID = {}
  settings.DEBUG = True
  grid, _executor = make_book_grid()

  assert 'class="debug"' in grid.render(books_request())


# ---------------------------------------------------------------------------
# Backend and value quirks
# ---------------------------------------------------------------------------

class UpperCaseExecutor(SpyExecutor):
  """Answers like backends that upper-case unquoted aliases (Oracle, Snowflake)."""

  def execute(self, sql, params, options, connection):
    rows = super().execute(sql, params, options, connection)
    return [{key.upper(): value for key, value in row.items()} for row in rows]


def test_total_is_read_from_upper_cased_count_row():
  executor = UpperCaseExecutor([{"id": 1, "title": "Dune"}])
  grid = Datagrid("books", executor=executor).set_connection("default", "mysql")
  grid.set_table("books").set_column("id", "title")

  result = grid.fetch(books_request())
  html = grid.render(books_request())

  assert result.total == 1
  assert result.status is GridStatus.POPULATED
  assert "No Data" not in html
  assert '<td valign="top">Dune</td>' in html


def test_boolean_identity_is_kept_in_checkbox():
  executor = SpyExecutor([
    {"active": False, "title": "Dune"},
    {"active": True, "title": "Emma"},
  ])
  grid = Datagrid("books", executor=executor).set_connection("default", "mysql")
  grid.set_table("books").set_column("active", "title")

  html = grid.render(books_request())

  assert (
    '<input class="selected-row" id="cbRow1" name="itemID[]" type="checkbox" value="False" />'
    in html
  )
  assert (
    '<input class="selected-row" id="cbRow2" name="itemID[]" type="checkbox" value="True" />'
    in html
  )
  assert 'href="/books/?itemID=False&amp;edit=true"' in html
