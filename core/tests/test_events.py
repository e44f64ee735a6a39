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

from datagrid.signals import EventContext, HookRegistry, datagrid_event
from datagrid.state import GridRequest


def books_request(query_string="", post=""):
  return GridRequest.from_query(query_string, path="/books/", post=post)


@pytest.fixture
def bypass_receiver():
  """Connect a datagrid_event receiver that bypasses every default handler."""
  seen: list[EventContext] = []

  def receiver(sender, context, **kwargs):
    seen.append(context)
    context.bypass_default = True

  datagrid_event.connect(receiver, dispatch_uid="test-bypass-receiver")
  yield seen
  datagrid_event.disconnect(dispatch_uid="test-bypass-receiver")


def test_delete_fires_on_action_bar_trigger(make_book_grid):
  grid, _executor = make_book_grid()
  deleted = []
  grid.on_delete(lambda g: deleted.extend(g.request.data.getlist("itemID[]")))

  grid.render(books_request(post="delete=yes&itemID%5B%5D=7&itemID%5B%5D=8"))

  assert deleted == ["7", "8"]


def test_delete_trigger_follows_action_bar_name(make_book_grid):
  grid, _executor = make_book_grid()
  grid.set_action_bar(name="remove")
  fired = []
  grid.on_delete(lambda g: fired.append("delete"))

  grid.render(books_request(post="delete=yes"))
  assert fired == []

  grid.render(books_request(post="remove=yes"))
  assert fired == ["delete"]


def test_edit_fires_on_its_trigger_key(make_book_grid):
  grid, _executor = make_book_grid()
  edited = []
  grid.on_edit(lambda g: edited.append(g.request.get("itemID")), trigger="detail")

  grid.render(books_request("itemID=7&edit=true"))
  assert edited == []

  html = grid.render(books_request("itemID=7&detail=true"))
  assert edited == ["7"]
  # Edit links carry the custom trigger key
  assert "itemID=7&amp;detail=true" in html


def test_events_do_not_fire_without_trigger(make_book_grid):
  grid, _executor = make_book_grid()
  fired = []
  grid.on_delete(lambda g: fired.append("delete"))
  grid.on_edit(lambda g: fired.append("edit"))

  grid.render(books_request("page=2"))

  assert fired == []


def test_registered_event_fires_before_delete_and_edit(make_book_grid):
  grid, _executor = make_book_grid()
  fired = []
  grid.on_edit(lambda g: fired.append("edit"))
  grid.on_delete(lambda g: fired.append("delete"))
  grid.register_event("Approve", lambda g: fired.append("approve"))

  grid.render(books_request(post="approve=1&delete=yes&edit=true"))

  assert fired == ["approve", "delete", "edit"]


def test_registered_event_with_own_trigger(make_book_grid):
  grid, _executor = make_book_grid()
  fired = []
  grid.register_event("approve", lambda g: fired.append("approve"), trigger="ok")

  assert grid.dispatch_events(books_request("approve=1")) == []
  assert grid.dispatch_events(books_request("ok=1")) == ["approve"]
  assert fired == ["approve"]


def test_hook_observer_can_bypass_default_handler(make_book_grid):
  grid, _executor = make_book_grid()
  observed = []
  fired = []

  def observer(context):
    observed.append((context.event, context.grid))
    context.bypass_default = True

  grid.hooks.observe("delete", observer)
  grid.on_delete(lambda g: fired.append("delete"))

  grid.render(books_request(post="delete=yes"))

  assert observed == [("delete", grid)]
  assert fired == []


def test_observer_without_bypass_keeps_default(make_book_grid):
  grid, _executor = make_book_grid()
  fired = []
  grid.hooks.observe("edit", lambda context: None)
  grid.on_edit(lambda g: fired.append("edit"))

  grid.render(books_request("edit=true"))

  assert fired == ["edit"]


def test_signal_receiver_can_bypass_default_handler(make_book_grid, bypass_receiver):
  grid, _executor = make_book_grid()
  fired = []
  grid.on_edit(lambda g: fired.append("edit"))

  grid.render(books_request("edit=true"))

  assert fired == []
  assert [c.event for c in bypass_receiver] == ["edit"]
  assert bypass_receiver[0].grid is grid


def test_hook_registry_is_per_grid(make_book_grid):
  first, _ = make_book_grid()
  second, _ = make_book_grid()
  fired = []
  first.hooks.observe("delete", lambda context: setattr(context, "bypass_default", True))
  second.on_delete(lambda g: fired.append("second"))

  second.render(books_request(post="delete=yes"))

  assert fired == ["second"]


def test_shared_registry_can_be_injected(make_book_grid):
  hooks = HookRegistry()
  seen = []
  hooks.observe("DELETE", lambda context: seen.append(context.event))

  grid, _executor = make_book_grid()
  grid.hooks = hooks
  grid.on_delete(lambda g: None)

  assert hooks.dispatch("delete", grid, books_request()) is False
  grid.render(books_request(post="delete=yes"))

  assert seen == ["delete", "delete"]
