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

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from django.dispatch import Signal

# Sent before a grid runs the default handler of a request-triggered event
# (edit, delete or a custom event). Receivers get `context` and may set
# context.bypass_default = True to suppress the default handler.
datagrid_event = Signal()


@dataclass
class EventContext:
  grid: Any
  event: str
  request: Any
  bypass_default: bool = False


Observer = Callable[[EventContext], None]


def event_name(event: Any) -> str:
  return str(getattr(event, "value", event)).lower()


class HookRegistry:
  """
  Per-grid hook registry.

  Observers registered here see only the grid they were injected into;
  app-wide plugins connect to the `datagrid_event` signal instead. Both
  receive the same EventContext.
  """

  def __init__(self) -> None:
    self._observers: Dict[str, List[Observer]] = defaultdict(list)

  def observe(self, event: str, observer: Observer) -> "HookRegistry":
    self._observers[event_name(event)].append(observer)
    return self

  def dispatch(self, event: str, grid: Any, request: Any) -> bool:
    """Notify observers; return True if the default handler must be skipped."""
    name = event_name(event)
    context = EventContext(grid=grid, event=name, request=request)

    datagrid_event.send(sender=grid.__class__, context=context)
    for observer in self._observers.get(name, []):
      observer(context)

    return context.bypass_default
