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

from typing import Any, Callable, Iterable

from django.core.management.base import BaseCommand, CommandError

from datagrid.exceptions import UnknownDialectError
from datagrid.rendering.grammars import get_available_grammar_names, get_grammar
from datagrid.rendering.resolver import ColumnResolver


CheckFunc = Callable[[], Any]


class Command(BaseCommand):
  help = (
    "Show quoting, placeholder and pagination rules of the registered SQL grammars.\n\n"
    "Examples:\n"
    "  python manage.py datagrid_grammar_check\n"
    "  python manage.py datagrid_grammar_check --grammar mssql\n"
  )

  def add_arguments(self, parser) -> None:
    parser.add_argument(
      "--grammar",
      dest="grammar_name",
      type=str,
      default=None,
      help="Optional grammar name to restrict the output, e.g. 'mysql', 'pgsql', 'mssql'.",
    )
    parser.add_argument(
      "--grammars-path",
      dest="grammars_path",
      type=str,
      default=None,
      help="YAML file with additional grammar declarations.",
    )

  # ---------------------------------------------------------------------------
  # Helpers
  # ---------------------------------------------------------------------------

  def _run_check(self, fn: CheckFunc) -> tuple[str, str]:
    """Run a single check and return (status, rendered result or error)."""
    try:
      return "OK", str(fn())
    except ValueError as exc:
      return "FAIL", str(exc)

  def _print_header(self, title: str) -> None:
    self.stdout.write("")
    self.stdout.write(self.style.MIGRATE_HEADING(title))
    self.stdout.write(self.style.HTTP_INFO("-" * len(title)))

  def _print_table(self, rows: Iterable[tuple[str, str, str]]) -> None:
    for check, status, details in rows:
      line = f"  {check:<22} {status:<4}"
      if details:
        line += f"  {details}"
      self.stdout.write(line)

  # ---------------------------------------------------------------------------
  # Main
  # ---------------------------------------------------------------------------

  def handle(self, *args: Any, **options: Any) -> None:
    grammar_name: str | None = options.get("grammar_name")
    path: str | None = options.get("grammars_path")

    names = [grammar_name] if grammar_name else get_available_grammar_names(path)

    self._print_header("Grammar diagnostics")

    for name in names:
      try:
        grammar = get_grammar(name, path)
      except UnknownDialectError as exc:
        raise CommandError(str(exc)) from exc

      resolver = ColumnResolver(grammar)
      open_char, close_char = grammar.identifier_quote

      self.stdout.write("")
      self.stdout.write(self.style.HTTP_INFO(f"Grammar: {grammar.name}"))
      self.stdout.write(f"  identifier_quote          = {open_char}{close_char}")
      self.stdout.write(f"  placeholder               = {grammar.placeholder}")
      self.stdout.write(f"  pagination_requires_order = {grammar.pagination_requires_order}")

      self._print_table([
        ("column", *self._run_check(lambda: resolver.quote("b.title as Title"))),
        ("pagination", *self._run_check(lambda: grammar.pagination_clause(30, 60))),
        ("display value", *self._run_check(lambda: grammar.quote_value("O'Reilly"))),
      ])

    self.stdout.write("")
    self.stdout.write(self.style.SUCCESS(f"{len(names)} grammar(s) checked."))
