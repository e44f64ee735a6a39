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

"""
Configuration helpers for sqlgrid.

All settings live in the Django setting SQLGRID (a plain dict); environment
variables can override selected keys.
"""
