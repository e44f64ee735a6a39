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

from utils.env import env_bool, env_int, env_list, env_str


SECRET_KEY = env_str("SQLGRID_SECRET_KEY", "sqlgrid-insecure-dev-key")
DEBUG = env_bool("SQLGRID_DEBUG", False)
ALLOWED_HOSTS = env_list("SQLGRID_ALLOWED_HOSTS", ["localhost", "127.0.0.1", "testserver"])

INSTALLED_APPS = [
  "django.contrib.contenttypes",
  "django.contrib.auth",
  "datagrid",
]

MIDDLEWARE = [
  "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "sqlgrid_site.urls"

TEMPLATES = [
  {
    "BACKEND": "django.template.backends.django.DjangoTemplates",
    "DIRS": [],
    "APP_DIRS": True,
    "OPTIONS": {
      "context_processors": [
        "django.template.context_processors.request",
      ],
    },
  },
]

DATABASES = {
  "default": {
    "ENGINE": "django.db.backends.sqlite3",
    "NAME": env_str("SQLGRID_DB_NAME", ":memory:"),
  },
}

USE_I18N = True
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

SQLGRID = {
  "default_connection": env_str("SQLGRID_DEFAULT_CONNECTION", "default"),
  "default_limit": env_int("SQLGRID_DEFAULT_LIMIT", 30),
  # None follows settings.DEBUG
  "debug": None,
  "grammars_path": env_str("SQLGRID_GRAMMARS_PATH"),
  "connections": {},
}

LOGGING = {
  "version": 1,
  "disable_existing_loggers": False,
  "handlers": {
    "console": {"class": "logging.StreamHandler"},
  },
  "loggers": {
    "datagrid": {
      "handlers": ["console"],
      "level": env_str("SQLGRID_LOG_LEVEL", "WARNING"),
    },
  },
}
