# -*- coding: utf-8 -*-

# Fieldware
# Copyright (C) 2025 Fieldware contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Fieldware - composable field validators.

This package builds reusable field validators on top of a small schema
compiler. A validator author writes a modifier function and turns it into a
middleware with create_middleware().

Modules:
    - config: Configuration, constants and logging setup
    - errors: Exception hierarchy and arity diagnostics
    - signature: Parameter name introspection for diagnostics
    - schema: Schema compiler and the UNDEFINED sentinel
    - middleware: Middleware factory and the optional/required middlewares

Logging is disabled on import; call configure_logging() (or
logger.enable("fieldware")) to see the package's log records.
"""

from loguru import logger

# Silenced before the built-in middlewares are created below
logger.disable("fieldware")

# Version is imported from config.py - the single source of truth
from fieldware.config import APP_VERSION as __version__

# Configuration
from fieldware.config import configure_logging

# Errors
from fieldware.errors import (
    ArityError,
    ArityErrorInfo,
    FieldwareError,
    MiddlewareDefinitionError,
    SchemaDefinitionError,
)

# Schema compiler
from fieldware.schema import UNDEFINED, Schema, compile_schema, is_valid

# Introspection
from fieldware.signature import param_names

# Middleware
from fieldware.middleware import Middleware, create_middleware, optional, required

__all__ = [
    # Version
    "__version__",

    # Configuration
    "configure_logging",

    # Errors
    "FieldwareError",
    "MiddlewareDefinitionError",
    "ArityError",
    "ArityErrorInfo",
    "SchemaDefinitionError",

    # Schema compiler
    "UNDEFINED",
    "Schema",
    "compile_schema",
    "is_valid",

    # Introspection
    "param_names",

    # Middleware
    "Middleware",
    "create_middleware",
    "optional",
    "required",
]
