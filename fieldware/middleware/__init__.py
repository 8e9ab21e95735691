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
Field middlewares for Fieldware.

A middleware wraps a compiled schema with extra behavior defined by a plain
modifier function. create_middleware() builds the constructor; optional and
required are the built-in ones.
"""

from fieldware.middleware.factory import Middleware, create_middleware
from fieldware.middleware.builtins import optional, required

__all__ = ["Middleware", "create_middleware", "optional", "required"]
