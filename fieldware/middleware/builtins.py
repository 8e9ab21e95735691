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
Ready-made middlewares.

Usage:
    compile_schema({
        "nickname": optional({"Nickname is too long": lambda v: len(v) <= 32}),
        "email": required("Email is required", {"Email needs an @": lambda v: "@" in v}),
    })
"""

from typing import Any, Dict

from fieldware.middleware.factory import create_middleware
from fieldware.schema import UNDEFINED, Schema


@create_middleware
def optional(value: Any, obj: Dict[str, Any], options: Dict[str, Any], schema: Schema):
    """
    Make a schema optional.

    An UNDEFINED value is valid; anything else (None included) goes through
    regular schema validation.
    """
    if value is UNDEFINED:
        return None
    return schema.validate(value, obj, options)


@create_middleware
def required(
    message: str, value: Any, obj: Dict[str, Any], options: Dict[str, Any], schema: Schema
):
    """
    Give a field an explicit required message.

    An UNDEFINED value resolves to [message]; anything else goes through
    regular schema validation and the message is never added.
    """
    if value is not UNDEFINED:
        return schema.validate(value, obj, options)
    return [message]
