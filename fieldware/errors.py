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
Fieldware exception hierarchy and arity-error message formatting.

Architecture:
- FieldwareError: Base class for every error raised by this package
- MiddlewareDefinitionError: A modifier function cannot be turned into a middleware
- ArityError: A middleware was invoked with the wrong number of configuration arguments
- SchemaDefinitionError: A raw schema definition cannot be compiled
- describe_arity_error(): Builds structured ArityErrorInfo with the final message

Example:
    >>> info = describe_arity_error("at_least", ["min_value"], received=0)
    >>> print(info.message)
    "Middleware function missing extra argument(s): min_value"
"""

from dataclasses import dataclass, field
from typing import List, Sequence


class FieldwareError(Exception):
    """Base class for Fieldware errors."""


class MiddlewareDefinitionError(FieldwareError):
    """Raised when a modifier function or its invocation does not match its declared shape."""


class SchemaDefinitionError(FieldwareError, TypeError):
    """Raised when a raw schema definition cannot be compiled."""


@dataclass
class ArityErrorInfo:
    """
    Structured information about a middleware arity mismatch.

    Attributes:
        middleware_name: Name of the modifier function behind the middleware
        expected: Declared number of configuration arguments
        received: Number of configuration arguments actually supplied
        expected_params: Names of the configuration parameters (best effort, may be empty)
        missing_params: Names of the parameters that were not supplied
        message: Final human-readable error message
    """

    middleware_name: str
    expected: int
    received: int
    expected_params: List[str] = field(default_factory=list)
    missing_params: List[str] = field(default_factory=list)
    message: str = ""


class ArityError(MiddlewareDefinitionError, TypeError):
    """
    Raised when a middleware constructor receives the wrong number of
    configuration arguments.

    The structured details are available on the ``info`` attribute.
    """

    def __init__(self, info: ArityErrorInfo):
        super().__init__(info.message)
        self.info = info


def describe_arity_error(
    middleware_name: str,
    expected_params: Sequence[str],
    received: int,
    expected: int = -1,
) -> ArityErrorInfo:
    """
    Builds the diagnostic for a middleware invoked with the wrong argument count.

    Parameter names are diagnostic only: when they cannot be recovered the
    message falls back to an empty name list, the counts stay authoritative.

    Args:
        middleware_name: Name of the modifier function
        expected_params: Names of the declared configuration parameters
        received: Number of configuration arguments supplied
        expected: Declared arity; defaults to len(expected_params)

    Returns:
        ArityErrorInfo with the formatted message

    Example (too few):
        >>> describe_arity_error("between", ["low", "high"], received=1).message
        "Middleware function missing extra argument(s): high"

    Example (too many):
        >>> describe_arity_error("optional", [], received=1).message
        "Middleware 'optional' expected 0 extra argument(s) (), got 1"
    """
    names = list(expected_params)
    if expected < 0:
        expected = len(names)

    if received < expected:
        # Positional binding: the trailing declared parameters are the missing ones
        missing = names[received:expected]
        message = f"Middleware function missing extra argument(s): {','.join(missing)}"
    else:
        missing = []
        message = (
            f"Middleware '{middleware_name}' expected {expected} extra argument(s) "
            f"({', '.join(names)}), got {received}"
        )

    return ArityErrorInfo(
        middleware_name=middleware_name,
        expected=expected,
        received=received,
        expected_params=names,
        missing_params=missing,
        message=message,
    )
