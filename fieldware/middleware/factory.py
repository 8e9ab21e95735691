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
Middleware factory.

create_middleware() turns a modifier function into a reusable middleware
constructor. The modifier declares zero or more configuration parameters
followed by the fixed suffix (value, obj, options, schema):

    @create_middleware
    def at_least(minimum, value, obj, options, schema):
        return ["too small"] if value < minimum else None

    positive = at_least(1, {"must be a number": lambda v: isinstance(v, int)})
    errors = await positive.validate(0)    # ["too small"]

Each constructor call binds its configuration arguments and compiles its
target schema once. The resulting Schema runs the modifier on every
validate() call:
  1. Normalize (obj, options) from the call form
  2. Call modifier(*config_args, value, obj, options, compiled_schema)
  3. Await whatever it returned until a plain ValidationResult remains
"""

import functools
import inspect
from typing import Any, Callable, List, Optional, Sequence

from loguru import logger

from fieldware.config import TRACE_VALIDATION
from fieldware.errors import ArityError, MiddlewareDefinitionError, describe_arity_error
from fieldware.schema import (
    UNDEFINED,
    Schema,
    ValidationResult,
    compile_schema,
    resolve_result,
    split_context,
)
from fieldware.signature import param_names

# value, obj, options, schema
FIXED_SUFFIX_LENGTH = 4

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def _declared_arity(modifier: Callable[..., Any], name: str) -> int:
    """Count configuration parameters from the modifier's positional signature."""
    try:
        parameters = inspect.signature(modifier).parameters.values()
    except (TypeError, ValueError) as e:
        raise MiddlewareDefinitionError(
            f"Cannot read the signature of modifier '{name}'; pass config_params explicitly"
        ) from e

    positional = 0
    for parameter in parameters:
        if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
            raise MiddlewareDefinitionError(
                f"Modifier '{name}' takes *{parameter.name}; pass config_params explicitly"
            )
        if parameter.kind in _POSITIONAL_KINDS:
            positional += 1

    arity = positional - FIXED_SUFFIX_LENGTH
    if arity < 0:
        raise MiddlewareDefinitionError(
            f"Modifier '{name}' must accept (value, obj, options, schema) after its "
            f"configuration parameters; it declares {positional} positional parameter(s)"
        )
    return arity


class Middleware:
    """
    Middleware constructor produced by create_middleware().

    Calling it as ``middleware(*config_args, schema)`` returns a new Schema.
    Instances hold no per-call state and can be invoked any number of times.

    Attributes:
        modifier: The wrapped modifier function
        arity: Number of configuration arguments every call must supply
        config_params: Configuration parameter names, for diagnostics only
    """

    def __init__(
        self,
        modifier: Callable[..., Any],
        config_params: Optional[Sequence[str]] = None,
    ):
        if not callable(modifier):
            raise MiddlewareDefinitionError(
                f"Modifier must be callable, got {type(modifier).__name__}"
            )

        self.modifier = modifier
        name = getattr(modifier, "__name__", type(modifier).__name__)

        if config_params is not None:
            self.config_params: List[str] = list(config_params)
            self.arity = len(self.config_params)
        else:
            self.arity = _declared_arity(modifier, name)
            self.config_params = param_names(modifier)[: self.arity]

        functools.update_wrapper(self, modifier, updated=())
        self.__name__ = name

        logger.debug(
            "[Middleware] Created '{}' with {} configuration parameter(s): {}",
            self.__name__,
            self.arity,
            self.config_params,
        )

    def __call__(self, *args: Any) -> Schema:
        """
        Bind configuration arguments and a target schema.

        Args:
            *args: Configuration arguments followed by the target schema
                   (raw definition or compiled Schema)

        Returns:
            Schema whose validate() runs the modifier

        Raises:
            ArityError: Configuration argument count differs from arity
        """
        config_args = args[:-1]
        received = len(config_args)

        # The arity check runs before the schema is compiled
        if not args or received != self.arity:
            info = describe_arity_error(
                self.__name__,
                self.config_params,
                received=received,
                expected=self.arity,
            )
            if not args:
                info.message = (
                    f"Middleware '{self.__name__}' requires a target schema as its last argument"
                )
            logger.warning("[Middleware] {}", info.message)
            raise ArityError(info)

        compiled = compile_schema(args[-1])
        return compile_schema({"validate": self._bind(config_args, compiled)})

    def _bind(self, config_args: Sequence[Any], compiled: Schema) -> Callable[..., Any]:
        modifier = self.modifier
        name = self.__name__
        bound_args = tuple(config_args)

        async def validate(
            value: Any = UNDEFINED,
            *args: Any,
            obj: Optional[dict] = None,
            options: Optional[dict] = None,
        ) -> ValidationResult:
            obj, options = split_context(args, obj, options)
            if TRACE_VALIDATION:
                logger.debug("[Middleware] {}: executing modifier for value={!r}", name, value)

            result = modifier(*bound_args, value, obj, options, compiled)
            result = await resolve_result(result)

            if TRACE_VALIDATION:
                logger.debug("[Middleware] {}: resolved {!r}", name, result)
            return result

        validate.__qualname__ = f"{name}.validate"
        return validate

    def __repr__(self) -> str:
        return f"<Middleware {self.__name__}({', '.join(self.config_params + ['schema'])})>"


def create_middleware(
    modifier: Optional[Callable[..., Any]] = None,
    *,
    config_params: Optional[Sequence[str]] = None,
) -> Any:
    """
    Turn a modifier function into a middleware constructor.

    Works as a plain call or as a decorator, with or without arguments:

        optional = create_middleware(_optional)

        @create_middleware
        def required(message, value, obj, options, schema): ...

        @create_middleware(config_params=["low", "high"])
        def between(*args): ...

    Args:
        modifier: Function taking (*config, value, obj, options, schema)
        config_params: Explicit configuration parameter names. Overrides the
                       arity inferred from the signature; required for
                       modifiers with *args

    Returns:
        Middleware, or a decorator producing one when modifier is omitted

    Raises:
        MiddlewareDefinitionError: The modifier declares fewer than four
                                   positional parameters, or its arity cannot
                                   be determined
    """
    if modifier is None:
        return functools.partial(Middleware, config_params=config_params)
    return Middleware(modifier, config_params=config_params)
