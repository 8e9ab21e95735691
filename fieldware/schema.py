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
Minimal schema compiler hosting field middlewares.

compile_schema() turns raw definitions into Schema objects with an async
validate(). Supported definitions:
  - Schema instance           -> returned unchanged (compilation is idempotent)
  - {"validate": fn} / fn     -> FunctionSchema, fn does all the work
  - {"message": predicate}    -> RuleSchema, every falsy predicate adds its message
  - {"field": definition}     -> FieldsSchema, each field compiled recursively

Every validate() accepts the same call forms:
  validate(value)
  validate(value, options)
  validate(value, obj, options)
  validate(value, obj=..., options=...)
"""

import asyncio
import inspect
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from loguru import logger

from fieldware.config import NOT_A_MAPPING_MESSAGE
from fieldware.errors import SchemaDefinitionError


class _Undefined:
    """Sentinel for a value that was never supplied."""

    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()

ValidationResult = Union[None, List[str], Dict[str, Any]]


def split_context(
    args: Tuple[Any, ...],
    obj: Optional[Dict[str, Any]] = None,
    options: Optional[Dict[str, Any]] = None,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Normalize the optional (obj, options) part of a validate() call.

    With a single extra positional argument it is the options, and obj
    defaults to an empty dict. The decision is made on argument count only.

    Args:
        args: Positional arguments following the value
        obj: obj passed by keyword
        options: options passed by keyword

    Returns:
        (obj, options) with missing or None entries replaced by fresh dicts

    Raises:
        TypeError: Too many positional arguments or a value given twice
    """
    if len(args) > 2:
        raise TypeError(
            f"validate() takes at most 3 positional arguments ({len(args) + 1} given)"
        )

    if len(args) == 1:
        positional_obj, positional_options = None, args[0]
        if options is not None:
            raise TypeError("validate() got multiple values for argument 'options'")
    elif len(args) == 2:
        positional_obj, positional_options = args
        if obj is not None or options is not None:
            raise TypeError("validate() got multiple values for 'obj' or 'options'")
    else:
        positional_obj, positional_options = None, None

    obj = obj if obj is not None else positional_obj
    options = options if options is not None else positional_options
    return (obj if obj is not None else {}), (options if options is not None else {})


async def resolve_result(result: Any) -> ValidationResult:
    """Await a result until it is no longer awaitable."""
    while inspect.isawaitable(result):
        result = await result
    return result


def is_valid(result: ValidationResult) -> bool:
    """True when a ValidationResult carries no errors."""
    return not result


class Schema:
    """
    Compiled schema.

    Subclasses implement _run(); validate() handles argument normalization.
    """

    async def validate(
        self,
        value: Any = UNDEFINED,
        *args: Any,
        obj: Optional[Dict[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> ValidationResult:
        obj, options = split_context(args, obj, options)
        return await self._run(value, obj, options)

    async def _run(
        self, value: Any, obj: Dict[str, Any], options: Dict[str, Any]
    ) -> ValidationResult:
        raise NotImplementedError


class FunctionSchema(Schema):
    """Schema whose validate() is a user-supplied function."""

    def __init__(self, fn: Callable[..., Any]):
        self.fn = fn

    async def validate(self, value: Any = UNDEFINED, *args: Any, **kwargs: Any) -> ValidationResult:
        # The wrapped function owns its own call convention
        return await resolve_result(self.fn(value, *args, **kwargs))

    def __repr__(self) -> str:
        return f"FunctionSchema({getattr(self.fn, '__qualname__', self.fn)!r})"


class RuleSchema(Schema):
    """Schema made of (message, predicate) rules, checked in declaration order."""

    def __init__(self, rules: Mapping):
        self.rules: List[Tuple[str, Callable[[Any], Any]]] = list(rules.items())

    async def _run(
        self, value: Any, obj: Dict[str, Any], options: Dict[str, Any]
    ) -> ValidationResult:
        errors = []
        for message, predicate in self.rules:
            if not await resolve_result(predicate(value)):
                errors.append(message)
        return errors or None

    def __repr__(self) -> str:
        return f"RuleSchema({[message for message, _ in self.rules]!r})"


class FieldsSchema(Schema):
    """Schema validating a mapping field by field."""

    def __init__(self, fields: Mapping):
        self.fields: Dict[Any, Schema] = {
            name: compile_schema(definition) for name, definition in fields.items()
        }

    async def _run(
        self, value: Any, obj: Dict[str, Any], options: Dict[str, Any]
    ) -> ValidationResult:
        if not isinstance(value, Mapping):
            return [NOT_A_MAPPING_MESSAGE]

        names = list(self.fields)
        tasks = [
            asyncio.ensure_future(
                self.fields[name].validate(value.get(name, UNDEFINED), value, options)
            )
            for name in names
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # One field failed: stop the others instead of leaving them running
            for task in tasks:
                task.cancel()
            raise
        errors = {name: result for name, result in zip(names, results) if not is_valid(result)}
        return errors or None

    def __repr__(self) -> str:
        return f"FieldsSchema({list(self.fields)!r})"


def compile_schema(definition: Any) -> Schema:
    """
    Compile a raw schema definition.

    A mapping whose values are all callables is a rule set (message ->
    predicate), following the message -> validator convention: each predicate
    receives the whole value. {"age": fn} is therefore a single rule with the
    message "age", not a field schema. Use {"age": {"validate": fn}} to
    validate the "age" field with fn.

    Args:
        definition: Schema, {"validate": fn}, callable, rule mapping or field mapping

    Returns:
        Compiled Schema (the same object when already compiled)

    Raises:
        SchemaDefinitionError: The definition has no supported shape
    """
    if isinstance(definition, Schema):
        return definition

    if isinstance(definition, Mapping):
        if list(definition) == ["validate"] and callable(definition["validate"]):
            return FunctionSchema(definition["validate"])

        values = list(definition.values())
        if all(callable(item) and not isinstance(item, Schema) for item in values):
            for message in definition:
                if not isinstance(message, str):
                    raise SchemaDefinitionError(
                        f"Rule messages must be strings, got {type(message).__name__}"
                    )
            return RuleSchema(definition)

        logger.debug("[Schema] Compiling field mapping: {}", list(definition))
        return FieldsSchema(definition)

    if callable(definition):
        return FunctionSchema(definition)

    raise SchemaDefinitionError(
        f"Cannot compile schema from {type(definition).__name__}: {definition!r}"
    )
