# -*- coding: utf-8 -*-

"""
Unit tests for the schema compiler.
"""

import asyncio
import pickle
from unittest.mock import patch

import pytest

from fieldware.errors import SchemaDefinitionError
from fieldware.schema import (
    UNDEFINED,
    FieldsSchema,
    FunctionSchema,
    RuleSchema,
    Schema,
    compile_schema,
    is_valid,
    resolve_result,
    split_context,
)


class TestUndefined:
    """Tests for the UNDEFINED sentinel."""

    def test_is_singleton_and_falsy(self):
        """What it does: UNDEFINED is unique, falsy and distinct from None."""
        assert type(UNDEFINED)() is UNDEFINED
        assert not UNDEFINED
        assert UNDEFINED is not None
        assert repr(UNDEFINED) == "UNDEFINED"

    def test_survives_pickling(self):
        """What it does: unpickling yields the same sentinel object."""
        assert pickle.loads(pickle.dumps(UNDEFINED)) is UNDEFINED


class TestSplitContext:
    """Tests for (obj, options) normalization."""

    def test_no_arguments_gives_fresh_empty_dicts(self):
        """
        What it does: Verifies both defaults are new empty dicts.
        Purpose: Calls must never share mutable defaults.
        """
        first = split_context(())
        second = split_context(())

        assert first == ({}, {})
        assert first[0] is not second[0]
        assert first[1] is not second[1]

    def test_single_argument_is_options(self):
        """
        What it does: Verifies validate(value, X) treats X as options.
        Purpose: The two-argument form is decided by count, not by type.
        """
        options = {"strict": True}
        obj, resolved_options = split_context((options,))

        assert obj == {}
        assert resolved_options is options

    def test_two_arguments_are_obj_and_options(self):
        """What it does: validate(value, obj, options) keeps both in order."""
        obj, options = {"a": 1}, {"strict": True}
        assert split_context((obj, options)) == (obj, options)

    def test_keywords(self):
        """What it does: keyword obj/options are used as given."""
        obj, options = {"a": 1}, {"strict": True}
        assert split_context((), obj=obj, options=options) == (obj, options)

    def test_single_positional_with_keyword_obj(self):
        """What it does: obj by keyword combines with positional options."""
        assert split_context(({"o": 1},), obj={"a": 1}) == ({"a": 1}, {"o": 1})

    def test_none_becomes_empty_dict(self):
        """What it does: explicit None entries fall back to empty dicts."""
        assert split_context((None, None)) == ({}, {})

    def test_too_many_positional_arguments(self):
        """What it does: more than three positional arguments is a TypeError."""
        with pytest.raises(TypeError):
            split_context(({}, {}, {}))

    def test_options_given_twice(self):
        """What it does: positional and keyword options together is a TypeError."""
        with pytest.raises(TypeError):
            split_context(({},), options={})


class TestResolveResult:
    """Tests for awaitable flattening."""

    @pytest.mark.asyncio
    async def test_plain_value(self):
        """What it does: a plain value resolves to itself."""
        assert await resolve_result(["error"]) == ["error"]

    @pytest.mark.asyncio
    async def test_nested_awaitables_are_flattened(self):
        """
        What it does: Verifies a coroutine returning a coroutine is fully awaited.
        Purpose: Modifiers often return schema.validate(...) from an async function.
        """
        async def inner():
            return ["deep"]

        async def outer():
            return inner()

        assert await resolve_result(outer()) == ["deep"]

    @pytest.mark.asyncio
    async def test_future(self):
        """What it does: a resolved future resolves to its result."""
        future = asyncio.get_running_loop().create_future()
        future.set_result(None)
        assert await resolve_result(future) is None


class TestIsValid:
    """Tests for is_valid()."""

    def test_empty_results_are_valid(self):
        """What it does: None, [] and {} mean valid."""
        assert is_valid(None)
        assert is_valid([])
        assert is_valid({})

    def test_messages_are_invalid(self):
        """What it does: any message means invalid."""
        assert not is_valid(["bad"])
        assert not is_valid({"name": ["bad"]})


class TestCompileSchema:
    """Tests for compile_schema() dispatch."""

    def test_compiled_schema_is_returned_unchanged(self, any_schema):
        """
        What it does: Verifies compilation is idempotent.
        Purpose: Middlewares may receive raw or compiled schemas.
        """
        assert compile_schema(any_schema) is any_schema

    def test_validate_mapping_becomes_function_schema(self):
        """What it does: {"validate": fn} compiles to FunctionSchema."""
        def fn(value, *args, **kwargs):
            return None

        schema = compile_schema({"validate": fn})
        assert isinstance(schema, FunctionSchema)
        assert schema.fn is fn

    def test_bare_callable_becomes_function_schema(self):
        """What it does: a callable compiles to FunctionSchema."""
        assert isinstance(compile_schema(lambda value: None), FunctionSchema)

    def test_callable_mapping_becomes_rule_schema(self):
        """What it does: message -> predicate mappings compile to RuleSchema."""
        schema = compile_schema({"must be truthy": bool})
        assert isinstance(schema, RuleSchema)

    def test_nested_mapping_becomes_fields_schema(self):
        """What it does: mappings of definitions compile to FieldsSchema recursively."""
        schema = compile_schema({"name": {"required": bool}, "age": {"positive": lambda v: v > 0}})

        assert isinstance(schema, FieldsSchema)
        assert all(isinstance(field, RuleSchema) for field in schema.fields.values())

    @pytest.mark.asyncio
    async def test_all_callable_mapping_is_rule_set_not_fields(self):
        """
        What it does: Verifies {"age": fn} is a rule set applied to the whole value.
        Purpose: Callable values mean message -> predicate rules, never fields.
        """
        seen = []

        def check(value):
            seen.append(value)
            return False

        schema = compile_schema({"age": check})
        result = await schema.validate({"age": 3})

        print(f"Compiled: {schema!r}, predicate saw: {seen}")
        assert isinstance(schema, RuleSchema)
        assert seen == [{"age": 3}]
        assert result == ["age"]

    @pytest.mark.asyncio
    async def test_validate_mapping_per_field(self):
        """What it does: {"age": {"validate": fn}} validates only the field value."""
        seen = []

        def check(value, *args, **kwargs):
            seen.append(value)
            return None

        schema = compile_schema({"age": {"validate": check}})
        await schema.validate({"age": 3})

        assert isinstance(schema, FieldsSchema)
        assert seen == [3]

    def test_unsupported_definition_raises(self):
        """What it does: definitions of unknown shape raise SchemaDefinitionError."""
        with pytest.raises(SchemaDefinitionError):
            compile_schema(42)

    def test_non_string_rule_message_raises(self):
        """What it does: rule keys must be messages."""
        with pytest.raises(SchemaDefinitionError):
            compile_schema({1: bool})

    def test_nested_error_passes_through(self):
        """What it does: errors in a field definition surface unchanged."""
        with pytest.raises(SchemaDefinitionError):
            compile_schema({"name": {"first": 42}})


class TestSchemaBase:
    """Tests for the Schema base class."""

    @pytest.mark.asyncio
    async def test_run_is_abstract(self):
        """What it does: the bare base class cannot validate."""
        with pytest.raises(NotImplementedError):
            await Schema().validate(1)


class TestFunctionSchema:
    """Tests for FunctionSchema.validate()."""

    @pytest.mark.asyncio
    async def test_passes_call_through(self):
        """
        What it does: Verifies the wrapped function receives the exact call.
        Purpose: The function owns its own argument handling.
        """
        seen = []

        def fn(*args, **kwargs):
            seen.append((args, kwargs))
            return ["bad"]

        schema = compile_schema({"validate": fn})
        result = await schema.validate(1, {"o": 1}, options={"x": 1})

        assert result == ["bad"]
        assert seen == [((1, {"o": 1}), {"options": {"x": 1}})]

    @pytest.mark.asyncio
    async def test_awaits_async_function(self):
        """What it does: async validate functions are awaited."""
        async def fn(value, *args, **kwargs):
            return ["async bad"]

        assert await compile_schema(fn).validate(1) == ["async bad"]


class TestRuleSchema:
    """Tests for RuleSchema.validate()."""

    @pytest.mark.asyncio
    async def test_valid_value_resolves_none(self, positive_schema):
        """What it does: passing every rule resolves None."""
        assert await positive_schema.validate(5) is None

    @pytest.mark.asyncio
    async def test_failing_rules_in_declaration_order(self, positive_schema):
        """What it does: each falsy predicate adds its message, in order."""
        assert await positive_schema.validate("x") == ["must be an integer", "must be positive"]
        assert await positive_schema.validate(-1) == ["must be positive"]

    @pytest.mark.asyncio
    async def test_async_predicate(self):
        """What it does: awaitable predicate results are awaited."""
        async def is_known(value):
            return value in ("a", "b")

        schema = compile_schema({"unknown value": is_known})

        assert await schema.validate("a") is None
        assert await schema.validate("z") == ["unknown value"]

    @pytest.mark.asyncio
    async def test_predicate_error_propagates(self):
        """What it does: exceptions from predicates are not swallowed."""
        schema = compile_schema({"positive": lambda v: v > 0})

        with pytest.raises(TypeError):
            await schema.validate(UNDEFINED)


class TestFieldsSchema:
    """Tests for FieldsSchema.validate()."""

    @pytest.mark.asyncio
    async def test_valid_mapping(self):
        """What it does: a mapping satisfying every field resolves None."""
        schema = compile_schema({"age": {"positive": lambda v: v > 0}})
        assert await schema.validate({"age": 3}) is None

    @pytest.mark.asyncio
    async def test_only_failing_fields_reported(self):
        """
        What it does: Verifies the result maps failing fields to their errors.
        Purpose: Valid fields stay out of the error report.
        """
        schema = compile_schema({
            "age": {"positive": lambda v: v > 0},
            "name": {"non-empty": lambda v: bool(v)},
        })

        result = await schema.validate({"age": -1, "name": "Ann"})
        print(f"Result: {result}")
        assert result == {"age": ["positive"]}

    @pytest.mark.asyncio
    async def test_missing_field_is_undefined_and_obj_is_parent(self):
        """
        What it does: Verifies missing fields arrive as UNDEFINED with the parent as obj.
        Purpose: optional/required rely on UNDEFINED for absent fields.
        """
        seen = []

        def record(value, obj, options):
            seen.append((value, obj, options))
            return None

        schema = compile_schema({"nickname": {"validate": record}})
        parent = {"other": 1}
        await schema.validate(parent, {"strict": True})

        assert seen == [(UNDEFINED, parent, {"strict": True})]

    @pytest.mark.asyncio
    async def test_non_mapping_value(self):
        """What it does: non-mapping values resolve the not-a-mapping message."""
        schema = compile_schema({"age": {"positive": lambda v: v > 0}})
        assert await schema.validate(5) == ["Expected a mapping"]

    @pytest.mark.asyncio
    async def test_not_a_mapping_message_is_configurable(self):
        """What it does: the not-a-mapping message comes from configuration."""
        schema = compile_schema({"age": {"positive": lambda v: v > 0}})

        with patch("fieldware.schema.NOT_A_MAPPING_MESSAGE", "Must be an object"):
            assert await schema.validate([]) == ["Must be an object"]

    @pytest.mark.asyncio
    async def test_failing_field_cancels_siblings(self):
        """
        What it does: Verifies a raising field cancels the fields still running.
        Purpose: No field validation is left running after the call has failed.
        """
        cancelled = asyncio.Event()

        async def slow(value, *args, **kwargs):
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return None

        async def explode(value, *args, **kwargs):
            raise ValueError("boom")

        schema = compile_schema({"slow": {"validate": slow}, "broken": {"validate": explode}})

        with pytest.raises(ValueError, match="boom"):
            await schema.validate({})

        await asyncio.wait_for(cancelled.wait(), timeout=1)
        assert cancelled.is_set()
