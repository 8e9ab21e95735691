# -*- coding: utf-8 -*-

"""
Shared fixtures for Fieldware tests.
"""

from typing import Any, List

import pytest

from fieldware.schema import compile_schema


@pytest.fixture
def any_schema():
    """Schema accepting every value."""
    return compile_schema({"validate": lambda value, *args, **kwargs: None})


@pytest.fixture
def positive_schema():
    """Rule schema rejecting values that are not positive integers."""
    return compile_schema({
        "must be an integer": lambda v: isinstance(v, int),
        "must be positive": lambda v: isinstance(v, int) and v > 0,
    })


@pytest.fixture
def call_log() -> List[Any]:
    """List collecting the arguments every recording modifier receives."""
    return []


@pytest.fixture
def recording_modifier(call_log):
    """Zero-config modifier that records its arguments and returns None."""

    def record(value, obj, options, schema):
        call_log.append((value, obj, options, schema))
        return None

    return record
