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
Parameter name introspection for diagnostic messages.

The names returned here only ever end up in error text. Nothing in the
validation path branches on them.
"""

import ast
import inspect
import textwrap
from typing import Any, Callable, List, Optional

_NAMED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


def _strip_comments(source: str) -> str:
    """Drop `#` comments while leaving `#` inside string literals alone."""
    lines = []
    for line in source.splitlines():
        quote: Optional[str] = None
        escaped = False
        cut = len(line)
        for index, char in enumerate(line):
            if quote:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == quote:
                    quote = None
            elif char in ("'", '"'):
                quote = char
            elif char == "#":
                cut = index
                break
        lines.append(line[:cut])
    return "\n".join(lines)


def _names_from_arguments(arguments: ast.arguments) -> List[str]:
    positional = [arg.arg for arg in arguments.posonlyargs + arguments.args]
    keyword_only = [arg.arg for arg in arguments.kwonlyargs]
    return positional + keyword_only


def param_names_from_source(source: str) -> List[str]:
    """
    Extract parameter names from the text of a function or lambda.

    Comments are removed first. The first `def` or `lambda` found in the text
    supplies the parameter list. Variadic `*args` / `**kwargs` are not reported.

    Args:
        source: Source text, e.g. from inspect.getsource()

    Returns:
        Ordered parameter names, or [] when nothing can be parsed
    """
    text = textwrap.dedent(_strip_comments(source)).strip()
    if not text:
        return []

    try:
        tree = ast.parse(text)
    except SyntaxError:
        # Lambdas pulled out of a larger expression rarely parse on their own
        start = text.find("lambda")
        if start < 0:
            return []
        try:
            tree = ast.parse(text[start:].split(":", 1)[0] + ": None")
        except SyntaxError:
            return []

    for node in ast.walk(tree):
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda)):
            return _names_from_arguments(node.args)
    return []


def param_names(fn: Callable[..., Any]) -> List[str]:
    """
    Return the declared parameter names of a callable, in order.

    Bound methods and functools.partial objects report only their remaining
    parameters. Never raises.

    Args:
        fn: Any callable

    Returns:
        Ordered parameter names, or [] if they cannot be recovered
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        signature = None

    if signature is not None:
        return [
            name
            for name, parameter in signature.parameters.items()
            if parameter.kind in _NAMED_KINDS
        ]

    try:
        source = inspect.getsource(fn)
    except (OSError, TypeError):
        return []
    return param_names_from_source(source)
