"""
Interpolation marker resolution

Resolves the two marker forms left in HTML by a loop body:
    #{$var}                     -> escaped value of $var
    #{map.get($var, 'key')}     -> escaped value of $var['key']

Markers are resolved left to right against the bindings of one loop
iteration. Lookups are type-checked: keyed access needs a mapping.
"""

import json
import re
from typing import Any, Mapping, Sequence, Tuple

from .errors import UndefinedReferenceError, ValueTypeError
from .escape import html_escape, scalar_render
from .grammar import MAP_GET_PATTERN, VARIABLE_PATTERN

SUBSTITUTION_PATTERN = re.compile(
    r'#\{(?:(' + VARIABLE_PATTERN + r')|' + MAP_GET_PATTERN + r')\}'
)


def key_unquote(raw: str) -> str:
    r"""
    Decode the body of a single-quoted key literal.

    The body is re-quoted as a JSON string so JSON escapes apply; \' becomes
    a plain quote and bare double quotes are escaped first.

    Example:
        >>> key_unquote(r"it\'s")
        "it's"
    """
    requoted = re.sub(r'"|\\\'', lambda m: '\\"' if m.group(0) == '"' else "'", raw)
    try:
        return json.loads(f'"{requoted}"')
    except json.JSONDecodeError as e:
        raise ValueTypeError(f"Invalid key literal '{raw}': {e}") from e


def variable_get(variables: Mapping[str, Any], name: str) -> Any:
    """Return the value bound to `name` (including the leading $)."""
    if name not in variables:
        raise UndefinedReferenceError(f"{name} not defined")
    return variables[name]


def mapValue_get(variables: Mapping[str, Any], name: str, key: str) -> Any:
    """
    Keyed lookup `map.get(name, key)` against the bound value of `name`.

    Raises:
        UndefinedReferenceError: `name` unbound or `key` missing
        ValueTypeError: bound value is not a mapping
    """
    mapping = variable_get(variables, name)
    if not isinstance(mapping, Mapping):
        raise ValueTypeError(
            f"{name} is a {type(mapping).__name__}, not a map; cannot get '{key}'"
        )
    if key not in mapping:
        raise UndefinedReferenceError(f"'{key}' not in map {name}")
    return mapping[key]


def substitutions_resolve(
    text: str,
    variables: Mapping[str, Any],
    resolved_spans: Sequence[Tuple[int, int]] = (),
) -> str:
    """
    Replace every interpolation marker in `text` with its escaped value.

    Args:
        text: HTML fragment produced by one loop iteration
        variables: Bindings of that iteration
        resolved_spans: Ordered (start, end) ranges of `text` already
                        resolved by a nested loop; copied through unchanged

    Returns:
        Fragment with all markers resolved

    Example:
        >>> substitutions_resolve('<b>#{$name}</b>', {'$name': 'A&B'})
        '<b>A&amp;B</b>'
        >>> substitutions_resolve('#{$a}|#{$b}', {'$a': 1}, [(6, 11)])
        '1|#{$b}'
    """

    def marker_resolve(match: re.Match) -> str:
        variable, map_name, raw_key = match.groups()
        if variable:
            value = variable_get(variables, variable)
        else:
            value = mapValue_get(variables, map_name, key_unquote(raw_key))
        return html_escape(scalar_render(value))

    pieces = []
    position = 0
    for start, end in resolved_spans:
        pieces.append(SUBSTITUTION_PATTERN.sub(marker_resolve, text[position:start]))
        pieces.append(text[start:end])
        position = end
    pieces.append(SUBSTITUTION_PATTERN.sub(marker_resolve, text[position:]))
    return ''.join(pieces)
