"""
HTML escaping for attribute values, text content and substituted values
"""

import math
import re
from typing import Any, Mapping

from .errors import ValueTypeError

ESCAPE_MAP: Mapping[str, str] = {
    '<': '&lt;',
    '>': '&gt;',
    '&': '&amp;',
    '"': '&quot;',
}

_ESCAPE_PATTERN = re.compile(r'[<>&"]')


def html_escape(text: str) -> str:
    """
    Replace reserved HTML characters with entities.

    Single quotes are left alone so that interpolation markers such as
    #{map.get($item, 'name')} pass through unchanged.

    Example:
        >>> html_escape('<a href="x">Tom & Jerry</a>')
        '&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&lt;/a&gt;'
    """
    return _ESCAPE_PATTERN.sub(lambda m: ESCAPE_MAP[m.group(0)], text)


def scalar_render(value: Any) -> str:
    """
    Render a scalar bound value as text (unescaped).

    Booleans use their YAML spelling. Whole-number floats drop the
    fraction, so 10.0 and 1e3 render as 10 and 1000. Lists, mappings and
    null have no text form and raise ValueTypeError.

    Example:
        >>> [scalar_render(v) for v in (1.0, 2.5, float('inf'), True)]
        ['1', '2.5', 'Infinity', 'true']
    """
    if value is None:
        raise ValueTypeError("Cannot substitute a null value")
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return float_render(value)
    if isinstance(value, (list, tuple, dict)):
        raise ValueTypeError(f"Cannot substitute a {type(value).__name__} value: {value!r}")
    return str(value)


def float_render(value: float) -> str:
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'Infinity' if value > 0 else '-Infinity'
    if value.is_integer():
        return str(int(value))
    return str(value)
