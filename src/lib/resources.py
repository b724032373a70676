"""
Resource access for imports and @each data sources

The interpreter never touches the file system directly; it asks a
ResourceLoader for the text of an imported document or the parsed
contents of a structured data file. FileResourceLoader is the default,
reading from disk and parsing data files as YAML 1.2 (a superset of JSON).
"""

import re
import yaml
from pathlib import Path
from typing import Any, Optional, Protocol

from .errors import ResourceError
from .log import LOG

BOOL_TAG = 'tag:yaml.org,2002:bool'
INT_TAG = 'tag:yaml.org,2002:int'
FLOAT_TAG = 'tag:yaml.org,2002:float'
TIMESTAMP_TAG = 'tag:yaml.org,2002:timestamp'
VALUE_TAG = 'tag:yaml.org,2002:value'


class CoreSchemaLoader(yaml.SafeLoader):
    """
    SafeLoader resolving plain scalars with the YAML 1.2 core schema

    PyYAML implements YAML 1.1, where yes/no/on/off are booleans, 1e3 is a
    string, 010 is octal and dates become date objects. Under the core
    schema only true/false are booleans, 1e3 is a float, 0o10 is octal and
    dates stay strings.

    Example:
        >>> yaml.load('[yes, on, true, 1e3, 010, 2024-01-01]', Loader=CoreSchemaLoader)
        ['yes', 'on', True, 1000.0, 10, '2024-01-01']
    """

    def construct_yaml_int(self, node: yaml.ScalarNode) -> int:
        value = self.construct_scalar(node)
        if value.startswith('0x'):
            return int(value[2:], 16)
        if value.startswith('0o'):
            return int(value[2:], 8)
        return int(value)


# Keep the 1.1 null and merge resolvers, replace the rest
CoreSchemaLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag not in (BOOL_TAG, INT_TAG, FLOAT_TAG, TIMESTAMP_TAG, VALUE_TAG)
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
CoreSchemaLoader.add_implicit_resolver(
    BOOL_TAG,
    re.compile(r'^(?:true|True|TRUE|false|False|FALSE)$'),
    list('tTfF'),
)
CoreSchemaLoader.add_implicit_resolver(
    INT_TAG,
    re.compile(r'^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$'),
    list('-+0123456789'),
)
CoreSchemaLoader.add_implicit_resolver(
    FLOAT_TAG,
    re.compile(
        r'^(?:[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?'
        r'|[-+]?\.(?:inf|Inf|INF)|\.(?:nan|NaN|NAN))$'
    ),
    list('-+0123456789.'),
)
CoreSchemaLoader.add_constructor(INT_TAG, CoreSchemaLoader.construct_yaml_int)


class ResourceLoader(Protocol):
    """Capability consumed by the interpreter"""

    def text_read(self, path: Path) -> str:
        """Return the text of the source document at `path`"""
        ...

    def structured_read(self, path: Path) -> Any:
        """Return the parsed list/mapping stored at `path`"""
        ...


class FileResourceLoader:
    """
    Reads sources and YAML data files from the local file system.

    Args:
        encoding: Text encoding, defaults to appsettings.source_encoding
    """

    def __init__(self, encoding: Optional[str] = None) -> None:
        if encoding is None:
            from ..config import appsettings
            encoding = appsettings.source_encoding
        self.encoding = encoding

    def text_read(self, path: Path) -> str:
        try:
            text = Path(path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ResourceError(f"Cannot read source {path}: {e}") from e
        LOG(f"Read {len(text)} characters from {path}", level=2)
        return text

    def structured_read(self, path: Path) -> Any:
        try:
            with open(path, 'r', encoding=self.encoding) as f:
                data: Any = yaml.load(f, Loader=CoreSchemaLoader)
        except yaml.YAMLError as e:
            raise ResourceError(f"Failed to parse data file {path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ResourceError(f"Cannot read data file {path}: {e}") from e
        LOG(f"Loaded data file {path}", level=2)
        return data
