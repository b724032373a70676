"""
Context frame models for the interpreter

Each frame kind is its own dataclass holding only the state that kind needs.
The interpreter keeps a stack of these; the top frame decides which token
kinds are legal next.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


class AttributeStep(Enum):
    """Progress through a [name=value] attribute"""
    NAME = "name"
    POST_NAME = "post-name"
    VALUE = "value"
    END = "end"


class ContentStep(Enum):
    """Progress through a content: "text"; statement"""
    AFTER_KEYWORD = "after-content"
    VALUE = "value"
    END = "end"


class ImportStep(Enum):
    """Progress through an @import "path"; statement"""
    PATH = "path"
    END = "end"


class EachStep(Enum):
    """Progress through an @each $a, $b in <source> clause"""
    VARIABLES = "variables"
    EXPR = "expr"


@dataclass
class EmptyFrame:
    """Awaiting the next construct (top level or element body)"""


@dataclass
class SelectorFrame:
    """
    Selector being built (div.note#main[title="x"])

    Attributes:
        tag_name: Explicit tag name, None means the configured default
        classes: Class names in encounter order
        id: Element id, set at most once
        attributes: Explicit (name, value) pairs; value None renders a bare name
        saw_whitespace: Whitespace was seen inside the selector
    """
    tag_name: Optional[str] = None
    classes: List[str] = field(default_factory=list)
    id: Optional[str] = None
    attributes: List[Tuple[str, Optional[str]]] = field(default_factory=list)
    saw_whitespace: bool = False


@dataclass
class AttributeFrame:
    """Bracketed attribute nested in a selector"""
    name: Optional[str] = None
    value: Optional[str] = None
    step: AttributeStep = AttributeStep.NAME


@dataclass
class ContentFrame:
    step: ContentStep = ContentStep.AFTER_KEYWORD


@dataclass
class ImportFrame:
    step: ImportStep = ImportStep.PATH


@dataclass
class EachFrame:
    """@each clause collecting the names it binds"""
    variables: List[str] = field(default_factory=list)
    step: EachStep = EachStep.VARIABLES


@dataclass
class EachLoopFrame:
    """Marks the scope of one loop-body replay"""


@dataclass
class RawCssFrame:
    """
    Verbatim css { ... } block

    Attributes:
        depth: Open brace count, the block closes when it reaches 0
        buffer: Normalized CSS text collected so far
    """
    depth: int = 1
    buffer: List[str] = field(default_factory=list)


Frame = Union[
    EmptyFrame,
    SelectorFrame,
    AttributeFrame,
    ContentFrame,
    ImportFrame,
    EachFrame,
    EachLoopFrame,
    RawCssFrame,
]
