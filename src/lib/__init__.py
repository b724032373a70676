"""
pseudoscss - SCSS-flavored markup compiler

Compiles selector shorthand, attribute lists, imports and @each loops into
an HTML document and a CSS stylesheet.
"""

__version__ = "1.0.0"

from .tokenizer import tokenize
from .interpreter import Interpreter, source_interpret
from .compiler import Compiler
from .resources import ResourceLoader, FileResourceLoader
from .errors import (
    CompileError,
    LexError,
    StructureError,
    UndefinedReferenceError,
    ValueTypeError,
    DestructureError,
    ImportCycleError,
    ResourceError,
)
from .log import LOG, state_connectToLogger

__all__ = [
    "tokenize",
    "Interpreter",
    "source_interpret",
    "Compiler",
    "ResourceLoader",
    "FileResourceLoader",
    "CompileError",
    "LexError",
    "StructureError",
    "UndefinedReferenceError",
    "ValueTypeError",
    "DestructureError",
    "ImportCycleError",
    "ResourceError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
