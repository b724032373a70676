"""
pseudoscss - SCSS-flavored markup compiler

Compiles selector shorthand, attribute lists, imports and @each loops into
an HTML document and a CSS stylesheet.
"""

__version__ = "1.0.0"

from .lib import Compiler, CompileError, source_interpret, LOG, state_connectToLogger

__all__ = ["Compiler", "CompileError", "source_interpret", "LOG", "state_connectToLogger", "__version__"]
