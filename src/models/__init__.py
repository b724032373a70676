"""
Models package for pseudoscss

Contains data structures and type definitions for the compilation pipeline.
"""

from .state import ProgramState, pipeline
from .tokens import TokenKind, Token, Rule, Grammar
from .frames import (
    AttributeStep,
    ContentStep,
    ImportStep,
    EachStep,
    EmptyFrame,
    SelectorFrame,
    AttributeFrame,
    ContentFrame,
    ImportFrame,
    EachFrame,
    EachLoopFrame,
    RawCssFrame,
    Frame,
)
from .output import OutputBuffers, CompileResult

__all__ = [
    "ProgramState",
    "pipeline",
    "TokenKind",
    "Token",
    "Rule",
    "Grammar",
    "AttributeStep",
    "ContentStep",
    "ImportStep",
    "EachStep",
    "EmptyFrame",
    "SelectorFrame",
    "AttributeFrame",
    "ContentFrame",
    "ImportFrame",
    "EachFrame",
    "EachLoopFrame",
    "RawCssFrame",
    "Frame",
    "OutputBuffers",
    "CompileResult",
]
