"""
Import and iteration driver

Orchestrates the recursive parts of interpretation:
- @import "path";   compile another document with the current bindings
                    and splice its HTML/CSS in place
- @each ... { }     buffer the loop body once, then replay it through the
                    same interpreter for every entry of the loop source,
                    each time with a child environment and fresh buffers

Loop bodies are pulled from the interpreter's *current* token source, so a
nested @each inside a replayed body buffers its own body from the replay.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Sequence

from ..models.frames import EachFrame, EachLoopFrame, EmptyFrame
from ..models.output import OutputBuffers
from ..models.tokens import Token, TokenKind
from .errors import DestructureError, ImportCycleError, StructureError, ValueTypeError
from .log import LOG
from .substitution import substitutions_resolve

if TYPE_CHECKING:
    from .interpreter import Interpreter

# Token kinds that open a brace counted by loopBody_buffer
_OPENING_KINDS = (TokenKind.LCURLY, TokenKind.CSS_RAW_BEGIN)


def path_resolve(source_path: Path, relative: str) -> Path:
    """
    Resolve `relative` against the directory of `source_path`.

    Example:
        >>> path_resolve(Path('site/index.scss'), '../shared/nav.scss')
        PosixPath('shared/nav.scss')
    """
    return Path(os.path.normpath(Path(source_path).parent / relative))


def document_import(interpreter: "Interpreter", relative: str) -> None:
    """
    Compile an imported document and splice its output into the importer.

    The imported document inherits the importer's current variables and
    resolves its own imports relative to its own directory.

    Raises:
        ImportCycleError: The document is already being imported
        ResourceError: The document cannot be read
    """
    from .interpreter import source_interpret

    path = path_resolve(interpreter.source_path, relative)
    if path in interpreter.import_chain:
        chain = ' -> '.join(str(p) for p in (*interpreter.import_chain, path))
        raise ImportCycleError(f"Import cycle detected: {chain}")

    LOG(f"Importing {path}", level=2)
    text = interpreter.loader.text_read(path)
    imported = source_interpret(
        text,
        path,
        loader=interpreter.loader,
        variables=interpreter.variables,
        import_chain=(*interpreter.import_chain, path),
    )
    interpreter.output.merge(imported)


def dataSource_load(interpreter: "Interpreter", relative: str) -> Any:
    """Read the structured data file named by import("...") in an @each clause"""
    path = path_resolve(interpreter.source_path, relative)
    return interpreter.loader.structured_read(path)


def entries_normalize(collection: Any) -> List[Any]:
    """
    Turn a loop source into an ordered list of entries.

    Lists iterate as they are; mappings iterate as [key, value] pairs in
    insertion order.

    Raises:
        ValueTypeError: The source is neither a list nor a mapping
    """
    if isinstance(collection, (list, tuple)):
        return list(collection)
    if isinstance(collection, Mapping):
        return [[key, value] for key, value in collection.items()]
    raise ValueTypeError(
        f"Cannot loop over a non-list/map value of type {type(collection).__name__}: {collection!r}"
    )


def bindings_make(names: Sequence[str], entries: Sequence[Any]) -> List[Dict[str, Any]]:
    """
    Build the per-iteration bindings for `@each names in entries`.

    A single name binds the whole entry. Several names destructure each
    entry positionally; extra positions are ignored. Every entry is checked
    before any iteration runs.

    Raises:
        DestructureError: An entry is not a list, or has fewer positions
                          than there are names

    Example:
        >>> bindings_make(['$k', '$v'], [['a', 1], ['b', 2]])
        [{'$k': 'a', '$v': 1}, {'$k': 'b', '$v': 2}]
    """
    if len(names) == 1:
        return [{names[0]: entry} for entry in entries]

    bindings = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, (list, tuple)):
            raise DestructureError(
                f"Cannot destructure {', '.join(names)} from non-list entry {index}: {entry!r}"
            )
        if len(entry) < len(names):
            raise DestructureError(
                f"Destructuring {len(names)} variables from entry {index}, "
                f"which has only {len(entry)} items"
            )
        bindings.append(dict(zip(names, entry)))
    return bindings


def loopBody_buffer(interpreter: "Interpreter") -> List[Token]:
    """
    Pull the loop body from the interpreter's token source.

    Collects tokens up to and including the `}` that balances the body's
    opening brace. `css {` counts as an opening brace.

    Raises:
        StructureError: Input ends before the body is balanced
    """
    body: List[Token] = []
    depth = 0
    for token in interpreter.tokens:
        body.append(token)
        if token.kind in _OPENING_KINDS:
            depth += 1
        elif token.kind is TokenKind.RCURLY:
            depth -= 1
            if depth <= 0:
                return body
    raise StructureError(
        "Input ended inside an @each body; unbalanced curly braces", frame=interpreter.frame
    )


def loop_run(interpreter: "Interpreter", frame: EachFrame, collection: Any) -> None:
    """
    Execute an @each loop.

    For every entry: push an EachLoopFrame, replay the buffered body with a
    child environment and fresh output buffers, resolve interpolation
    markers in the iteration's HTML, then append its HTML and CSS to the
    caller's output. The EachFrame is replaced by an EmptyFrame afterwards.
    """
    entries = entries_normalize(collection)
    body = loopBody_buffer(interpreter)
    bindings = bindings_make(frame.variables, entries)
    LOG(f"@each {', '.join(frame.variables)}: {len(bindings)} iterations", level=2)

    outer_tokens = interpreter.tokens
    outer_output = interpreter.output
    outer_variables = interpreter.variables
    depth = len(interpreter.stack)

    try:
        for binding in bindings:
            child = {**outer_variables, **binding}
            iteration = OutputBuffers()
            interpreter.tokens = iter(body)
            interpreter.output = iteration
            interpreter.variables = child
            interpreter.stack.append(EachLoopFrame())

            for token in interpreter.tokens:
                interpreter.token_analyse(token)

            if len(interpreter.stack) != depth + 1 or not isinstance(interpreter.frame, EachLoopFrame):
                raise StructureError("@each body did not close cleanly", frame=interpreter.frame)
            interpreter.stack.pop()

            outer_output.html_append(
                substitutions_resolve(iteration.html, child, iteration.resolved_spans), resolved=True
            )
            outer_output.css_append(iteration.css)
    finally:
        interpreter.tokens = outer_tokens
        interpreter.output = outer_output
        interpreter.variables = outer_variables

    interpreter.frame_replace(EmptyFrame())
