"""
Context-stack interpreter for pseudo-SCSS sources

Parses and evaluates in a single pass: tokens are consumed one at a time,
each one transitions the frame on top of the context stack and may append
to the HTML/CSS output. No syntax tree is built.

The stack starts as [EmptyFrame()]. Opening tokens ({, [, @each, @import,
css {) push or replace frames, closing tokens (}, ], ;) pop them. At end of
input the stack must be back to a single EmptyFrame.

Example:
    >>> out = source_interpret('a.nav[href="/"] { content: "Home"; }', 'index.scss')
    >>> out.html
    '<a class="nav" href="/">Home</a>'
"""

import json
import os
import re
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from ..config import appsettings
from ..models.frames import (
    AttributeFrame,
    AttributeStep,
    ContentFrame,
    ContentStep,
    EachFrame,
    EachLoopFrame,
    EachStep,
    EmptyFrame,
    Frame,
    ImportFrame,
    ImportStep,
    RawCssFrame,
    SelectorFrame,
)
from ..models.output import OutputBuffers
from ..models.tokens import Token, TokenKind
from .errors import StructureError
from .escape import html_escape
from .log import LOG
from .resources import FileResourceLoader, ResourceLoader
from .tokenizer import tokenize


def multiline_dedent(literal: str) -> str:
    """
    Decode a triple-quoted literal.

    The indentation width is taken from the first line after the opening
    quotes; every newline (with the whitespace before it and up to that many
    spaces/tabs after it) collapses into a single space, then the result is
    stripped.

    Example:
        >>> multiline_dedent('\"\"\"\\n  hello\\n  world\\n\"\"\"')
        'hello world'
    """
    contents = literal[3:-3]
    first_indent = re.search(r'\n([ \t]*)', contents)
    width = len(first_indent.group(1)) if first_indent else 0
    return re.sub(r'\s*\n[ \t]{0,%d}' % width, ' ', contents).strip()


def source_path_normalize(path: Any) -> Path:
    """Lexically normalize a source path so import chains compare equal"""
    return Path(os.path.normpath(str(path)))


class Interpreter:
    """
    Single-pass interpreter over a token stream

    Responsibilities:
    - Maintain the context stack and validate every token against it
    - Render selectors to opening/closing tags
    - Emit escaped inline text and raw CSS blocks
    - Delegate @import and @each to the driver

    Attributes:
        tokens: Current token source (swapped for a replay iterator while a
                loop body runs)
        variables: Current variable environment (swapped per loop iteration)
        output: Current output buffers (swapped per loop iteration)
        stack: Context frames, top of stack last
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        source_path: Any,
        loader: Optional[ResourceLoader] = None,
        variables: Optional[Mapping[str, Any]] = None,
        import_chain: Optional[Sequence[Path]] = None,
    ) -> None:
        """
        Args:
            tokens: Token stream of the document
            source_path: Path of the document; relative imports and data
                         files resolve against its directory
            loader: Resource loader (defaults to FileResourceLoader)
            variables: Inherited variable environment
            import_chain: Normalized paths of the documents importing this
                          one, itself included
        """
        self.tokens: Iterator[Token] = iter(tokens)
        self.source_path = source_path_normalize(source_path)
        self.loader: ResourceLoader = loader if loader is not None else FileResourceLoader()
        self.variables: Dict[str, Any] = dict(variables or {})
        self.import_chain = tuple(import_chain) if import_chain else (self.source_path,)
        self.stack: List[Frame] = [EmptyFrame()]
        self.output = OutputBuffers()

        self.handlers: Dict[TokenKind, Callable[[Token], None]] = {
            TokenKind.COMMENT: self.comment_handle,
            TokenKind.TAG_NAME: self.tagName_handle,
            TokenKind.CLASS_NAME: self.className_handle,
            TokenKind.ID_NAME: self.idName_handle,
            TokenKind.LBRACKET: self.lbracket_handle,
            TokenKind.EQUAL: self.equal_handle,
            TokenKind.RBRACKET: self.rbracket_handle,
            TokenKind.STRING: self.string_handle,
            TokenKind.MULTILINE_STRING: self.string_handle,
            TokenKind.WHITESPACE: self.whitespace_handle,
            TokenKind.LCURLY: self.lcurly_handle,
            TokenKind.RCURLY: self.rcurly_handle,
            TokenKind.SEMICOLON: self.semicolon_handle,
            TokenKind.COLON: self.colon_handle,
            TokenKind.EACH: self.each_handle,
            TokenKind.VARIABLE: self.variable_handle,
            TokenKind.SEPARATOR: self.separator_handle,
            TokenKind.IN: self.in_handle,
            TokenKind.IMPORT_FUNC: self.importFunc_handle,
            TokenKind.MAP_GET: self.mapGet_handle,
            TokenKind.IMPORT: self.import_handle,
            TokenKind.CSS_RAW_BEGIN: self.cssRawBegin_handle,
            TokenKind.ANYTHING_ELSE: self.anythingElse_handle,
        }

    @property
    def frame(self) -> Frame:
        """Frame on top of the context stack"""
        return self.stack[-1]

    def frame_replace(self, frame: Frame) -> None:
        self.stack[-1] = frame

    def run(self) -> OutputBuffers:
        """
        Consume every token and return the accumulated output.

        Raises:
            CompileError: On the first illegal token, unresolvable reference,
                          unreadable resource, or unbalanced input
        """
        for token in self.tokens:
            self.token_analyse(token)
        self.end_check()
        return self.output

    def token_analyse(self, token: Token) -> None:
        """Apply one token to the frame on top of the stack"""
        if appsettings.trace_tokens:
            LOG(f"{token.kind.value} {token.text!r} in {self.frame!r}", level=3)

        handler = self.handlers.get(token.kind)
        if handler is None:
            raise StructureError(f"{token.kind.value} is not valid in any context", token, self.frame)
        handler(token)

    def end_check(self) -> None:
        if len(self.stack) != 1 or not isinstance(self.stack[0], EmptyFrame):
            raise StructureError(
                f"Unexpected end of input in {self.source_path}: "
                f"unclosed block or unterminated statement",
                frame=self.frame,
            )

    # ------------------------------------------------------------------
    # Selectors
    # ------------------------------------------------------------------

    def selector_start(self) -> Frame:
        """Turn an EmptyFrame into a new SelectorFrame; other frames pass through"""
        if isinstance(self.frame, EmptyFrame):
            self.frame_replace(SelectorFrame())
        return self.frame

    def tagOpen_render(self, frame: SelectorFrame) -> str:
        """
        Render the opening tag of a selector.

        Attribute order: class (space-joined), id, then explicit attributes
        in source order. Valueless attributes render as bare names.

        Example:
            SelectorFrame(tag_name='a', classes=['x', 'y'], id='top',
                          attributes=[('href', '/'), ('hidden', None)])
            -> '<a class="x y" id="top" href="/" hidden>'
        """
        attributes = []
        if frame.classes:
            attributes.append(('class', ' '.join(frame.classes)))
        if frame.id is not None:
            attributes.append(('id', frame.id))
        attributes.extend(frame.attributes)

        rendered = ''.join(
            f' {name}' if value is None else f' {name}="{html_escape(value)}"'
            for name, value in attributes
        )
        return f'<{frame.tag_name or appsettings.default_tag_name}{rendered}>'

    def tagClose_render(self, frame: SelectorFrame) -> str:
        return f'</{frame.tag_name or appsettings.default_tag_name}>'

    def tagName_handle(self, token: Token) -> None:
        frame = self.frame
        if isinstance(frame, EmptyFrame):
            if token.text == appsettings.content_keyword:
                self.frame_replace(ContentFrame())
                return
            frame = self.selector_start()

        if isinstance(frame, SelectorFrame):
            if frame.tag_name is not None:
                hint = " (descendant selectors are not supported)" if frame.saw_whitespace else ""
                raise StructureError(f"Tag name already set to '{frame.tag_name}'{hint}", token, frame)
            frame.tag_name = token.text
        elif isinstance(frame, AttributeFrame):
            if frame.step is AttributeStep.NAME:
                frame.name = token.text
                frame.step = AttributeStep.POST_NAME
            elif frame.step is AttributeStep.VALUE:
                frame.value = token.text
                frame.step = AttributeStep.END
            else:
                raise StructureError("Attribute name or value already given", token, frame)
        else:
            raise StructureError("Invalid tag name context", token, frame)

    def className_handle(self, token: Token) -> None:
        frame = self.selector_start()
        if not isinstance(frame, SelectorFrame):
            raise StructureError("Class token should only be in selector", token, frame)
        frame.classes.append(token.text[1:])

    def idName_handle(self, token: Token) -> None:
        frame = self.selector_start()
        if not isinstance(frame, SelectorFrame):
            raise StructureError("ID token should only be in selector", token, frame)
        if frame.id is not None:
            raise StructureError(f"ID already set to '{frame.id}'", token, frame)
        frame.id = token.text[1:]

    def lbracket_handle(self, token: Token) -> None:
        frame = self.selector_start()
        if not isinstance(frame, SelectorFrame):
            raise StructureError("Left bracket should only be in selector", token, frame)
        self.stack.append(AttributeFrame())

    def equal_handle(self, token: Token) -> None:
        frame = self.frame
        if not isinstance(frame, AttributeFrame) or frame.step is not AttributeStep.POST_NAME:
            raise StructureError("Equal sign must follow an attribute name", token, frame)
        frame.step = AttributeStep.VALUE

    def rbracket_handle(self, token: Token) -> None:
        frame = self.frame
        if not isinstance(frame, AttributeFrame) or frame.step not in (
            AttributeStep.POST_NAME,
            AttributeStep.END,
        ):
            raise StructureError("Right bracket must follow an attribute name or value", token, frame)
        self.stack.pop()
        parent = self.frame
        if not isinstance(parent, SelectorFrame):
            raise StructureError("Attribute outside of a selector", token, parent)
        parent.attributes.append((frame.name, frame.value))

    # ------------------------------------------------------------------
    # Strings and statements
    # ------------------------------------------------------------------

    def string_decode(self, token: Token) -> str:
        if token.kind is TokenKind.MULTILINE_STRING:
            return multiline_dedent(token.text)
        try:
            return json.loads(token.text)
        except json.JSONDecodeError as e:
            raise StructureError(f"Invalid string literal: {e}", token, self.frame) from e

    def string_handle(self, token: Token) -> None:
        frame = self.frame
        if isinstance(frame, RawCssFrame):
            frame.buffer.append(token.text)
            return

        value = self.string_decode(token)
        if isinstance(frame, AttributeFrame) and frame.step is AttributeStep.VALUE:
            frame.value = value
            frame.step = AttributeStep.END
        elif isinstance(frame, ContentFrame) and frame.step is ContentStep.VALUE:
            self.output.html_append(html_escape(value))
            frame.step = ContentStep.END
        elif isinstance(frame, ImportFrame) and frame.step is ImportStep.PATH:
            from .driver import document_import
            document_import(self, value)
            frame.step = ImportStep.END
        else:
            raise StructureError("Invalid string context", token, frame)

    def whitespace_handle(self, token: Token) -> None:
        frame = self.frame
        if isinstance(frame, SelectorFrame):
            frame.saw_whitespace = True
        elif isinstance(frame, RawCssFrame):
            frame.buffer.append(' ')

    def comment_handle(self, token: Token) -> None:
        pass

    def lcurly_handle(self, token: Token) -> None:
        frame = self.frame
        if isinstance(frame, SelectorFrame):
            self.output.html_append(self.tagOpen_render(frame))
            self.stack.append(EmptyFrame())
        elif isinstance(frame, EachLoopFrame):
            self.stack.append(EmptyFrame())
        elif isinstance(frame, RawCssFrame):
            frame.buffer.append('{')
            frame.depth += 1
        else:
            raise StructureError("Left curly in invalid context", token, frame)

    def rcurly_handle(self, token: Token) -> None:
        frame = self.frame
        if isinstance(frame, RawCssFrame):
            frame.depth -= 1
            if frame.depth > 0:
                frame.buffer.append('}')
            else:
                self.output.css_append(''.join(frame.buffer).strip())
                self.frame_replace(EmptyFrame())
            return

        if not isinstance(frame, EmptyFrame):
            raise StructureError("Unterminated statement before '}'", token, frame)
        if len(self.stack) == 1:
            raise StructureError("Unbalanced '}' with no open block", token, frame)

        self.stack.pop()
        parent = self.frame
        if isinstance(parent, SelectorFrame):
            self.output.html_append(self.tagClose_render(parent))
            self.frame_replace(EmptyFrame())
        elif isinstance(parent, EachLoopFrame):
            # Loop body done; the driver pops the loop frame
            pass
        else:
            raise StructureError("Right curly's matching left curly in wrong context", token, parent)

    def semicolon_handle(self, token: Token) -> None:
        frame = self.frame
        if isinstance(frame, SelectorFrame):
            self.output.html_append(self.tagOpen_render(frame))
            self.frame_replace(EmptyFrame())
        elif isinstance(frame, ContentFrame) and frame.step is ContentStep.END:
            self.frame_replace(EmptyFrame())
        elif isinstance(frame, ImportFrame) and frame.step is ImportStep.END:
            self.frame_replace(EmptyFrame())
        elif isinstance(frame, RawCssFrame):
            frame.buffer.append(';')
        else:
            raise StructureError("Invalid semicolon context", token, frame)

    def colon_handle(self, token: Token) -> None:
        frame = self.frame
        if isinstance(frame, ContentFrame) and frame.step is ContentStep.AFTER_KEYWORD:
            frame.step = ContentStep.VALUE
        elif isinstance(frame, RawCssFrame):
            frame.buffer.append(':')
        else:
            raise StructureError(f"Colon must follow `{appsettings.content_keyword}`", token, frame)

    def import_handle(self, token: Token) -> None:
        if not isinstance(self.frame, EmptyFrame):
            raise StructureError("@import cannot be inside a context", token, self.frame)
        self.frame_replace(ImportFrame())

    def cssRawBegin_handle(self, token: Token) -> None:
        if not isinstance(self.frame, EmptyFrame):
            raise StructureError("css block cannot be inside a context", token, self.frame)
        self.frame_replace(RawCssFrame())

    def anythingElse_handle(self, token: Token) -> None:
        frame = self.frame
        if not isinstance(frame, RawCssFrame):
            raise StructureError("Raw CSS text outside a css block", token, frame)
        frame.buffer.append(token.text)

    # ------------------------------------------------------------------
    # @each
    # ------------------------------------------------------------------

    def each_handle(self, token: Token) -> None:
        if not isinstance(self.frame, EmptyFrame):
            raise StructureError("@each cannot be used inside a context", token, self.frame)
        self.frame_replace(EachFrame())

    def variable_handle(self, token: Token) -> None:
        frame = self.frame
        if not isinstance(frame, EachFrame) or frame.step is not EachStep.VARIABLES:
            raise StructureError("Variables must follow @each", token, frame)
        frame.variables.append(token.text)

    def separator_handle(self, token: Token) -> None:
        frame = self.frame
        if isinstance(frame, RawCssFrame):
            frame.buffer.append(',')
        elif not (isinstance(frame, EachFrame) and frame.variables):
            raise StructureError("Separator must follow an @each variable", token, frame)

    def in_handle(self, token: Token) -> None:
        frame = self.frame
        if not isinstance(frame, EachFrame) or frame.step is not EachStep.VARIABLES:
            raise StructureError("`in` should only be in @each", token, frame)
        if not frame.variables:
            raise StructureError("Need at least one variable before `in`", token, frame)
        frame.step = EachStep.EXPR

    def loopSource_check(self, token: Token) -> EachFrame:
        frame = self.frame
        if not isinstance(frame, EachFrame) or frame.step is not EachStep.EXPR:
            raise StructureError("Loop source must follow `@each ... in`", token, frame)
        return frame

    def importFunc_handle(self, token: Token) -> None:
        from .driver import dataSource_load, loop_run

        frame = self.loopSource_check(token)
        try:
            relative = json.loads(token.groups[0])
        except json.JSONDecodeError as e:
            raise StructureError(f"Invalid import path literal: {e}", token, frame) from e
        loop_run(self, frame, dataSource_load(self, relative))

    def mapGet_handle(self, token: Token) -> None:
        from .driver import loop_run
        from .substitution import key_unquote, mapValue_get

        frame = self.loopSource_check(token)
        name, raw_key = token.groups
        loop_run(self, frame, mapValue_get(self.variables, name, key_unquote(raw_key)))


def source_interpret(
    source: str,
    source_path: Any,
    loader: Optional[ResourceLoader] = None,
    variables: Optional[Mapping[str, Any]] = None,
    import_chain: Optional[Sequence[Path]] = None,
) -> OutputBuffers:
    """
    Tokenize and interpret one document.

    Args:
        source: Document text
        source_path: Path the document was read from (base for its imports)
        loader: Resource loader for imports and data files
        variables: Environment inherited from the importing document
        import_chain: Documents currently being imported (cycle detection)

    Returns:
        OutputBuffers with the document's HTML and CSS
    """
    return Interpreter(tokenize(source), source_path, loader, variables, import_chain).run()
