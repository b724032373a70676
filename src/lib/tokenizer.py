"""
Context-sensitive tokenizer driven by a stack of grammars

The tokenizer never skips input: at every position it tries the rules of
the grammar on top of the stack, in order, anchored at that position. The
first match wins, may pop the current grammar and/or push another one, and
is emitted as a Token. Whitespace and comments are ordinary tokens.

Example:
    >>> [t.kind.value for t in tokenize('p.note;')]
    ['tagName', 'className', 'semicolon']
"""

from typing import Iterator, List, Mapping, Optional

from ..models.tokens import Grammar, Token
from .errors import LexError
from .grammar import GRAMMARS, ROOT
from .log import LOG

# Unconsumed input shown in lex errors
ERROR_CONTEXT_CHARS = 80


def tokenize(
    source: str,
    initial: str = ROOT,
    grammars: Optional[Mapping[str, Grammar]] = None,
) -> Iterator[Token]:
    """
    Lazily split `source` into tokens.

    Args:
        source: Raw source text
        initial: Name of the grammar at the bottom of the stack
        grammars: Grammar table used to resolve pushes (defaults to GRAMMARS)

    Yields:
        Tokens covering the whole input, with no gaps

    Raises:
        LexError: No rule matches at the current position, or a rule pops
                  the last grammar off the stack
    """
    table = GRAMMARS if grammars is None else grammars
    stack: List[Grammar] = [table[initial]]
    position = 0
    line = 1

    while position < len(source):
        if not stack:
            raise LexError(
                f"Grammar stack exhausted at line {line}\n"
                f"Remaining: {source[position:position + ERROR_CONTEXT_CHARS]!r}"
            )

        grammar = stack[-1]
        for rule in grammar.rules:
            matched = rule.match(source, position)
            if matched is None:
                continue

            text, groups = matched
            if rule.pop:
                stack.pop()
            if rule.push:
                stack.append(table[rule.push])
                LOG(f"Entering {rule.push} grammar at line {line}", level=3)

            yield Token(kind=rule.kind, text=text, groups=groups, line=line)
            position += len(text)
            line += text.count('\n')
            break
        else:
            raise LexError(
                f"Cannot tokenize from here (line {line}, {grammar.name} grammar)\n"
                f"Remaining: {source[position:position + ERROR_CONTEXT_CHARS]!r}"
            )
