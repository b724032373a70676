"""
Grammars for the pseudo-SCSS source language

Three lexical modes:
    - root: selectors, strings, statements and directives
    - each-clause: entered on @each, reads `$a, $b in` then pops back
    - raw-css: entered on `css {`, captures CSS as opaque runs; pushes
      itself on every `{` and pops on every `}` so nested braces balance

Interpolation markers (#{$var} and #{map.get($var, 'key')}) are accepted
inside tag, class and id names; they are resolved later, when a loop binds
concrete values.
"""

import re
from typing import Dict

from ..models.tokens import Grammar, Rule, TokenKind

ROOT = "root"
EACH_CLAUSE = "each-clause"
RAW_CSS = "raw-css"

VARIABLE_PATTERN = r'\$[\w-]+'
QUOTED_KEY_PATTERN = r"'((?:[^'\r\n\\]|\\.)*)'"
MAP_GET_PATTERN = (
    r'map\s*\.\s*get\s*\(\s*(' + VARIABLE_PATTERN + r')\s*,\s*' + QUOTED_KEY_PATTERN + r'\s*\)'
)
# Same as MAP_GET_PATTERN without capture groups, for use inside names
_MAP_GET_INLINE = (
    r"map\s*\.\s*get\s*\(\s*" + VARIABLE_PATTERN + r"\s*,\s*'(?:[^'\r\n\\]|\\.)*'\s*\)"
)
INTERPOLATION_INLINE = r'#\{(?:' + VARIABLE_PATTERN + r'|' + _MAP_GET_INLINE + r')\}'
NAME_PATTERN = r'(?:[\w-]|' + INTERPOLATION_INLINE + r')+'

DOUBLE_QUOTED = r'"(?:[^"\r\n\\]|\\.)*"'
SINGLE_QUOTED = r"'(?:[^'\r\n\\]|\\.)*'"


def _rule(kind: TokenKind, pattern: str, regex: bool = True, **options) -> Rule:
    return Rule(kind=kind, pattern=re.compile(pattern) if regex else pattern, **options)


ROOT_GRAMMAR = Grammar(ROOT, (
    _rule(TokenKind.MULTILINE_STRING, r'"""(?:[^"\\]|\\.)*(?:"{1,2}(?:[^"\\]|\\.)+)*"""'),
    _rule(TokenKind.STRING, DOUBLE_QUOTED),
    _rule(TokenKind.COMMENT, r'//.*'),
    _rule(TokenKind.CSS_RAW_BEGIN, r'css\s*\{', push=RAW_CSS),
    _rule(TokenKind.LPAREN, '(', regex=False),
    _rule(TokenKind.RPAREN, ')', regex=False),
    _rule(TokenKind.LBRACKET, '[', regex=False),
    _rule(TokenKind.RBRACKET, ']', regex=False),
    _rule(TokenKind.LCURLY, '{', regex=False),
    _rule(TokenKind.RCURLY, '}', regex=False),
    _rule(TokenKind.EQUAL, '=', regex=False),
    _rule(TokenKind.SEMICOLON, ';', regex=False),
    _rule(TokenKind.COLON, ':', regex=False),
    _rule(TokenKind.IMPORT, '@import', regex=False),
    _rule(TokenKind.IMPORT_FUNC, r'import\s*\(\s*(' + DOUBLE_QUOTED + r')\s*\)'),
    _rule(TokenKind.EACH, '@each', regex=False, push=EACH_CLAUSE),
    _rule(TokenKind.MAP_GET, MAP_GET_PATTERN),
    _rule(TokenKind.ID_NAME, r'#' + NAME_PATTERN),
    _rule(TokenKind.CLASS_NAME, r'\.' + NAME_PATTERN),
    _rule(TokenKind.TAG_NAME, NAME_PATTERN),
    _rule(TokenKind.WHITESPACE, r'\s+'),
))

EACH_CLAUSE_GRAMMAR = Grammar(EACH_CLAUSE, (
    _rule(TokenKind.IN, 'in', regex=False, pop=True),
    _rule(TokenKind.VARIABLE, VARIABLE_PATTERN),
    _rule(TokenKind.SEPARATOR, ',', regex=False),
    _rule(TokenKind.WHITESPACE, r'\s+'),
))

RAW_CSS_GRAMMAR = Grammar(RAW_CSS, (
    _rule(TokenKind.COMMENT, r'//.*'),
    _rule(TokenKind.STRING, DOUBLE_QUOTED + '|' + SINGLE_QUOTED),
    _rule(TokenKind.LCURLY, r'\s*\{\s*', push=RAW_CSS),
    _rule(TokenKind.RCURLY, r'\s*\}\s*', pop=True),
    _rule(TokenKind.SEMICOLON, r'\s*;\s*'),
    _rule(TokenKind.COLON, r'\s*:\s*'),
    _rule(TokenKind.SEPARATOR, r'\s*,\s*'),
    _rule(TokenKind.WHITESPACE, r'\s+'),
    _rule(TokenKind.ANYTHING_ELSE, r'[^{};:,\s]+'),
))

GRAMMARS: Dict[str, Grammar] = {
    grammar.name: grammar
    for grammar in (ROOT_GRAMMAR, EACH_CLAUSE_GRAMMAR, RAW_CSS_GRAMMAR)
}
