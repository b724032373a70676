"""
Token and grammar models

Defines the closed set of token kinds, the Token record produced by the
tokenizer, and the Rule/Grammar records that drive it.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple, Union


class TokenKind(Enum):
    """
    Kinds of tokens recognized by the grammars

    Values mirror the names used in diagnostics and token traces.
    """
    MULTILINE_STRING = "multilineString"   # """..."""
    STRING = "string"                      # "..."
    COMMENT = "comment"                    # // ...
    CSS_RAW_BEGIN = "cssRawBegin"          # css {
    LPAREN = "lparen"
    RPAREN = "rparen"
    LBRACKET = "lbracket"
    RBRACKET = "rbracket"
    LCURLY = "lcurly"
    RCURLY = "rcurly"
    EQUAL = "equal"
    SEMICOLON = "semicolon"
    COLON = "colon"
    IMPORT = "import"                      # @import
    IMPORT_FUNC = "importFunc"             # import("data.yaml")
    EACH = "each"                          # @each
    MAP_GET = "mapGet"                     # map.get($var, 'key')
    ID_NAME = "idName"                     # #name
    CLASS_NAME = "className"               # .name
    TAG_NAME = "tagName"                   # name
    WHITESPACE = "whitespace"
    IN = "in"                              # each-clause only
    VARIABLE = "variable"                  # $name, each-clause only
    SEPARATOR = "separator"                # , (each-clause and raw css)
    ANYTHING_ELSE = "anythingElse"         # raw css only


@dataclass(frozen=True)
class Token:
    """
    A single lexical token

    Attributes:
        kind: Token kind from the grammar rule that matched
        text: Exact matched source text
        groups: Regex capture groups (empty for literal rules)
        line: 1-based source line where the token starts

    Example:
        For source 'import("data.yaml")' at line 3:
        Token(kind=TokenKind.IMPORT_FUNC, text='import("data.yaml")',
              groups=('"data.yaml"',), line=3)
    """
    kind: TokenKind
    text: str
    groups: Tuple[Optional[str], ...] = ()
    line: int = 1


@dataclass(frozen=True)
class Rule:
    """
    One lexical rule of a grammar

    Attributes:
        kind: Kind of token emitted when the rule matches
        pattern: Literal prefix or compiled regular expression
        pop: Pop the current grammar after matching
        push: Name of a grammar to push after matching
    """
    kind: TokenKind
    pattern: Union[str, Pattern[str]]
    pop: bool = False
    push: Optional[str] = None

    def match(self, text: str, position: int) -> Optional[Tuple[str, Tuple[Optional[str], ...]]]:
        """
        Match this rule at exactly `position` (never searching ahead).

        Returns:
            (matched_text, groups) or None. Empty matches count as no match.
        """
        if isinstance(self.pattern, str):
            if self.pattern and text.startswith(self.pattern, position):
                return self.pattern, ()
            return None

        found = self.pattern.match(text, position)
        if found is None or found.end() == position:
            return None
        return found.group(0), found.groups()


@dataclass(frozen=True)
class Grammar:
    """
    A named, ordered list of rules (one lexical mode)

    Rules are tried in declaration order; the first match wins.
    """
    name: str
    rules: Tuple[Rule, ...]
