"""
Output accumulator models

Type-safe structures for the HTML/CSS text produced by one interpreter pass.
"""

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class OutputBuffers:
    """
    HTML and CSS accumulated by one interpreter pass or loop iteration

    Buffers only ever grow. Nested passes (imports, loop iterations) own
    their own OutputBuffers, which the caller splices in document order.

    HTML appended as `resolved` (a finished loop iteration) is recorded in
    `resolved_spans`; enclosing loops skip those ranges when they resolve
    interpolation markers, so substituted values are never scanned twice.

    Example:
        >>> out = OutputBuffers()
        >>> out.html_append('<p>')
        >>> out.merge(OutputBuffers(html='hi', css='p{}'))
        >>> out.html, out.css
        ('<p>hi', 'p{}')
    """
    html: str = ""
    css: str = ""
    resolved_spans: List[Tuple[int, int]] = field(default_factory=list, compare=False, repr=False)

    def html_append(self, text: str, resolved: bool = False) -> None:
        if resolved and text:
            self.resolved_spans.append((len(self.html), len(self.html) + len(text)))
        self.html += text

    def css_append(self, text: str) -> None:
        self.css += text

    def merge(self, other: "OutputBuffers") -> None:
        """Append another pass's HTML and CSS after our own"""
        offset = len(self.html)
        self.resolved_spans.extend((start + offset, end + offset) for start, end in other.resolved_spans)
        self.html += other.html
        self.css += other.css


@dataclass
class CompileResult:
    """
    Result of compiling one top-level document

    Attributes:
        html: Compiled HTML (without doctype or trailer)
        css: Compiled CSS (without trailer)
        source: Path of the compiled source, as given
    """
    html: str
    css: str
    source: str
