"""
Compiler for pseudo-SCSS documents

Top-level entry point: reads a source document, interprets it, and builds
the final HTML and CSS documents.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ..models.output import CompileResult
from .interpreter import source_interpret
from .log import LOG
from .resources import FileResourceLoader, ResourceLoader


class Compiler:
    """
    Compiles one pseudo-SCSS document to HTML and CSS

    Responsibilities:
    - Read the top-level source through the resource loader
    - Run the interpreter (which handles imports and loops recursively)
    - Wrap the results with doctype and generation comments

    Every call to compile() starts from scratch; nothing is cached between
    runs, so compiling the same inputs twice gives identical output.
    """

    def __init__(
        self,
        source_path: str,
        loader: Optional[ResourceLoader] = None,
        variables: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize compiler

        Args:
            source_path: Path of the top-level document
            loader: Resource loader (defaults to FileResourceLoader)
            variables: Initial variable environment (empty by default)
        """
        self.source_path = source_path
        self.loader: ResourceLoader = loader if loader is not None else FileResourceLoader()
        self.variables = dict(variables or {})

    def compile(self) -> CompileResult:
        """
        Compile the source document.

        Returns:
            CompileResult with the bare HTML and CSS

        Raises:
            CompileError: Any lexing, structural, reference, type or
                          resource error (no partial output)
        """
        LOG(f"Compiling {self.source_path}", level=1)
        source = self.loader.text_read(Path(self.source_path))
        return self.source_compile(source)

    def source_compile(self, source: str) -> CompileResult:
        """Compile already-loaded source text as if read from self.source_path"""
        output = source_interpret(
            source,
            self.source_path,
            loader=self.loader,
            variables=self.variables,
        )
        LOG(f"Compiled {len(output.html)} characters of HTML, {len(output.css)} of CSS", level=2)
        return CompileResult(html=output.html, css=output.css, source=str(self.source_path))

    def documents_build(self, result: CompileResult) -> Tuple[str, str]:
        """
        Build the final HTML and CSS documents

        The HTML is prefixed with the doctype and both documents end with a
        comment naming the source they were generated from.

        Returns:
            (html_document, css_document)
        """
        from ..config import appsettings

        html = appsettings.doctype + result.html + appsettings.htmlFooter_make(result.source)
        css = result.css + appsettings.cssFooter_make(result.source)
        return html, css
