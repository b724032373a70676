#!/usr/bin/env python3
"""
pseudoscss - SCSS-flavored markup compiler

Compiles a small SCSS-like markup language into an HTML document and a CSS
stylesheet. Selectors become elements, `content: "..."` becomes text,
`css { ... }` blocks are collected into the stylesheet, `@import` splices
other documents in place and `@each` repeats a block over YAML data.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Usage:
    pseudoscss inputdir/ outputdir/ --inputFile index.html.scss

    index.html and style.css are written to outputdir/.

Examples:
    # Basic compilation
    pseudoscss home-page/ site/ --inputFile index.html.scss

    # Custom output names
    pseudoscss . out/ --inputFile index.html.scss --htmlFile home.html --cssFile home.css

    # Verbose output, with a token trace when PSEUDOSCSS_TRACE_TOKENS=true
    pseudoscss . out/ --inputFile index.html.scss -vvv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .lib import Compiler, CompileError, __version__, LOG, state_connectToLogger
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="pseudoscss - compile SCSS-flavored markup to HTML and CSS",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Input source file (relative to inputdir)"
)

parser.add_argument(
    "--htmlFile", default="index.html", type=str, help="HTML output file (relative to outputdir)"
)

parser.add_argument(
    "--cssFile", default="style.css", type=str, help="CSS output file (relative to outputdir)"
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the source document
            - htmlOutputFile / cssOutputFile: Resolved output paths
            - envOK: True if environment is valid

    Exits:
        1 if the input file is not found
    """
    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.exists():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    state.htmlOutputFile = state.outputdir / state.htmlFile
    state.cssOutputFile = state.outputdir / state.cssFile
    for output_file in (state.htmlOutputFile, state.cssOutputFile):
        output_file.parent.mkdir(parents=True, exist_ok=True)
    LOG(f"Output files: {state.htmlOutputFile}, {state.cssOutputFile}", level=2)

    state.envOK = True
    return state


def source_compile(inputstate: ProgramState) -> ProgramState:
    """
    Compile the source document (and everything it imports) in memory.

    Returns:
        ProgramState with added field:
            - compileResult: CompileResult holding the HTML and CSS

    Exits:
        1 on any compilation error; nothing is written in that case
    """
    state = inputstate.copy()

    try:
        compiler = Compiler(str(state.inputSourceFile))
        state.compileResult = compiler.compile()
    except CompileError as e:
        print(f"Compilation error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    return state


def output_write(inputstate: ProgramState) -> ProgramState:
    """
    Write the HTML and CSS documents.

    Returns:
        ProgramState with added field:
            - outputWritten: True once both files exist

    Exits:
        1 if compileResult is missing
    """
    state = inputstate.copy()

    if state.compileResult is None:
        print("Error: No compiled output available", file=sys.stderr)
        sys.exit(1)

    html, css = Compiler(str(state.inputSourceFile)).documents_build(state.compileResult)
    state.htmlOutputFile.write_text(html, encoding="utf-8")
    state.cssOutputFile.write_text(css, encoding="utf-8")
    LOG(f"Wrote {state.htmlOutputFile} and {state.cssOutputFile}", level=2)

    state.outputWritten = True
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display compilation results (terminal pipeline stage).
    """
    state: ProgramState = inputstate.copy()
    if not state.outputWritten:
        print("Error: Compilation failed", file=sys.stderr)
        sys.exit(1)

    LOG("✓ Compilation successful!", level=1)
    LOG(f"  HTML: {state.htmlOutputFile}", level=1)
    LOG(f"  CSS:  {state.cssOutputFile}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="pseudoscss - SCSS-flavored markup compiler",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - compile a pseudo-SCSS document to HTML and CSS.

    Orchestrates the pipeline:
        1. env_check: Validate paths and environment
        2. source_compile: Interpret the source (imports and loops included)
        3. output_write: Write the HTML and CSS documents
        4. results_report: Display results to user
    """
    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, source_compile, output_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
