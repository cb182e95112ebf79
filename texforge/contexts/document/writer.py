"""
LaTeX writer

Turns a Document into LaTeX source using a Jinja2 standalone template.
Inline and block nodes are rendered in Python; the template only supplies
the preamble and document skeleton.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, StrictUndefined, Template

from texforge.contexts.document.model import (
    BulletList,
    Code,
    CodeBlock,
    Document,
    Emph,
    Header,
    Image,
    Link,
    Para,
    RawBlock,
    Space,
    Str,
    Strong,
    stringify,
)

DEFAULT_TEMPLATE = r"""\documentclass{<<< documentclass >>>}
\usepackage[T1]{fontenc}
\usepackage{graphicx}
\usepackage{hyperref}
<%% for package in packages %%>\usepackage{<<< package >>>}
<%% endfor %%>
<%% if title %%>\title{<<< title >>>}
<%% endif %%><%% if author %%>\author{<<< author >>>}
<%% endif %%><%% if date %%>\date{<<< date >>>}
<%% endif %%>
\begin{document}
<%% if title %%>\maketitle
<%% endif %%><%% if toc %%>\tableofcontents
<%% endif %%>
<<< body >>>
\end{document}
"""

LATEX_SPECIAL_CHARS = {
    "\\": r"\textbackslash{}",
    "{": r"\{",
    "}": r"\}",
    "$": r"\$",
    "&": r"\&",
    "#": r"\#",
    "%": r"\%",
    "_": r"\_",
    "^": r"\textasciicircum{}",
    "~": r"\textasciitilde{}",
}

SECTION_COMMANDS = ["section", "subsection", "subsubsection", "paragraph", "subparagraph"]


@dataclass
class WriterOptions:
    """
    Options consumed by the LaTeX writer and the PDF pipeline.

    Attributes:
        source_directory: Directory or base URL for resolving relative image references
        table_of_contents: Emit \\tableofcontents (also enabled by document metadata)
        variables: Extra template variables (e.g. documentclass, packages)
        template: Optional path to a custom Jinja2 template using <<< >>> / <%% %%> delimiters
    """

    source_directory: str = "."
    table_of_contents: bool = False
    variables: Dict[str, Any] = field(default_factory=dict)
    template: Optional[Path] = None


def _environment() -> Environment:
    # Custom delimiters to avoid LaTeX brace conflicts
    return Environment(
        undefined=StrictUndefined,
        variable_start_string="<<<",
        variable_end_string=">>>",
        block_start_string="<%%",
        block_end_string="%%>",
        comment_start_string="<#",
        comment_end_string="#>",
        trim_blocks=False,
        lstrip_blocks=False,
        keep_trailing_newline=True,
    )


def load_template(template_path: Optional[Path] = None) -> Template:
    """Load the standalone template, falling back to the built-in one."""
    env = _environment()
    if template_path is None:
        return env.from_string(DEFAULT_TEMPLATE)
    return env.from_string(Path(template_path).read_text(encoding="utf-8"))


def escape_latex(text: str) -> str:
    """Escape LaTeX special characters in plain text."""
    return "".join(LATEX_SPECIAL_CHARS.get(char, char) for char in text)


def write_latex(options: WriterOptions, document: Document) -> str:
    """
    Render a Document as a standalone LaTeX file.

    Args:
        options: Writer options
        document: Document to render

    Returns:
        LaTeX source text
    """
    meta = document.meta
    body = "\n\n".join(_block(block) for block in document.blocks)

    context = {
        "documentclass": "article",
        "packages": [],
        **options.variables,
        "title": escape_latex(meta.title),
        "author": escape_latex(meta.author),
        "date": escape_latex(meta.date),
        "toc": options.table_of_contents or meta.toc,
        "body": body,
    }
    return load_template(options.template).render(**context)


def _inlines(content) -> str:
    return "".join(_inline(node) for node in content)


def _inline(node: Any) -> str:
    if isinstance(node, Str):
        return escape_latex(node.text)
    if isinstance(node, Space):
        return " "
    if isinstance(node, Emph):
        return f"\\emph{{{_inlines(node.content)}}}"
    if isinstance(node, Strong):
        return f"\\textbf{{{_inlines(node.content)}}}"
    if isinstance(node, Code):
        return f"\\texttt{{{escape_latex(node.text)}}}"
    if isinstance(node, Link):
        return f"\\href{{{node.url}}}{{{_inlines(node.content)}}}"
    if isinstance(node, Image):
        return _image(node)
    raise TypeError(f"Cannot render inline node: {node!r}")


def _image(node: Image) -> str:
    graphic = f"\\includegraphics[width=\\linewidth,keepaspectratio]{{{node.src}}}"
    # An image with a label becomes a captioned figure
    if node.content:
        return (
            "\\begin{figure}[htbp]\n\\centering\n"
            f"{graphic}\n\\caption{{{_inlines(node.content)}}}\n\\end{{figure}}"
        )
    return graphic


def _block(node: Any) -> str:
    if isinstance(node, Para):
        return _inlines(node.content)
    if isinstance(node, Header):
        command = SECTION_COMMANDS[min(max(node.level, 1), len(SECTION_COMMANDS)) - 1]
        label = re.sub(r"[^a-z0-9]+", "-", stringify(node.content).lower()).strip("-")
        return f"\\{command}{{{_inlines(node.content)}}}\\label{{sec:{label}}}"
    if isinstance(node, BulletList):
        items = "\n".join(
            "\\item " + "\n\n".join(_block(block) for block in item) for item in node.items
        )
        return f"\\begin{{itemize}}\n{items}\n\\end{{itemize}}"
    if isinstance(node, CodeBlock):
        return f"\\begin{{verbatim}}\n{node.text}\n\\end{{verbatim}}"
    if isinstance(node, RawBlock):
        # Raw blocks for other formats are dropped
        return node.text if node.format in ("latex", "tex") else ""
    raise TypeError(f"Cannot render block node: {node!r}")
