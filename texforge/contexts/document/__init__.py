"""
Document Context

Responsibilities:
- Immutable document model (blocks, inlines, image references)
- Generic bottom-up transform over the tree
- Loading documents from YAML
- Writing LaTeX source from a document

Owns: Document structure and its LaTeX rendering
Never: Touches the file system beyond reading sources, never runs TeX
"""

from texforge.contexts.document.loader import load_document
from texforge.contexts.document.model import Document, Image, bottom_up
from texforge.contexts.document.writer import WriterOptions, write_latex

__all__ = ["Document", "Image", "WriterOptions", "bottom_up", "load_document", "write_latex"]
