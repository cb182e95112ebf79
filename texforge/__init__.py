"""
texforge - TeX-to-PDF production engine

Drives an external TeX engine (pdflatex, lualatex, xelatex) to turn a document
model into a PDF, with deterministic multi-pass runs, local materialization of
remote images, and readable error excerpts pulled out of the TeX log.

Architecture:
- Document Context: Immutable document model, YAML loading, LaTeX writer
- Media Context: Fetching image references and writing them beside the source
- Rendering Context: Process running, multi-pass compilation, diagnostics
"""

__version__ = "0.1.0"
