"""
Shared utilities for texforge.

Common functionality used across contexts:
- Logger setup with provenance
- PDF inspection
"""

from texforge.utils.pdf_processing import page_count

__all__ = ["page_count"]
