"""PDF inspection helpers for produced artifacts."""

import io
from pathlib import Path
from typing import Optional, Union

from PyPDF2 import PdfReader


def page_count(pdf: Union[bytes, Path]) -> Optional[int]:
    """Get page count from PDF bytes or a PDF file, or None if unreadable."""
    try:
        source = io.BytesIO(pdf) if isinstance(pdf, bytes) else str(pdf)
        reader = PdfReader(source)
        return len(reader.pages)
    except Exception:
        # Fake engines and truncated output are not valid PDFs
        return None
