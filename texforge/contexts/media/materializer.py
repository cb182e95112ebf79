"""
Image materialization

Makes every image reference in a document resolvable by the TeX engine.
References that already name a local file are left alone; the rest are
fetched, written into the compilation directory under a name derived from
the original locator, and the reference is pointed at the new file.
Unfetchable references produce a warning and are left unchanged, so a single
missing image degrades the output instead of aborting the build.
"""

import base64
import hashlib
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Optional, Tuple
from urllib.parse import urlparse

from texforge.contexts.document.model import Document, Image, bottom_up
from texforge.contexts.media.fetcher import FetchError, extension_from_mime_type, fetch_item
from texforge.contexts.media.logger import _log_debug, _log_warning

# Keep generated names well under the usual 255-byte file name limit
MAX_STEM_LENGTH = 200

Fetcher = Callable[[Optional[str], str], Tuple[bytes, Optional[str]]]


def media_filename(src: str, extension: str) -> str:
    """
    Deterministic file name for a fetched locator.

    The stem is the URL-safe base64 encoding of the locator, so distinct
    locators never collide and the original can be recovered from the name.
    Locators too long to encode fall back to their SHA-256 digest.

    Args:
        src: Original image locator
        extension: Extension including the leading dot (e.g. ".png")

    Returns:
        File name such as "aHR0cHM6Ly9leGFtcGxlLm9yZy9hLnBuZw==.png"
    """
    stem = base64.urlsafe_b64encode(src.encode("utf-8")).decode("ascii")
    if len(stem) > MAX_STEM_LENGTH:
        stem = hashlib.sha256(src.encode("utf-8")).hexdigest()
    return f"{stem}{extension}"


def locator_extension(src: str) -> str:
    """Extension already present on a locator's path (URL query/fragment ignored)."""
    if "://" not in src:
        return PurePosixPath(src).suffix
    try:
        return PurePosixPath(urlparse(src).path).suffix
    except ValueError:
        return ""


def _is_local_file(src: str) -> bool:
    try:
        return Path(src).is_file()
    except (OSError, ValueError):
        # Invalid paths (embedded NULs, names too long) cannot be local files
        return False


def handle_image(
    base: Optional[str], work_dir: Path, image: Image, fetch: Fetcher = fetch_item
) -> Image:
    """
    Materialize one image reference.

    Args:
        base: Source directory or base URL for relative locators
        work_dir: Directory receiving fetched files
        image: The image node
        fetch: Fetch collaborator returning (contents, MIME type)

    Returns:
        The image unchanged, or a copy whose src points at the written file
    """
    src = image.src
    if _is_local_file(src):
        return image

    try:
        contents, mime_type = fetch(base, src)
    except FetchError as e:
        _log_warning(f"Could not find image `{src}', skipping... ({e.reason})")
        return image

    if contents is None or not mime_type:
        _log_warning(f"Could not find image `{src}', skipping... (no MIME type)")
        return image

    extension = extension_from_mime_type(mime_type) or locator_extension(src)
    if not extension:
        _log_warning(f"Could not find image `{src}', skipping... (unknown type {mime_type})")
        return image

    target = Path(work_dir) / media_filename(src, extension)
    # Same locator seen twice in one document: the file is already there
    if not target.exists():
        target.write_bytes(contents)
    _log_debug(f"Materialized {src} -> {target.name} ({mime_type}, {len(contents)} bytes)")

    return Image(content=image.content, src=str(target), title=image.title)


def handle_images(
    base: Optional[str], work_dir: Path, document: Document, fetch: Fetcher = fetch_item
) -> Document:
    """
    Materialize every image reference in a document.

    Args:
        base: Source directory or base URL for relative locators
        work_dir: Directory receiving fetched files
        document: Document to rewrite
        fetch: Fetch collaborator returning (contents, MIME type)

    Returns:
        A new document with resolvable image locators
    """

    def visit(node: Any) -> Any:
        if isinstance(node, Image):
            return handle_image(base, work_dir, node, fetch=fetch)
        return node

    return bottom_up(visit, document)
