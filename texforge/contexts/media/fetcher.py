"""
Media fetching

Resolves an image locator against a source directory or base URL and returns
its bytes together with a MIME type. Remote resources are fetched over HTTP(S)
with requests; everything else is read from the local file system.
"""

import base64
import mimetypes
import os
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import unquote, urljoin, urlparse

import requests
from dotenv import load_dotenv

load_dotenv()

FETCH_TIMEOUT = float(os.getenv("TEXFORGE_FETCH_TIMEOUT", "30"))

REMOTE_SCHEMES = {"http", "https"}

# mimetypes.guess_extension is platform dependent for these (".jpe", ".ai", ...)
PREFERRED_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/tiff": ".tiff",
    "image/svg+xml": ".svg",
    "image/bmp": ".bmp",
    "image/webp": ".webp",
    "application/pdf": ".pdf",
    "application/postscript": ".eps",
    "application/eps": ".eps",
    "image/eps": ".eps",
    "image/x-eps": ".eps",
}


class FetchError(Exception):
    """
    Exception raised when an image reference cannot be fetched.

    Attributes:
        src: The locator that was requested
        reason: Why fetching failed
    """

    def __init__(self, src: str, reason: str):
        self.src = src
        self.reason = reason
        super().__init__(f"Could not fetch '{src}': {reason}")


def extension_from_mime_type(mime_type: Optional[str]) -> Optional[str]:
    """
    Map a MIME type to a file extension (with leading dot).

    Args:
        mime_type: MIME type, parameters allowed (e.g. "image/png; charset=binary")

    Returns:
        Extension such as ".png", or None if the type is unknown
    """
    if not mime_type:
        return None

    mime_type = mime_type.split(";")[0].strip().lower()
    if mime_type in PREFERRED_EXTENSIONS:
        return PREFERRED_EXTENSIONS[mime_type]
    return mimetypes.guess_extension(mime_type)


def is_remote(locator: str) -> bool:
    """Whether a locator is an absolute HTTP(S) URL."""
    return urlparse(locator).scheme.lower() in REMOTE_SCHEMES


def fetch_item(base: Optional[str], src: str) -> Tuple[bytes, Optional[str]]:
    """
    Fetch the contents of an image reference.

    Resolution order:
    - data: URIs are decoded in place
    - absolute http(s) URLs are downloaded
    - relative locators under a URL base are joined with it and downloaded
    - anything else is read from disk, relative to ``base`` when not absolute

    Args:
        base: Source directory or base URL (may be None or empty)
        src: Image locator from the document

    Returns:
        Tuple of (contents, MIME type or None)

    Raises:
        FetchError: If the resource cannot be obtained
    """
    if src.startswith("data:"):
        return _decode_data_uri(src)

    try:
        if is_remote(src):
            url = src
        elif base and is_remote(base):
            url = urljoin(base, src)
        else:
            url = None
        parsed = urlparse(src)
    except ValueError as e:
        # urlparse rejects some malformed netlocs, e.g. an unclosed IPv6 bracket
        raise FetchError(src, str(e)) from e

    if url is not None:
        return _fetch_url(src, url)

    if parsed.scheme == "file":
        path = Path(unquote(parsed.path))
    else:
        path = Path(src)
        if not path.is_absolute() and base:
            path = Path(base) / path

    if not path.is_file():
        raise FetchError(src, f"no such file: {path}")

    try:
        contents = path.read_bytes()
    except OSError as e:
        raise FetchError(src, str(e)) from e

    mime_type, _ = mimetypes.guess_type(path.name)
    return contents, mime_type


def _fetch_url(src: str, url: str) -> Tuple[bytes, Optional[str]]:
    try:
        response = requests.get(url, timeout=FETCH_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(src, str(e)) from e

    content_type = response.headers.get("Content-Type", "").split(";")[0].strip()
    if not content_type:
        content_type, _ = mimetypes.guess_type(urlparse(url).path)
    return response.content, content_type or None


def _decode_data_uri(src: str) -> Tuple[bytes, Optional[str]]:
    # data:[<mediatype>][;base64],<data>
    header, sep, payload = src[len("data:"):].partition(",")
    if not sep:
        raise FetchError(src[:40], "malformed data URI")

    params = header.split(";")
    mime_type = params[0] or "text/plain"
    try:
        if "base64" in params[1:]:
            contents = base64.b64decode(payload, validate=True)
        else:
            contents = unquote(payload).encode("utf-8")
    except ValueError as e:
        raise FetchError(src[:40], f"bad data URI payload: {e}") from e

    return contents, mime_type
