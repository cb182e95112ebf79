"""
Media Context

Responsibilities:
- Resolves image locators against a source directory or base URL
- Fetches remote and relative images
- Writes them into the compilation directory and rewrites references

Owns: Image fetching and naming of materialized files
Never: Deletes or overwrites files, aborts a build over a missing image
"""

from texforge.contexts.media.fetcher import FetchError, extension_from_mime_type, fetch_item
from texforge.contexts.media.materializer import handle_image, handle_images, media_filename

__all__ = [
    "FetchError",
    "extension_from_mime_type",
    "fetch_item",
    "handle_image",
    "handle_images",
    "media_filename",
]
