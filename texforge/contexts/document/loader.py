"""
YAML document loading.

Builds a Document from a YAML file. Example source:

    meta:
      title: Field Report
      author: Hubert Farnsworth
      toc: true
    blocks:
      - header: Findings
        level: 1
      - para:
          - "The probe returned "
          - emph: "intact"
          - image: {src: https://example.org/probe.png, label: Probe, title: The probe}
      - bullets:
          - "first item"
          - ["second ", {strong: item}]
      - code: "print('hello')"
      - raw: "\\newpage"
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from omegaconf import OmegaConf

from texforge.contexts.document.model import (
    BulletList,
    Code,
    CodeBlock,
    Document,
    Emph,
    Header,
    Image,
    Link,
    Meta,
    Para,
    RawBlock,
    Space,
    Str,
    Strong,
)


class InvalidDocumentError(ValueError):
    """Raised when a YAML document does not follow the expected block/inline structure."""

    pass


def load_document(path: Union[str, Path]) -> Document:
    """
    Load a Document from a YAML file.

    Args:
        path: Path to the YAML document

    Returns:
        Parsed Document

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidDocumentError: If the structure is not understood
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Document not found: {path}")

    data = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
    return document_from_dict(data or {})


def document_from_dict(data: Dict[str, Any]) -> Document:
    """Build a Document from plain (already loaded) YAML data."""
    if not isinstance(data, dict):
        raise InvalidDocumentError("Document root must be a mapping with 'meta' and 'blocks'")

    meta_data = data.get("meta") or {}
    meta = Meta(
        title=str(meta_data.get("title", "")),
        author=str(meta_data.get("author", "")),
        date=str(meta_data.get("date", "")),
        toc=bool(meta_data.get("toc", False)),
    )

    blocks = tuple(_parse_block(block) for block in data.get("blocks") or [])
    return Document(meta=meta, blocks=blocks)


def _parse_block(block: Any) -> Any:
    # A bare string is shorthand for a paragraph
    if isinstance(block, str):
        return Para(parse_inlines(block))

    if not isinstance(block, dict):
        raise InvalidDocumentError(f"Unsupported block: {block!r}")

    if "para" in block:
        return Para(parse_inlines(block["para"]))
    if "header" in block:
        return Header(level=int(block.get("level", 1)), content=parse_inlines(block["header"]))
    if "bullets" in block:
        items = tuple((Para(parse_inlines(item)),) for item in block["bullets"])
        return BulletList(items)
    if "code" in block:
        return CodeBlock(str(block["code"]))
    if "raw" in block:
        return RawBlock(format=str(block.get("format", "latex")), text=str(block["raw"]))
    if "image" in block:
        return Para((_parse_image(block["image"]),))

    raise InvalidDocumentError(f"Unknown block type: {sorted(block)}")


def parse_inlines(value: Any) -> Tuple[Any, ...]:
    """
    Parse inline content.

    Strings are split into Str/Space runs; mappings name a single inline
    element (emph, strong, code, link, image); lists concatenate.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        return _split_text(value)
    if isinstance(value, list):
        inlines: List[Any] = []
        for item in value:
            inlines.extend(parse_inlines(item))
        return tuple(inlines)
    if isinstance(value, dict):
        return (_parse_inline(value),)

    # Numbers and booleans from YAML
    return _split_text(str(value))


def _parse_inline(item: Dict[str, Any]) -> Any:
    if "emph" in item:
        return Emph(parse_inlines(item["emph"]))
    if "strong" in item:
        return Strong(parse_inlines(item["strong"]))
    if "code" in item:
        return Code(str(item["code"]))
    if "link" in item:
        link = item["link"]
        return Link(
            content=parse_inlines(link.get("label", link.get("url", ""))),
            url=str(link["url"]),
            title=str(link.get("title", "")),
        )
    if "image" in item:
        return _parse_image(item["image"])

    raise InvalidDocumentError(f"Unknown inline type: {sorted(item)}")


def _parse_image(image: Any) -> Image:
    if isinstance(image, str):
        return Image(content=(), src=image)
    if "src" not in image:
        raise InvalidDocumentError(f"Image without 'src': {image!r}")

    return Image(
        content=parse_inlines(image.get("label")),
        src=str(image["src"]),
        title=str(image.get("title", "")),
    )


def _split_text(text: str) -> Tuple[Any, ...]:
    inlines = []
    for token in re.split(r"(\s+)", text):
        if not token:
            continue
        inlines.append(Space() if token.isspace() else Str(token))
    return tuple(inlines)
