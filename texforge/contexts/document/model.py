"""
Document model.

Immutable tree of block and inline nodes. Children are held in tuples so that
every node is hashable and can be compared by value. The compilation pipeline
only ever rewrites Image nodes; everything else passes through untouched.
"""

from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Callable, List, Tuple

# Inlines


@dataclass(frozen=True)
class Str:
    text: str


@dataclass(frozen=True)
class Space:
    pass


@dataclass(frozen=True)
class Emph:
    content: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class Strong:
    content: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class Link:
    content: Tuple[Any, ...]
    url: str
    title: str = ""


@dataclass(frozen=True)
class Image:
    """
    Image reference.

    Attributes:
        content: Inline label (alt text / caption)
        src: Source locator - local path, relative path or URL
        title: Title string
    """

    content: Tuple[Any, ...]
    src: str
    title: str = ""


# Blocks


@dataclass(frozen=True)
class Para:
    content: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class Header:
    level: int
    content: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class BulletList:
    # Each item is a tuple of blocks
    items: Tuple[Tuple[Any, ...], ...] = ()


@dataclass(frozen=True)
class CodeBlock:
    text: str


@dataclass(frozen=True)
class RawBlock:
    format: str
    text: str


@dataclass(frozen=True)
class Meta:
    title: str = ""
    author: str = ""
    date: str = ""
    toc: bool = False


@dataclass(frozen=True)
class Document:
    meta: Meta = field(default_factory=Meta)
    blocks: Tuple[Any, ...] = ()


def bottom_up(fn: Callable[[Any], Any], node: Any) -> Any:
    """
    Transform a tree from the leaves upward.

    Every dataclass node is rebuilt from its transformed children and then
    passed to ``fn``, whose return value replaces it. ``fn`` should return
    its argument for nodes it does not care about. Strings, numbers and other
    plain values are returned as-is.

    Args:
        fn: Node transformer (may have side effects, e.g. writing files)
        node: Root of the tree (Document, block, inline, or tuple of nodes)

    Returns:
        The transformed tree

    Example:
        >>> def shout(node):
        ...     return Str(node.text.upper()) if isinstance(node, Str) else node
        >>> bottom_up(shout, Para((Str("hi"),)))
        Para(content=(Str(text='HI'),))
    """
    if isinstance(node, tuple):
        return tuple(bottom_up(fn, child) for child in node)

    if is_dataclass(node) and not isinstance(node, type):
        changes = {f.name: bottom_up(fn, getattr(node, f.name)) for f in fields(node)}
        return fn(replace(node, **changes))

    return node


def query(fn: Callable[[Any], List[Any]], node: Any) -> List[Any]:
    """Collect the results of ``fn`` over every node in the tree, in document order."""
    results: List[Any] = []

    if isinstance(node, tuple):
        for child in node:
            results.extend(query(fn, child))
    elif is_dataclass(node) and not isinstance(node, type):
        results.extend(fn(node))
        for f in fields(node):
            results.extend(query(fn, getattr(node, f.name)))

    return results


def images(node: Any) -> List[Image]:
    """All Image nodes in the tree, in document order."""
    return query(lambda n: [n] if isinstance(n, Image) else [], node)


def stringify(node: Any) -> str:
    """Plain-text rendering of inline content (used for labels and log messages)."""
    def text_of(n: Any) -> List[str]:
        if isinstance(n, (Str, Code)):
            return [n.text]
        if isinstance(n, Space):
            return [" "]
        return []

    return "".join(query(text_of, node))
