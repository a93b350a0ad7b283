"""
Markdown Compiler
=================
Parses task text as CommonMark (markdown-it-py) and compiles the syntax tree
into a renderer-agnostic layout tree of ``MarkdownNode`` blocks.

Style resolution happens here so a renderer only has to look up fonts:
bold text gets the family's bold face, italic its italic face, both the
combined face; inline and block code always use ``Courier``.

The compiler is pure.  The same ``(markdown, font)`` pair always produces
an equal tree, and node types it does not know are dropped instead of
raising.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

DEFAULT_FONT = "Helvetica"
MONOSPACE_FONT = "Courier"
BULLET = "•"

FONT_VARIANTS = {
    "Helvetica": {
        "normal": "Helvetica",
        "bold": "Helvetica-Bold",
        "italic": "Helvetica-Oblique",
        "bold_italic": "Helvetica-BoldOblique",
    },
    "Times-Roman": {
        "normal": "Times-Roman",
        "bold": "Times-Bold",
        "italic": "Times-Italic",
        "bold_italic": "Times-BoldItalic",
    },
    "Courier": {
        "normal": "Courier",
        "bold": "Courier-Bold",
        "italic": "Courier-Oblique",
        "bold_italic": "Courier-BoldOblique",
    },
}

HEADING_SIZES = {1: 24, 2: 20, 3: 18, 4: 16, 5: 14, 6: 12}


class NodeKind(Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    STRONG = "strong"
    EMPHASIS = "emphasis"
    LIST = "list"
    LIST_ITEM = "listItem"
    BLOCKQUOTE = "blockquote"
    CODE = "code"
    INLINE_CODE = "inlineCode"
    TEXT = "text"
    BREAK = "break"


@dataclass(frozen=True)
class MarkdownNode:
    kind: NodeKind
    children: tuple = ()
    literal: Optional[str] = None
    depth: Optional[int] = None     # headings
    size: Optional[int] = None      # headings
    ordered: Optional[bool] = None  # lists
    index: Optional[int] = None     # ordered list items, 1-based
    label: Optional[str] = None     # list item bullet or "N."
    font: Optional[str] = None


@dataclass(frozen=True)
class InlineRun:
    """A styled piece of text, as a renderer would draw it."""
    text: str
    font: str
    bold: bool = False
    italic: bool = False
    code: bool = False


def resolve_font(family: str, bold: bool = False, italic: bool = False) -> str:
    variants = FONT_VARIANTS.get(family, FONT_VARIANTS[DEFAULT_FONT])
    if bold and italic:
        return variants["bold_italic"]
    if bold:
        return variants["bold"]
    if italic:
        return variants["italic"]
    return variants["normal"]


@dataclass(frozen=True)
class _Style:
    family: str
    bold: bool = False
    italic: bool = False

    @property
    def font(self) -> str:
        return resolve_font(self.family, self.bold, self.italic)

    def with_bold(self) -> "_Style":
        return _Style(self.family, True, self.italic)

    def with_italic(self) -> "_Style":
        return _Style(self.family, self.bold, True)


def parse_markdown(markdown: str) -> SyntaxTreeNode:
    """Parse *markdown* (CommonMark) into a syntax tree."""
    md = MarkdownIt("commonmark")
    return SyntaxTreeNode(md.parse(markdown or ""))


def compile_markdown(markdown: str, font: str = DEFAULT_FONT) -> tuple:
    """Compile *markdown* into a tuple of block ``MarkdownNode`` trees."""
    tree = parse_markdown(markdown)
    return _compile_children(tree, _Style(font))


# ------------------------------------------------------------------
# Node handlers
# ------------------------------------------------------------------

def _compile_children(node: SyntaxTreeNode, style: _Style) -> tuple:
    out = []
    for child in node.children:
        if child.type == "inline":
            out.extend(_compile_children(child, style))
            continue
        compiled = _compile_node(child, style)
        if compiled is not None:
            out.append(compiled)
    return tuple(out)


def _compile_node(node: SyntaxTreeNode, style: _Style) -> Optional[MarkdownNode]:
    handler = _HANDLERS.get(node.type)
    if handler is None:
        return None
    return handler(node, style)


def _text(node, style):
    return MarkdownNode(NodeKind.TEXT, literal=node.content, font=style.font)


def _softbreak(node, style):
    return MarkdownNode(NodeKind.TEXT, literal="\n", font=style.font)


def _hardbreak(node, style):
    return MarkdownNode(NodeKind.BREAK, literal="\n", font=style.font)


def _strong(node, style):
    inner = style.with_bold()
    return MarkdownNode(NodeKind.STRONG, _compile_children(node, inner), font=inner.font)


def _emphasis(node, style):
    inner = style.with_italic()
    return MarkdownNode(NodeKind.EMPHASIS, _compile_children(node, inner), font=inner.font)


def _inline_code(node, style):
    return MarkdownNode(NodeKind.INLINE_CODE, literal=node.content, font=MONOSPACE_FONT)


def _code_block(node, style):
    return MarkdownNode(NodeKind.CODE, literal=node.content.rstrip("\n"), font=MONOSPACE_FONT)


def _paragraph(node, style):
    return MarkdownNode(NodeKind.PARAGRAPH, _compile_children(node, style), font=style.font)


def _heading(node, style):
    depth = int(node.tag[1:])
    inner = style.with_bold()
    return MarkdownNode(
        NodeKind.HEADING,
        _compile_children(node, inner),
        depth=depth,
        size=HEADING_SIZES[depth],
        font=inner.font,
    )


def _blockquote(node, style):
    return MarkdownNode(NodeKind.BLOCKQUOTE, _compile_children(node, style), font=style.font)


def _list(node, style, ordered):
    items = []
    for position, item in enumerate(node.children, start=1):
        if item.type != "list_item":
            continue
        items.append(MarkdownNode(
            NodeKind.LIST_ITEM,
            _compile_children(item, style),
            index=position if ordered else None,
            label=f"{position}." if ordered else BULLET,
            font=style.font,
        ))
    return MarkdownNode(NodeKind.LIST, tuple(items), ordered=ordered, font=style.font)


def _bullet_list(node, style):
    return _list(node, style, ordered=False)


def _ordered_list(node, style):
    return _list(node, style, ordered=True)


_HANDLERS = {
    "text": _text,
    "softbreak": _softbreak,
    "hardbreak": _hardbreak,
    "strong": _strong,
    "em": _emphasis,
    "code_inline": _inline_code,
    "code_block": _code_block,
    "fence": _code_block,
    "paragraph": _paragraph,
    "heading": _heading,
    "blockquote": _blockquote,
    "bullet_list": _bullet_list,
    "ordered_list": _ordered_list,
}


# ------------------------------------------------------------------
# Tree helpers
# ------------------------------------------------------------------

def iter_runs(nodes, bold: bool = False, italic: bool = False) -> Iterator[InlineRun]:
    """Yield the styled text runs of *nodes* in reading order.

    Consecutive text nodes are not merged; each run is one leaf.
    """
    for node in nodes:
        kind = node.kind
        if kind is NodeKind.TEXT:
            yield InlineRun(node.literal, node.font, bold, italic)
        elif kind in (NodeKind.INLINE_CODE, NodeKind.CODE):
            yield InlineRun(node.literal, node.font, bold, italic, code=True)
        elif kind is NodeKind.BREAK:
            yield InlineRun(node.literal, node.font, bold, italic)
        elif kind in (NodeKind.STRONG, NodeKind.HEADING):
            yield from iter_runs(node.children, True, italic)
        elif kind is NodeKind.EMPHASIS:
            yield from iter_runs(node.children, bold, True)
        else:
            yield from iter_runs(node.children, bold, italic)


def plain_text(nodes) -> str:
    """Concatenate the literal text of *nodes*, ignoring styling."""
    return "".join(run.text for run in iter_runs(nodes))
