"""
Output formatters: convert a DocumentModel to JSON, a Markdown outline,
or XML for a renderer to consume.
"""

import json
import xml.etree.ElementTree as ET
from typing import Any

from .markdown_compiler import MarkdownNode, NodeKind


# ---------------------------------------------------------------------------
# Plain data
# ---------------------------------------------------------------------------

def node_to_dict(node: MarkdownNode) -> dict[str, Any]:
    """Serialize a compiled Markdown node, leaving out unset attributes."""
    data = {"type": node.kind.value}
    for attr in ("literal", "depth", "size", "ordered", "index", "label", "font"):
        value = getattr(node, attr)
        if value is not None:
            data[attr] = value
    if node.children:
        data["children"] = [node_to_dict(c) for c in node.children]
    return data


def page_to_dict(page) -> dict[str, Any]:
    data = {"kind": page.kind, "page_number": page.page_number}
    if page.kind == "cover":
        data["title"] = page.title
        data["details"] = [{"label": k, "value": v} for k, v in page.details]
        data["footer"] = page.footer
    elif page.kind == "content":
        data["record"] = page.record.to_dict()
        data["header"] = list(page.header)
        data["font"] = page.font
        data["layout"] = {
            "header_top": page.layout.header_top,
            "content_margin_top": page.layout.content_margin_top,
            "footer_bottom": page.layout.footer_bottom,
        }
        data["blocks"] = [node_to_dict(b) for b in page.blocks]
        data["sign_off"] = list(page.sign_off)
    elif page.kind == "summary":
        data["title"] = page.title
        data["columns"] = list(page.columns)
        data["rows"] = [dict(zip(page.columns, row)) for row in page.rows]
        data["holiday_count"] = len(page.holiday_rows)
        data["leave_count"] = len(page.leave_rows)
    return data


def document_to_dict(document) -> dict[str, Any]:
    return {
        "filename": document.filename,
        "total_pages": document.total_pages,
        "pages": [page_to_dict(p) for p in document.pages],
    }


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def to_json(document, pretty: bool = True) -> str:
    """Convert a DocumentModel to a JSON string."""
    indent = 2 if pretty else None
    return json.dumps(document_to_dict(document), indent=indent, default=str, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

def _md_table(headers: list[str], rows: list[tuple]) -> str:
    """Render a markdown table from headers and row tuples."""
    if not headers:
        return "_empty table_\n"
    lines = ["| " + " | ".join(headers) + " |"]
    lines.append("| " + " | ".join(["---"] * len(headers)) + " |")
    for row in rows:
        vals = [str(v) if v is not None else "" for v in row]
        while len(vals) < len(headers):
            vals.append("")
        vals = vals[: len(headers)]
        lines.append("| " + " | ".join(vals) + " |")
    return "\n".join(lines) + "\n"


def _md_inline(nodes) -> str:
    parts = []
    for node in nodes:
        if node.kind is NodeKind.TEXT:
            parts.append(node.literal)
        elif node.kind is NodeKind.BREAK:
            parts.append("  \n")
        elif node.kind is NodeKind.INLINE_CODE:
            parts.append(f"`{node.literal}`")
        elif node.kind is NodeKind.STRONG:
            parts.append(f"**{_md_inline(node.children)}**")
        elif node.kind is NodeKind.EMPHASIS:
            parts.append(f"*{_md_inline(node.children)}*")
    return "".join(parts)


def _md_blocks(nodes, indent: str = "") -> list[str]:
    lines = []
    for node in nodes:
        if node.kind is NodeKind.PARAGRAPH:
            lines.append(indent + _md_inline(node.children))
        elif node.kind is NodeKind.HEADING:
            lines.append(indent + "#" * node.depth + " " + _md_inline(node.children))
        elif node.kind is NodeKind.CODE:
            lines.append(indent + "```")
            lines.extend(indent + line for line in node.literal.split("\n"))
            lines.append(indent + "```")
        elif node.kind is NodeKind.BLOCKQUOTE:
            lines.extend(_md_blocks(node.children, indent + "> "))
        elif node.kind is NodeKind.LIST:
            for item in node.children:
                body = _md_blocks(item.children, indent + "   ")
                first = body[0].strip() if body else ""
                marker = item.label if node.ordered else "-"
                lines.append(f"{indent}{marker} {first}")
                lines.extend(body[1:])
        else:
            lines.append(indent + _md_inline([node]))
    return lines


def to_markdown(document) -> str:
    """Convert a DocumentModel to a Markdown outline, one section per page."""
    parts = []
    for page in document.pages:
        parts.append(f"## Page {page.page_number} of {document.total_pages}\n")
        if page.kind == "cover":
            parts.append(f"### {page.title}\n")
            parts.append(_md_table(["Field", "Value"], list(page.details)))
            parts.append(f"_{page.footer}_\n")
        elif page.kind == "content":
            parts.append(f"{page.header[0]}  \n{page.header[1]}\n")
            parts.append("\n".join(_md_blocks(page.blocks)) + "\n")
        elif page.kind == "summary":
            parts.append(f"### {page.title}\n")
            parts.append(_md_table(list(page.columns), list(page.rows)))
            parts.append(f"_{len(page.holiday_rows)} holidays, {len(page.leave_rows)} leaves_\n")
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------------

def _add_text(parent: ET.Element, tag: str, text: str):
    el = ET.SubElement(parent, tag)
    el.text = str(text)
    return el


def _add_node(parent: ET.Element, node: MarkdownNode):
    el = ET.SubElement(parent, node.kind.value)
    for attr in ("depth", "size", "index", "label", "font"):
        value = getattr(node, attr)
        if value is not None:
            el.set(attr, str(value))
    if node.ordered is not None:
        el.set("ordered", "true" if node.ordered else "false")
    if node.literal is not None:
        el.text = node.literal
    for child in node.children:
        _add_node(el, child)


def to_xml(document) -> str:
    """Convert a DocumentModel to an XML string."""
    root = ET.Element("document", filename=document.filename,
                      total_pages=str(document.total_pages))
    for page in document.pages:
        page_el = ET.SubElement(root, "page", kind=page.kind,
                                number=str(page.page_number))
        if page.kind == "cover":
            _add_text(page_el, "title", page.title)
            for label, value in page.details:
                _add_text(page_el, "detail", value).set("label", label)
            _add_text(page_el, "footer", page.footer)
        elif page.kind == "content":
            for line in page.header:
                _add_text(page_el, "header", line)
            blocks_el = ET.SubElement(page_el, "blocks", font=page.font)
            for block in page.blocks:
                _add_node(blocks_el, block)
        elif page.kind == "summary":
            _add_text(page_el, "title", page.title)
            for row in page.rows:
                row_el = ET.SubElement(page_el, "row")
                for column, value in zip(page.columns, row):
                    _add_text(row_el, "cell", value).set("column", column)
    return ET.tostring(root, encoding="unicode")
