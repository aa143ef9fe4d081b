"""markup.py — Text escaping, paragraph splitting, and a small XML element builder."""

import re

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'

_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "'": "&apos;",
    '"': "&quot;",
}
_RESERVED = re.compile(r"[&<>'\"]")
_PARAGRAPH_BREAK = re.compile(r"\n{2,}")
_NAMESPACED_PREFIXES = ("xmlns_", "xml_", "epub_")


def escape_xml(text: str) -> str:
    """Escape the five reserved XML characters. Input is treated as raw text."""
    return _RESERVED.sub(lambda m: _ESCAPES[m.group(0)], text)


def normalize_newlines(text: str) -> str:
    """Turn literal '\\n' sequences and CR/CRLF line endings into '\\n'."""
    text = text.replace("\\n", "\n")
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_paragraphs(content: str) -> list[str]:
    """
    Split chapter text into paragraphs on runs of two or more line breaks.
    Blocks are stripped but never dropped, so k breaks always give k+1 blocks.
    """
    return [block.strip() for block in _PARAGRAPH_BREAK.split(normalize_newlines(content))]


def render_paragraphs(content: str) -> str:
    """Render chapter text as a sequence of escaped <p> elements."""
    return "".join(Element("p", block).render() for block in split_paragraphs(content))


def minify_css(css: str) -> str:
    css = re.sub(r"\s*([{}:;,>+~])\s*", r"\1", css)
    return re.sub(r"\s{2,}", " ", css).strip()


class Raw:
    """Markup inserted verbatim. Only use for fragments built from escaped text."""

    def __init__(self, markup: str):
        self.markup = markup

    def __repr__(self) -> str:
        return f"Raw({self.markup!r})"


class Element:
    """
    An XML element whose text children and attribute values are escaped on render.

    Keyword names map to attribute names: a trailing '_' is dropped
    (class_ -> class), known prefixes become namespaces (epub_type -> epub:type,
    xmlns_epub -> xmlns:epub) and remaining underscores become hyphens
    (full_path -> full-path). Attributes set to None are omitted.
    """

    def __init__(self, tag: str, *children, **attrs):
        self.tag = tag
        self.children = list(_flatten(children))
        self.attrs = attrs

    def append(self, *children) -> "Element":
        self.children.extend(_flatten(children))
        return self

    def render(self) -> str:
        attrs = "".join(
            f' {_attr_name(name)}="{escape_xml(str(value))}"'
            for name, value in self.attrs.items()
            if value is not None
        )
        if not self.children:
            return f"<{self.tag}{attrs}/>"
        inner = "".join(render(child) for child in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, children={len(self.children)})"


def render(node) -> str:
    if isinstance(node, Element):
        return node.render()
    if isinstance(node, Raw):
        return node.markup
    return escape_xml(str(node))


def xml_document(root: Element, doctype: str | None = None) -> str:
    """Serialize a root element with an XML declaration and optional DOCTYPE."""
    parts = [XML_DECLARATION]
    if doctype:
        parts.append(doctype)
    parts.append(root.render())
    return "\n".join(parts)


def _flatten(children):
    for child in children:
        if child is None:
            continue
        if isinstance(child, (list, tuple)):
            yield from _flatten(child)
        else:
            yield child


def _attr_name(name: str) -> str:
    name = name.rstrip("_")
    for prefix in _NAMESPACED_PREFIXES:
        if name.startswith(prefix):
            head, _, tail = name.partition("_")
            return f"{head}:{tail.replace('_', '-')}"
    return name.replace("_", "-")
