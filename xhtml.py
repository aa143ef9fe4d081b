"""xhtml.py — Render XHTML5 content documents."""

from markup import Element, Raw, xml_document
from models import ChapterRecord, CoverAsset

XHTML_NS = "http://www.w3.org/1999/xhtml"
EPUB_OPS_NS = "http://www.idpf.org/2007/ops"


def render_document(
    title: str,
    body,
    stylesheet: str | None = None,
    inline_style: str | None = None,
    namespaces: dict[str, str] | None = None,
) -> str:
    """
    Wrap a body fragment in a complete XHTML document.

    `body` is inserted verbatim when it is a string (callers escape their own
    text) or rendered when it is an Element. Pass `stylesheet` to link a shared
    CSS file, or `inline_style` for a standalone document.
    """
    head = Element(
        "head",
        Element("title", title),
        Element("meta", charset="utf-8"),
    )
    if stylesheet:
        head.append(Element("link", rel="stylesheet", type="text/css", href=stylesheet))
    if inline_style:
        head.append(Element("style", Raw(inline_style), type="text/css"))

    ns_attrs = {f"xmlns_{prefix}": uri for prefix, uri in (namespaces or {}).items()}
    html = Element(
        "html",
        head,
        Element("body", body if isinstance(body, Element) else Raw(body)),
        xmlns=XHTML_NS,
        **ns_attrs,
    )
    return xml_document(html, doctype="<!DOCTYPE html>")


def render_chapter(record: ChapterRecord, stylesheet: str | None = None) -> str:
    return render_document(record.title, record.body, stylesheet=stylesheet)


def render_cover_page(cover: CoverAsset, stylesheet: str | None = None) -> str:
    body = Element("div", Element("img", src=cover.file_name, alt="Cover"), class_="cover")
    return render_document("Cover", body, stylesheet=stylesheet)
