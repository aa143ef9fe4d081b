"""navigation.py — Chapter records plus nav (EPUB 3) and NCX (EPUB 2) tables of contents."""

import uuid

from tqdm import tqdm

from markup import Element, render_paragraphs, xml_document
from models import BookMetadata, ChapterInput, ChapterRecord
from xhtml import EPUB_OPS_NS, render_document

NCX_NS = "http://www.daisy.org/z3986/2005/ncx/"


def build_chapter_records(chapters: list[ChapterInput], progress: bool = False) -> list[ChapterRecord]:
    """
    Derive the id, file name and rendered body of every chapter, in input order.
    Nav, NCX, manifest and spine are all built from this one list.
    """
    records = []
    for index, chapter in enumerate(
        tqdm(chapters, desc="  Rendering", unit="chapter", disable=not progress),
        start=1,
    ):
        chapter_id = f"c{index}"
        records.append(ChapterRecord(
            index=index,
            id=chapter_id,
            file_name=f"{chapter_id}.xhtml",
            title=chapter.title,
            body=render_paragraphs(chapter.content),
        ))
    return records


def build_nav_document(
    records: list[ChapterRecord],
    stylesheet: str | None = None,
    title: str = "Table of Contents",
) -> str:
    items = [
        Element("li", Element("a", record.title, href=record.file_name))
        for record in records
    ]
    nav = Element(
        "nav",
        Element("h1", title),
        Element("ol", items),
        epub_type="toc",
        id="toc",
    )
    return render_document(title, nav, stylesheet=stylesheet, namespaces={"epub": EPUB_OPS_NS})


def build_ncx(records: list[ChapterRecord], metadata: BookMetadata, uid: str | None = None) -> str:
    """
    Build the legacy toc.ncx. The NCX gets its own uid, separate from the
    package identifier.
    """
    uid = uid or str(uuid.uuid4())
    head = Element(
        "head",
        Element("meta", name="dtb:uid", content=uid),
        Element("meta", name="dtb:depth", content="1"),
        Element("meta", name="dtb:totalPageCount", content="0"),
        Element("meta", name="dtb:maxPageNumber", content="0"),
    )
    nav_points = [
        Element(
            "navPoint",
            Element("navLabel", Element("text", record.title)),
            Element("content", src=record.file_name),
            id=f"navpoint-{record.index}",
            playOrder=record.index,
        )
        for record in records
    ]
    ncx = Element(
        "ncx",
        head,
        Element("docTitle", Element("text", metadata.title)),
        Element("docAuthor", Element("text", metadata.author)),
        Element("navMap", nav_points),
        xmlns=NCX_NS,
        version="2005-1",
        xml_lang=metadata.language,
    )
    return xml_document(ncx)
