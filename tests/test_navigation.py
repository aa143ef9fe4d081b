import xml.etree.ElementTree as ET

from models import ChapterInput
from navigation import NCX_NS, build_chapter_records, build_nav_document, build_ncx
from xhtml import XHTML_NS

NS = {"x": XHTML_NS, "n": NCX_NS}


def test_chapter_records_are_numbered_in_input_order(chapters):
    records = build_chapter_records(chapters)
    assert [(r.index, r.id, r.file_name, r.title) for r in records] == [
        (1, "c1", "c1.xhtml", "Ch1"),
        (2, "c2", "c2.xhtml", "Ch2"),
    ]
    assert records[0].body == "<p>Para A</p><p>Para B</p>"
    assert records[1].body == "<p>Solo paragraph</p>"


def test_nav_document_lists_chapters_in_order():
    records = build_chapter_records([
        ChapterInput("First & foremost", "x"),
        ChapterInput("Second", "y"),
        ChapterInput("Third", "z"),
    ])
    root = ET.fromstring(build_nav_document(records, stylesheet="styles.css").encode("utf-8"))
    nav = root.find("x:body/x:nav", NS)
    assert nav.get("{http://www.idpf.org/2007/ops}type") == "toc"
    assert nav.get("id") == "toc"
    links = nav.findall("x:ol/x:li/x:a", NS)
    assert [(a.text, a.get("href")) for a in links] == [
        ("First & foremost", "c1.xhtml"),
        ("Second", "c2.xhtml"),
        ("Third", "c3.xhtml"),
    ]


def test_ncx_nav_points(chapters, metadata):
    records = build_chapter_records(chapters)
    root = ET.fromstring(build_ncx(records, metadata, uid="ncx-uid").encode("utf-8"))
    points = root.findall("n:navMap/n:navPoint", NS)
    assert [p.get("playOrder") for p in points] == ["1", "2"]
    assert [p.find("n:navLabel/n:text", NS).text for p in points] == ["Ch1", "Ch2"]
    assert [p.find("n:content", NS).get("src") for p in points] == ["c1.xhtml", "c2.xhtml"]
    assert root.find("n:docTitle/n:text", NS).text == "T"

    uid = root.find("n:head/n:meta[@name='dtb:uid']", NS).get("content")
    assert uid == "ncx-uid"


def test_ncx_uid_is_independent_of_package_identifier(chapters, metadata):
    records = build_chapter_records(chapters)
    root = ET.fromstring(build_ncx(records, metadata).encode("utf-8"))
    uid = root.find("n:head/n:meta[@name='dtb:uid']", NS).get("content")
    assert uid
    assert metadata.unique_id not in uid


def test_nav_and_ncx_reference_the_same_files(chapters, metadata):
    records = build_chapter_records(chapters * 3)
    nav = ET.fromstring(build_nav_document(records).encode("utf-8"))
    ncx = ET.fromstring(build_ncx(records, metadata).encode("utf-8"))
    nav_hrefs = [a.get("href") for a in nav.iter(f"{{{XHTML_NS}}}a")]
    ncx_srcs = [c.get("src") for c in ncx.iter(f"{{{NCX_NS}}}content")]
    assert nav_hrefs == ncx_srcs == [r.file_name for r in records]
