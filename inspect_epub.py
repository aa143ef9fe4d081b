"""inspect_epub.py — Read back a packed EPUB and check its structure."""

import io
import posixpath
import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

from bs4 import BeautifulSoup

from epub_builder import CONTAINER_PATH, MIMETYPE, MIMETYPE_PATH

CONTAINER_NS = "urn:oasis:names:tc:opendocument:xmlns:container"
NCX_NS = "http://www.daisy.org/z3986/2005/ncx/"
OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"


@dataclass
class ChapterSummary:
    index: int
    title: str
    href: str              # Relative to the package document
    paragraph_count: int


@dataclass
class EpubSummary:
    title: str
    author: str
    language: str
    identifier: str
    chapters: list[ChapterSummary] = field(default_factory=list)


def _open(source) -> zipfile.ZipFile:
    if isinstance(source, (bytes, bytearray)):
        return zipfile.ZipFile(io.BytesIO(source))
    return zipfile.ZipFile(Path(source))


def _find_opf_path(zf: zipfile.ZipFile) -> str:
    root = ET.fromstring(zf.read(CONTAINER_PATH))
    rootfile = root.find(f".//{{{CONTAINER_NS}}}rootfile")
    if rootfile is None or not rootfile.get("full-path"):
        raise ValueError("No rootfile declared in container.xml")
    return rootfile.get("full-path")


def _text(root, path: str) -> str:
    node = root.find(path)
    return node.text.strip() if node is not None and node.text else ""


def _toc_from_ncx(ncx_bytes: bytes) -> list[tuple[str, str]]:
    """Return (title, src) per navPoint, ordered by playOrder."""
    root = ET.fromstring(ncx_bytes)
    nav_map = root.find(f"{{{NCX_NS}}}navMap")
    if nav_map is None:
        raise ValueError("No navMap found in toc.ncx")

    points = []
    for np in nav_map.findall(f"{{{NCX_NS}}}navPoint"):
        label = np.find(f"{{{NCX_NS}}}navLabel/{{{NCX_NS}}}text")
        content = np.find(f"{{{NCX_NS}}}content")
        title = label.text.strip() if label is not None and label.text else ""
        src = content.get("src", "") if content is not None else ""
        points.append((int(np.get("playOrder", 0)), title, src.split("#")[0]))
    return [(title, src) for _, title, src in sorted(points, key=lambda p: p[0])]


def _toc_from_nav(nav_bytes: bytes) -> list[tuple[str, str]]:
    soup = BeautifulSoup(nav_bytes, features="lxml-xml")
    nav = soup.find("nav") or soup
    return [
        (a.get_text(strip=True), a.get("href", "").split("#")[0])
        for a in nav.find_all("a")
    ]


def _count_paragraphs(xhtml_bytes: bytes) -> int:
    soup = BeautifulSoup(xhtml_bytes, features="lxml-xml")
    body = soup.find("body")
    return len(body.find_all("p")) if body is not None else 0


def _manifest(opf_root) -> list[dict]:
    return [
        {
            "id": item.get("id"),
            "href": item.get("href"),
            "media_type": item.get("media-type"),
            "properties": (item.get("properties") or "").split(),
        }
        for item in opf_root.findall(f"{{{OPF_NS}}}manifest/{{{OPF_NS}}}item")
    ]


def read_epub(source) -> EpubSummary:
    """
    Summarize an EPUB given as a path or bytes: package metadata plus one
    entry per table-of-contents chapter with its paragraph count.
    """
    with _open(source) as zf:
        opf_path = _find_opf_path(zf)
        base = posixpath.dirname(opf_path)
        opf = ET.fromstring(zf.read(opf_path))
        manifest = _manifest(opf)

        ncx = next((m for m in manifest if m["media_type"] == "application/x-dtbncx+xml"), None)
        nav = next((m for m in manifest if "nav" in m["properties"]), None)
        if ncx is not None:
            toc = _toc_from_ncx(zf.read(posixpath.join(base, ncx["href"])))
        elif nav is not None:
            toc = _toc_from_nav(zf.read(posixpath.join(base, nav["href"])))
        else:
            raise ValueError("EPUB has neither an NCX nor a nav document")

        chapters = []
        for i, (title, href) in enumerate(toc, start=1):
            member = posixpath.join(base, href)
            if member not in zf.namelist():
                raise FileNotFoundError(f"Chapter file not found: {member}")
            chapters.append(ChapterSummary(
                index=i,
                title=title,
                href=href,
                paragraph_count=_count_paragraphs(zf.read(member)),
            ))

    return EpubSummary(
        title=_text(opf, f".//{{{DC_NS}}}title"),
        author=_text(opf, f".//{{{DC_NS}}}creator"),
        language=_text(opf, f".//{{{DC_NS}}}language"),
        identifier=_text(opf, f".//{{{DC_NS}}}identifier"),
        chapters=chapters,
    )


def verify_epub(source) -> list[str]:
    """Return a list of structural problems; an empty list means the archive is sound."""
    problems = []
    with _open(source) as zf:
        infos = zf.infolist()
        names = [info.filename for info in infos]

        if not infos or infos[0].filename != MIMETYPE_PATH:
            problems.append("first member is not 'mimetype'")
        else:
            if infos[0].compress_type != zipfile.ZIP_STORED:
                problems.append("'mimetype' is compressed")
            if zf.read(MIMETYPE_PATH) != MIMETYPE.encode("ascii"):
                problems.append(f"'mimetype' does not contain exactly {MIMETYPE}")

        if CONTAINER_PATH not in names:
            problems.append(f"missing {CONTAINER_PATH}")
            return problems
        try:
            opf_path = _find_opf_path(zf)
        except (ValueError, ET.ParseError) as e:
            problems.append(f"bad container.xml: {e}")
            return problems
        if opf_path not in names:
            problems.append(f"package document {opf_path} is missing")
            return problems

        base = posixpath.dirname(opf_path)
        opf = ET.fromstring(zf.read(opf_path))
        manifest = _manifest(opf)

        ids = [m["id"] for m in manifest]
        for dup in sorted({i for i in ids if ids.count(i) > 1}):
            problems.append(f"duplicate manifest id '{dup}'")

        listed = set()
        for m in manifest:
            member = posixpath.join(base, m["href"] or "")
            listed.add(member)
            if member not in names:
                problems.append(f"manifest href '{m['href']}' has no archive member")

        prefix = f"{base}/" if base else ""
        for name in names:
            if name in (MIMETYPE_PATH, opf_path) or name.startswith("META-INF/") or name.endswith("/"):
                continue
            if name.startswith(prefix) and name not in listed:
                problems.append(f"archive member '{name}' has no manifest entry")

        for itemref in opf.findall(f"{{{OPF_NS}}}spine/{{{OPF_NS}}}itemref"):
            idref = itemref.get("idref")
            if ids.count(idref) != 1:
                problems.append(f"spine idref '{idref}' does not resolve to exactly one manifest item")

    return problems
