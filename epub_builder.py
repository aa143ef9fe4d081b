"""epub_builder.py — Assemble rendered chapters into an EPUB archive."""

import io
import zipfile

from errors import ConfigurationMissing
from markup import Element, minify_css, xml_document
from models import (
    BookMetadata,
    ChapterInput,
    ChapterRecord,
    CoverAsset,
    ManifestEntry,
    PackageMember,
    SpineItem,
)
from navigation import build_chapter_records, build_nav_document, build_ncx
from xhtml import render_chapter, render_cover_page

MIMETYPE = "application/epub+zip"
MIMETYPE_PATH = "mimetype"
CONTAINER_PATH = "META-INF/container.xml"
CONTENT_DIR = "OEBPS"
PACKAGE_DOCUMENT = "content.opf"
STYLESHEET = "styles.css"
COVER_PAGE = "cover.xhtml"
NAV_DOCUMENT = "toc.xhtml"
NCX_DOCUMENT = "toc.ncx"

XHTML_MEDIA_TYPE = "application/xhtml+xml"
CSS_MEDIA_TYPE = "text/css"
NCX_MEDIA_TYPE = "application/x-dtbncx+xml"
OPF_MEDIA_TYPE = "application/oebps-package+xml"

CONTAINER_NS = "urn:oasis:names:tc:opendocument:xmlns:container"
OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"

STYLESHEET_CSS = """
body { margin: 0; padding: 0; font-family: serif; line-height: 1.5; }
h1, h2, h3 { font-family: sans-serif; }
p { margin: 0 0 1em; text-align: justify; }
img { max-width: 100%; height: auto; }
.cover { text-align: center; page-break-after: always; }
"""


def content_path(href: str) -> str:
    return f"{CONTENT_DIR}/{href}"


def build_container_xml() -> str:
    container = Element(
        "container",
        Element(
            "rootfiles",
            Element("rootfile", full_path=content_path(PACKAGE_DOCUMENT), media_type=OPF_MEDIA_TYPE),
        ),
        version="1.0",
        xmlns=CONTAINER_NS,
    )
    return xml_document(container)


def build_manifest(
    records: list[ChapterRecord],
    cover: CoverAsset | None = None,
    legacy_toc: bool = True,
) -> list[ManifestEntry]:
    """One entry per content file, in the order they are written to the archive."""
    entries = []
    if cover:
        entries.append(ManifestEntry("cover-img", cover.file_name, cover.media_type, "cover-image"))
        entries.append(ManifestEntry("cover", COVER_PAGE, XHTML_MEDIA_TYPE))
    entries.append(ManifestEntry("styles", STYLESHEET, CSS_MEDIA_TYPE))
    entries.extend(ManifestEntry(record.id, record.file_name, XHTML_MEDIA_TYPE) for record in records)
    entries.append(ManifestEntry("toc", NAV_DOCUMENT, XHTML_MEDIA_TYPE, "nav"))
    if legacy_toc:
        entries.append(ManifestEntry("ncx", NCX_DOCUMENT, NCX_MEDIA_TYPE))

    ids = [entry.id for entry in entries]
    hrefs = [entry.href for entry in entries]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Duplicate manifest ids: {sorted(i for i in set(ids) if ids.count(i) > 1)}")
    if len(set(hrefs)) != len(hrefs):
        raise ValueError(f"Duplicate manifest hrefs: {sorted(h for h in set(hrefs) if hrefs.count(h) > 1)}")
    return entries


def build_spine(
    records: list[ChapterRecord],
    cover: CoverAsset | None = None,
    cover_linear: bool = True,
) -> list[SpineItem]:
    """Reading order: cover page first when present, then chapters in input order."""
    spine = [SpineItem("cover", linear=cover_linear)] if cover else []
    spine.extend(SpineItem(record.id) for record in records)
    return spine


def build_package_document(
    metadata: BookMetadata,
    manifest: list[ManifestEntry],
    spine: list[SpineItem],
    cover: CoverAsset | None = None,
    legacy_toc: bool = True,
) -> str:
    manifest_ids = {entry.id for entry in manifest}
    unresolved = [item.idref for item in spine if item.idref not in manifest_ids]
    if unresolved:
        raise ValueError(f"Spine references unknown manifest ids: {unresolved}")

    meta = Element(
        "metadata",
        Element("dc:identifier", f"urn:uuid:{metadata.unique_id}", id="uid"),
        Element("dc:title", metadata.title),
        Element("dc:creator", metadata.author),
        Element("dc:description", metadata.description),
        Element("dc:language", metadata.language),
        Element("meta", name="cover", content="cover-img") if cover else None,
        Element("meta", metadata.modified_timestamp, property="dcterms:modified"),
        xmlns_dc=DC_NS,
    )
    items = [
        Element("item", id=entry.id, href=entry.href, media_type=entry.media_type, properties=entry.properties)
        for entry in manifest
    ]
    itemrefs = [
        Element("itemref", idref=item.idref, linear=None if item.linear else "no")
        for item in spine
    ]
    guide = None
    if cover:
        guide = Element("guide", Element("reference", type="cover", title="Cover", href=COVER_PAGE))

    package = Element(
        "package",
        meta,
        Element("manifest", items),
        Element("spine", itemrefs, toc="ncx" if legacy_toc else None),
        guide,
        xmlns=OPF_NS,
        version="3.0",
        unique_identifier="uid",
        xml_lang=metadata.language,
    )
    return xml_document(package)


class EpubPackage:
    """Archive members in write order. The mimetype member is always written first."""

    def __init__(self):
        self._members: dict[str, PackageMember] = {}

    def add(self, path: str, data) -> PackageMember:
        if path == MIMETYPE_PATH:
            raise ValueError("The mimetype member is written automatically")
        if path in self._members:
            raise ValueError(f"Duplicate archive member: {path}")
        if isinstance(data, str):
            data = data.encode("utf-8")
        member = PackageMember(path=path, data=data)
        self._members[path] = member
        return member

    @property
    def paths(self) -> list[str]:
        return [MIMETYPE_PATH, *self._members]

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            zf.writestr(MIMETYPE_PATH, MIMETYPE, compress_type=zipfile.ZIP_STORED)
            for member in self._members.values():
                zf.writestr(member.path, member.data)
        return buffer.getvalue()


def _check_consistency(manifest: list[ManifestEntry], content: dict[str, bytes | str]) -> None:
    """Every manifest href has content and every content file has a manifest entry."""
    hrefs = {entry.href for entry in manifest}
    unlisted = sorted(set(content) - hrefs)
    missing = sorted(hrefs - set(content))
    if unlisted or missing:
        raise RuntimeError(
            f"Manifest out of sync with package content "
            f"(unlisted: {unlisted}, missing: {missing})"
        )


def build_epub(
    chapters: list[ChapterInput],
    metadata: BookMetadata,
    cover: CoverAsset | None = None,
    legacy_toc: bool = True,
    cover_linear: bool = True,
    ncx_uid: str | None = None,
    progress: bool = False,
) -> bytes:
    """
    Build a complete EPUB and return it as bytes.
    Raises ConfigurationMissing before any rendering when title, author or
    description is empty.
    """
    missing = metadata.missing_fields()
    if missing:
        raise ConfigurationMissing(missing)

    records = build_chapter_records(chapters, progress=progress)

    content: dict[str, bytes | str] = {STYLESHEET: minify_css(STYLESHEET_CSS)}
    if cover:
        content[cover.file_name] = cover.data
        content[COVER_PAGE] = render_cover_page(cover, stylesheet=STYLESHEET)
    for record in records:
        content[record.file_name] = render_chapter(record, stylesheet=STYLESHEET)
    content[NAV_DOCUMENT] = build_nav_document(records, stylesheet=STYLESHEET)
    if legacy_toc:
        content[NCX_DOCUMENT] = build_ncx(records, metadata, uid=ncx_uid)

    manifest = build_manifest(records, cover, legacy_toc=legacy_toc)
    _check_consistency(manifest, content)
    spine = build_spine(records, cover, cover_linear=cover_linear)
    opf = build_package_document(metadata, manifest, spine, cover, legacy_toc=legacy_toc)

    package = EpubPackage()
    package.add(CONTAINER_PATH, build_container_xml())
    package.add(content_path(PACKAGE_DOCUMENT), opf)
    for entry in manifest:
        package.add(content_path(entry.href), content[entry.href])
    return package.to_bytes()
