"""models.py — Shared data types for json2epub."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class ChapterInput:
    title: str
    content: str     # Raw text, paragraphs separated by blank lines


@dataclass(frozen=True)
class ChapterRecord:
    index: int       # 1-based
    id: str          # Manifest id, e.g. "c1"
    file_name: str   # Archive name under OEBPS/, e.g. "c1.xhtml"
    title: str       # Raw (unescaped) title
    body: str        # Rendered <p> fragment, already escaped


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass(frozen=True)
class BookMetadata:
    title: str
    author: str
    description: str
    language: str = "en"
    unique_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    modified: datetime = field(default_factory=_utc_now)

    @property
    def modified_timestamp(self) -> str:
        """dcterms:modified value, e.g. 2024-05-01T12:00:00Z."""
        return self.modified.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def missing_fields(self) -> list[str]:
        return [
            name for name in ("title", "author", "description")
            if not (getattr(self, name) or "").strip()
        ]


@dataclass(frozen=True)
class CoverAsset:
    file_name: str   # e.g. "cover.jpg"
    media_type: str  # "image/jpeg" or "image/png"
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class ManifestEntry:
    id: str
    href: str
    media_type: str
    properties: str | None = None


@dataclass(frozen=True)
class PackageMember:
    path: str        # Full archive path, e.g. "OEBPS/c1.xhtml"
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class SpineItem:
    idref: str
    linear: bool = True
