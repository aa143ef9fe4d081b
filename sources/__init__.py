"""sources/ — Load the chapter list from a URL or a local JSON file."""

from pathlib import Path

from models import ChapterInput

REMOTE_SCHEMES = ("http://", "https://")


def load_chapters(source: str | Path, timeout: float = 30) -> list[ChapterInput]:
    """Dispatch to the HTTP or file loader based on the source string."""
    source_str = str(source)

    if source_str.lower().startswith(REMOTE_SCHEMES):
        from sources.http_source import fetch_chapters
        return fetch_chapters(source_str, timeout=timeout)
    else:
        from sources.file_source import read_chapters
        return read_chapters(source_str)
