"""sources/file_source.py — Read the chapter list from a local JSON file."""

import json
from pathlib import Path
from urllib.parse import unquote, urlparse

from errors import FetchFailure
from models import ChapterInput
from sources.base import validate_chapters


def _to_path(source: str) -> Path:
    if source.lower().startswith("file://"):
        return Path(unquote(urlparse(source).path))
    return Path(source)


def read_chapters(source: str) -> list[ChapterInput]:
    path = _to_path(source)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise FetchFailure(source, e) from e
    except ValueError as e:
        raise FetchFailure(source, f"file is not valid JSON ({e})") from e

    return validate_chapters(data)
