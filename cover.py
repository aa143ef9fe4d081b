"""cover.py — Find an optional cover image next to the working directory."""

from pathlib import Path

from models import CoverAsset

COVER_CANDIDATES = ("cover.jpg", "cover.jpeg", "cover.png")

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}


def detect_cover(directory: Path | str = ".") -> CoverAsset | None:
    """Return the first cover.jpg / cover.jpeg / cover.png found, or None."""
    directory = Path(directory)
    for name in COVER_CANDIDATES:
        candidate = directory / name
        if candidate.is_file():
            return CoverAsset(
                file_name=name,
                media_type=MIME_TYPES[candidate.suffix.lower()],
                data=candidate.read_bytes(),
            )
    return None
