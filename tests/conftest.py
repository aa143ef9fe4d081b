from datetime import datetime, timezone

import pytest

from models import BookMetadata, ChapterInput, CoverAsset

FAKE_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def chapters():
    return [
        ChapterInput(title="Ch1", content="Para A\n\nPara B"),
        ChapterInput(title="Ch2", content="Solo paragraph"),
    ]


@pytest.fixture
def metadata():
    return BookMetadata(
        title="T",
        author="A",
        description="D",
        unique_id="00000000-0000-4000-8000-000000000001",
        modified=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


@pytest.fixture
def cover():
    return CoverAsset(file_name="cover.png", media_type="image/png", data=FAKE_PNG)
