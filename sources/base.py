"""sources/base.py — Validate decoded chapter lists."""

from errors import SchemaViolation
from models import ChapterInput

REQUIRED_KEYS = ("title", "content")


def validate_chapters(data) -> list[ChapterInput]:
    """
    Check that `data` is a non-empty list of {title, content} objects with
    non-empty string values. Whitespace-only strings are kept as given.
    Reports every offending element at once.
    """
    if not isinstance(data, list):
        raise SchemaViolation([f"expected a list, got {type(data).__name__}"])
    if not data:
        raise SchemaViolation(["the chapter list is empty"])

    problems = []
    for position, item in enumerate(data):
        if not isinstance(item, dict):
            problems.append(f"item {position} is {type(item).__name__}, not an object")
            continue
        for key in REQUIRED_KEYS:
            value = item.get(key)
            if not isinstance(value, str) or not value:
                problems.append(f"item {position} has no usable '{key}'")
    if problems:
        raise SchemaViolation(problems)

    return [ChapterInput(title=item["title"], content=item["content"]) for item in data]
