"""sources/http_source.py — Fetch the chapter list over HTTP(S)."""

import requests

from errors import FetchFailure
from models import ChapterInput
from sources.base import validate_chapters


def fetch_chapters(url: str, timeout: float = 30) -> list[ChapterInput]:
    """GET `url` and validate the JSON body. One attempt, no retries."""
    try:
        response = requests.get(url, timeout=timeout, headers={"Accept": "application/json"})
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise FetchFailure(url, e) from e

    try:
        data = response.json()
    except ValueError as e:
        raise FetchFailure(url, f"response is not valid JSON ({e})") from e

    return validate_chapters(data)
