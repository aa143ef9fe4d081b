"""config.py — Build configuration from .env, the environment, and CLI overrides."""

import os
import re
from dataclasses import dataclass, fields
from pathlib import Path

from dotenv import load_dotenv

from errors import ConfigurationMissing

ENV_FILE = Path(".env")

# Config field -> environment variable
ENV_VARS = {
    "source_url": "JSON_URL",
    "output_name": "OUTPUT_FILENAME",
    "book_title": "BOOK_TITLE",
    "book_author": "BOOK_AUTHOR",
    "book_description": "BOOK_DESC",
    "language": "BOOK_LANGUAGE",
    "dry_run": "DRY_RUN",
}

REQUIRED_FIELDS = ("source_url", "output_name", "book_title", "book_author", "book_description")

TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class BuildConfig:
    source_url: str = ""
    output_name: str = ""
    book_title: str = ""
    book_author: str = ""
    book_description: str = ""
    language: str = "en"
    dry_run: bool = False
    output_dir: Path = Path("results")
    cover_dir: Path = Path(".")
    legacy_toc: bool = True
    verify: bool = False

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not (getattr(self, name) or "").strip()]

    def validate(self) -> "BuildConfig":
        """Raise ConfigurationMissing naming every absent required value."""
        missing = self.missing_fields()
        if missing:
            raise ConfigurationMissing([f"{name} ({ENV_VARS[name]})" for name in missing])
        return self

    @property
    def output_path(self) -> Path:
        """results/<output name with whitespace runs turned into hyphens>.epub"""
        safe_name = re.sub(r"\s+", "-", self.output_name)
        return Path(self.output_dir) / f"{safe_name}.epub"


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


def load_config(overrides: dict | None = None, env: dict | None = None) -> BuildConfig:
    """
    Merge configuration sources, lowest priority first:
    1. .env file (only when reading the real environment)
    2. environment variables (or the `env` mapping, for tests)
    3. explicit overrides (CLI flags); None values are ignored

    Does not validate; call BuildConfig.validate() before using the result.
    """
    if env is None:
        load_dotenv(ENV_FILE)
        env = os.environ

    values = {}
    for name, var in ENV_VARS.items():
        raw = (env.get(var) or "").strip()
        if raw:
            values[name] = raw

    known = {f.name for f in fields(BuildConfig)}
    for name, value in (overrides or {}).items():
        if name not in known:
            raise TypeError(f"Unknown configuration field: {name}")
        if value is not None:
            values[name] = value

    if "dry_run" in values:
        values["dry_run"] = parse_bool(values["dry_run"])
    for name in ("output_dir", "cover_dir"):
        if name in values:
            values[name] = Path(values[name])

    return BuildConfig(**values)
