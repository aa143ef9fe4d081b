#!/usr/bin/env python3
"""
json2epub — Convert a JSON list of {title, content} chapters into an EPUB.

Configuration comes from .env / environment variables, overridable by flags:
  JSON_URL, OUTPUT_FILENAME, BOOK_TITLE, BOOK_AUTHOR, BOOK_DESC
Optional:
  BOOK_LANGUAGE (default: en), DRY_RUN=1

A cover.jpg, cover.jpeg or cover.png in the working directory is used as the
cover image, checked in that order.

Quick start:
  1. Put JSON_URL, OUTPUT_FILENAME, BOOK_TITLE, BOOK_AUTHOR, BOOK_DESC in .env
  2. python json2epub.py --dry-run
  3. python json2epub.py
"""

import argparse
import sys
from pathlib import Path

from config import BuildConfig, load_config
from errors import BuildError


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a JSON chapter list into an EPUB e-book",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Dry run: fetch and list chapters, write nothing:
  python json2epub.py --dry-run

  # Everything from flags instead of .env:
  python json2epub.py --source https://example.com/book.json \\
      --output-name "My Book" --title "My Book" --author "Jane Doe" \\
      --description "A short novel"

  # Build from a local file and check the result:
  python json2epub.py --source chapters.json --verify
        """,
    )
    parser.add_argument(
        "--source", dest="source_url", default=None, metavar="URL_OR_PATH",
        help="Chapter list JSON: http(s) URL, file:// URL or local path (env: JSON_URL)",
    )
    parser.add_argument(
        "--output-name", default=None, metavar="NAME",
        help="Output file name without extension; whitespace becomes '-' (env: OUTPUT_FILENAME)",
    )
    parser.add_argument("--title", dest="book_title", default=None, help="Book title (env: BOOK_TITLE)")
    parser.add_argument("--author", dest="book_author", default=None, help="Book author (env: BOOK_AUTHOR)")
    parser.add_argument(
        "--description", dest="book_description", default=None, help="Book description (env: BOOK_DESC)",
    )
    parser.add_argument(
        "--language", default=None, metavar="CODE", help="Book language code (env: BOOK_LANGUAGE, default: en)",
    )
    parser.add_argument(
        "--output-dir", type=Path, default=None, metavar="DIR",
        help="Directory for the finished EPUB (default: ./results)",
    )
    parser.add_argument(
        "--cover-dir", type=Path, default=None, metavar="DIR",
        help="Directory searched for cover.jpg/.jpeg/.png (default: current directory)",
    )
    parser.add_argument(
        "--no-ncx", dest="legacy_toc", action="store_false", default=None,
        help="Skip the EPUB 2 toc.ncx (nav document only)",
    )
    parser.add_argument(
        "--verify", action="store_true", default=None,
        help="Re-open the written EPUB and check its structure",
    )
    parser.add_argument(
        "--dry-run", action="store_true", default=None,
        help="Fetch and list chapters without writing the EPUB (env: DRY_RUN=1)",
    )
    return parser.parse_args(argv)


def print_chapter_list(chapters, config: BuildConfig | None = None):
    if config:
        print(f"Title:  {config.book_title}")
        print(f"Author: {config.book_author}")
        print(f"Lang:   {config.language}")
    print(f"\nFound {len(chapters)} chapters:")
    print("-" * 70)
    total_words = 0
    for index, ch in enumerate(chapters, start=1):
        word_count = len(ch.content.split())
        total_words += word_count
        print(f"  {index:3d}. {ch.title[:50]:<50} {word_count:>8} words")
    print("-" * 70)
    print(f"  Total: {total_words:,} words")
    print()


def run(config: BuildConfig) -> Path:
    """
    Fetch, build and write one book. Returns the output path (the would-be
    path on a dry run). Configuration is validated before anything is fetched.
    """
    config.validate()

    from cover import detect_cover
    from epub_builder import build_epub
    from models import BookMetadata
    from sources import load_chapters

    metadata = BookMetadata(
        title=config.book_title,
        author=config.book_author,
        description=config.book_description,
        language=config.language,
    )

    print(f"Fetching: {config.source_url}")
    chapters = load_chapters(config.source_url)
    print_chapter_list(chapters, config)

    try:
        cover = detect_cover(config.cover_dir)
    except OSError as e:
        raise BuildError(f"Could not read cover image in {config.cover_dir}: {e}") from e
    if cover:
        print(f"Cover image: {cover.file_name} ({cover.media_type}, {len(cover.data) // 1024} KB)")
    else:
        print("Cover image: none")

    output_path = config.output_path

    if config.dry_run:
        print(f"Dry run complete. Would have written: {output_path}")
        return output_path

    print("=== Building EPUB ===\n")
    data = build_epub(chapters, metadata, cover=cover, legacy_toc=config.legacy_toc, progress=True)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
    except OSError as e:
        raise BuildError(f"Could not write {output_path}: {e}") from e
    print(f"\nDone! EPUB saved to: {output_path} ({len(data) // 1024} KB)")

    if config.verify:
        from inspect_epub import verify_epub

        problems = verify_epub(output_path)
        if problems:
            raise BuildError("EPUB failed verification:\n  " + "\n  ".join(problems))
        print("Verified: archive structure OK")

    return output_path


def main(argv=None):
    args = parse_args(argv)
    overrides = {name: value for name, value in vars(args).items() if value is not None}

    try:
        config = load_config(overrides)
        run(config)
    except BuildError as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
