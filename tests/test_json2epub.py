import json

import pytest

import cover as cover_module
import sources
from config import BuildConfig
from errors import BuildError, ConfigurationMissing, SchemaViolation
from inspect_epub import read_epub, verify_epub
from json2epub import main, run

GOOD = [{"title": "Ch1", "content": "Para A\n\nPara B"}, {"title": "Ch2", "content": "Solo paragraph"}]
ENV_VARS = ("JSON_URL", "OUTPUT_FILENAME", "BOOK_TITLE", "BOOK_AUTHOR", "BOOK_DESC", "BOOK_LANGUAGE", "DRY_RUN")


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "chapters.json"
    path.write_text(json.dumps(GOOD), encoding="utf-8")
    return path


@pytest.fixture
def config(tmp_path, source):
    return BuildConfig(
        source_url=str(source),
        output_name="Test Book",
        book_title="T",
        book_author="A",
        book_description="D",
        output_dir=tmp_path / "results",
        cover_dir=tmp_path,
    )


@pytest.fixture
def clean_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_run_writes_valid_epub(config, capsys):
    output = run(config)
    assert output == config.output_dir / "Test-Book.epub"
    assert output.exists()
    assert verify_epub(output) == []

    summary = read_epub(output)
    assert (summary.title, summary.author, summary.language) == ("T", "A", "en")
    assert [(c.title, c.href, c.paragraph_count) for c in summary.chapters] == [
        ("Ch1", "c1.xhtml", 2),
        ("Ch2", "c2.xhtml", 1),
    ]
    assert "Done! EPUB saved to" in capsys.readouterr().out


def test_run_with_cover_and_verify(config, tmp_path, capsys):
    (tmp_path / "cover.jpg").write_bytes(b"\xff\xd8\xff\xe0fakejpeg")
    (tmp_path / "cover.png").write_bytes(b"\x89PNGfake")
    config.verify = True
    output = run(config)
    out = capsys.readouterr().out
    assert "Cover image: cover.jpg" in out
    assert "Verified" in out
    assert verify_epub(output) == []


def test_missing_author_fails_before_fetch(config, monkeypatch):
    def no_fetch(*args, **kwargs):
        raise AssertionError("fetch attempted")

    monkeypatch.setattr(sources, "load_chapters", no_fetch)
    config.book_author = ""
    with pytest.raises(ConfigurationMissing) as exc:
        run(config)
    assert any("book_author" in name for name in exc.value.missing)
    assert not config.output_dir.exists()


def test_dry_run_writes_nothing(config, capsys):
    config.dry_run = True
    output = run(config)
    assert output == config.output_dir / "Test-Book.epub"
    assert not config.output_dir.exists()
    assert "Would have written" in capsys.readouterr().out


def test_schema_violation_writes_nothing(config, source):
    source.write_text(json.dumps([{"title": "no content"}]), encoding="utf-8")
    with pytest.raises(SchemaViolation):
        run(config)
    assert not config.output_dir.exists()


def test_main_success(clean_env, tmp_path, source):
    main([
        "--source", str(source),
        "--output-name", "Flag Book",
        "--title", "T",
        "--author", "A",
        "--description", "D",
        "--no-ncx",
        "--verify",
    ])
    output = tmp_path / "results" / "Flag-Book.epub"
    assert output.exists()
    assert verify_epub(output) == []
    assert [c.title for c in read_epub(output).chapters] == ["Ch1", "Ch2"]


def test_main_reads_environment(clean_env, monkeypatch, tmp_path, source):
    monkeypatch.setenv("JSON_URL", str(source))
    monkeypatch.setenv("OUTPUT_FILENAME", "Env Book")
    monkeypatch.setenv("BOOK_TITLE", "T")
    monkeypatch.setenv("BOOK_AUTHOR", "A")
    monkeypatch.setenv("BOOK_DESC", "D")
    monkeypatch.setenv("DRY_RUN", "1")
    main([])
    assert not (tmp_path / "results").exists()


def test_main_missing_config_exits_nonzero(clean_env, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--title", "T"])
    assert exc.value.code == 1
    out = capsys.readouterr().out
    assert out.startswith("ERROR: Missing required configuration")
    for name in ("source_url", "output_name", "book_author", "book_description"):
        assert name in out


def test_unwritable_output_is_a_build_error(config):
    config.output_dir.parent.mkdir(parents=True, exist_ok=True)
    config.output_dir.write_text("not a directory")
    with pytest.raises(BuildError, match="Could not write"):
        run(config)


def test_unreadable_cover_is_a_build_error(config, monkeypatch):
    def denied(directory):
        raise PermissionError(13, "Permission denied", str(directory / "cover.jpg"))

    monkeypatch.setattr(cover_module, "detect_cover", denied)
    with pytest.raises(BuildError, match="Could not read cover image"):
        run(config)


def test_main_reports_write_failure(clean_env, tmp_path, source, capsys):
    (tmp_path / "results").write_text("not a directory")
    with pytest.raises(SystemExit) as exc:
        main([
            "--source", str(source),
            "--output-name", "Blocked",
            "--title", "T",
            "--author", "A",
            "--description", "D",
        ])
    assert exc.value.code == 1
    assert "ERROR: Could not write" in capsys.readouterr().out
