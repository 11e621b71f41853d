"""Unit tests for CLI command handling."""

from __future__ import annotations

import gzip

from cli.main import main


def test_cli_put_then_get_prints_value(tmp_path, capsys) -> None:
    """A stored entry is flushed on exit and readable by a later command."""
    put_code = main(["--data-root", str(tmp_path), "put", "roads", "title", "Main roads"])
    get_code = main(["--data-root", str(tmp_path), "get", "roads", "title"])
    output = capsys.readouterr().out.strip()

    assert (put_code, get_code) == (0, 0)
    assert output == "Main roads"


def test_cli_get_lists_all_entries(tmp_path, capsys) -> None:
    """Without a key every entry is printed decoded and sorted."""
    main(["--data-root", str(tmp_path), "put", "roads", "b", "x y"])
    main(["--data-root", str(tmp_path), "put", "roads", "a", "1"])

    exit_code = main(["--data-root", str(tmp_path), "get", "roads"])
    output = capsys.readouterr().out.splitlines()

    assert exit_code == 0 and output == ["a=1", "b=x y"]


def test_cli_get_missing_key_exits_nonzero(tmp_path, capsys) -> None:
    """An absent key prints nothing and fails."""
    exit_code = main(["--data-root", str(tmp_path), "get", "roads", "missing"])

    assert exit_code == 1 and capsys.readouterr().out == ""


def test_cli_reports_load_errors(tmp_path, capsys) -> None:
    """A corrupt metadata file is reported instead of raising."""
    layer_dir = tmp_path / "roads"
    layer_dir.mkdir()
    (layer_dir / "metadata.properties.gz").write_bytes(gzip.compress(b"k=\\uZZZZ\n"))

    exit_code = main(["--data-root", str(tmp_path), "get", "roads"])

    assert exit_code == 1
    assert capsys.readouterr().out.startswith("load_error=")


def test_cli_path_points_at_compressed_file_after_put(tmp_path, capsys) -> None:
    """The resolved path switches to the compressed file once written."""
    main(["--data-root", str(tmp_path), "put", "roads", "k", "v"])

    main(["--data-root", str(tmp_path), "path", "roads"])
    output = capsys.readouterr().out.strip()

    assert output.endswith("metadata.properties.gz")


def test_cli_reports_flush_errors(tmp_path, capsys) -> None:
    """A layer directory blocked by a file fails the put with an error line."""
    (tmp_path / "roads").write_text("blocking file", encoding="utf-8")

    exit_code = main(["--data-root", str(tmp_path), "put", "roads", "k", "v"])

    assert exit_code == 1
    assert capsys.readouterr().out.startswith("store_error=")


def test_cli_reports_config_errors(tmp_path, capsys, monkeypatch) -> None:
    """Invalid environment configuration is reported instead of raising."""
    monkeypatch.setenv("LAYER_METADATA_FLUSH_INTERVAL", "soon")

    exit_code = main(["--data-root", str(tmp_path), "get", "roads"])

    assert exit_code == 1
    assert capsys.readouterr().out.startswith("store_error=")
