from __future__ import annotations

import os
from pathlib import Path

import pytest

from preload_converter import __version__
from preload_converter.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_OK,
    build_parser,
    main,
    options_from_args,
)
from preload_converter.models import Operation


def test_pld2text_arguments():
    args = build_parser().parse_args(["pld2text", "in.pld", "out.txt"])
    opts = options_from_args(args)
    assert opts.operation == Operation.EXTRACT
    assert opts.input_path == Path("in.pld")
    assert opts.output_path == Path("out.txt")
    assert opts.output_extension is None
    assert opts.function_name is None
    assert (opts.watch, opts.skip_initial_run, opts.escape) == (False, False, True)


def test_text2pld_arguments_with_extension():
    args = build_parser().parse_args(["--watch", "text2pld", "src", "build", "PreloadFiles", "pld"])
    opts = options_from_args(args)
    assert opts.operation == Operation.COMPILE
    assert opts.function_name == "PreloadFiles"
    assert opts.output_extension == ".pld"
    assert opts.watch is True
    assert opts.skip_initial_run is False


def test_watch_skip_implies_watch():
    args = build_parser().parse_args(["-s", "pld2text", "a", "b"])
    opts = options_from_args(args)
    assert opts.watch is True
    assert opts.skip_initial_run is True


def test_no_escape_flag_and_env(monkeypatch):
    args = build_parser().parse_args(["--no-escape", "pld2text", "a", "b"])
    assert options_from_args(args).escape is False

    monkeypatch.setenv("ESCAPE_PAYLOAD", "false")
    from preload_converter.config import get_settings

    get_settings.cache_clear()
    args = build_parser().parse_args(["pld2text", "a", "b"])
    assert options_from_args(args).escape is False


def test_text2pld_requires_function_name():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["text2pld", "in.txt", "out.pld"])


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_main_pld2text_file(sample_pld: Path, tmp_path: Path):
    out = tmp_path / "out.txt"
    assert main(["--log-level", "INFO", "pld2text", str(sample_pld), str(out)]) == EXIT_OK
    assert out.read_bytes() == f"payload line 1{os.linesep}payload line 2".encode("utf-8")


def test_main_text2pld_folder(tmp_path: Path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "one.txt").write_text("hello\n", encoding="utf-8")
    out = tmp_path / "build"

    assert main(["text2pld", str(src), str(out), "PreloadFiles", ".pld"]) == EXIT_OK
    data = (out / "one.pld").read_bytes().decode("utf-8")
    assert data.startswith("function PreloadFiles takes nothing returns nothing\r\n")
    assert '    call Preload("hello")\r\n' in data


def test_main_folder_without_extension_is_config_error(tmp_path: Path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "one.txt").write_text("hello\n", encoding="utf-8")
    assert main(["text2pld", str(src), str(tmp_path / "build"), "PreloadFiles"]) == EXIT_CONFIG_ERROR
    assert not (tmp_path / "build").exists()


def test_main_missing_input_is_config_error(tmp_path: Path):
    assert main(["pld2text", str(tmp_path / "missing.pld"), str(tmp_path / "out.txt")]) == EXIT_CONFIG_ERROR


def test_main_bad_extension_is_config_error(tmp_path: Path):
    assert main(["pld2text", str(tmp_path), str(tmp_path / "out"), "."]) == EXIT_CONFIG_ERROR


def test_main_job_failure_still_exits_ok(tmp_path: Path):
    src = tmp_path / "in.txt"
    src.write_text("x\n", encoding="utf-8")
    # output parent does not exist: the job fails, the invocation does not
    assert main(["text2pld", str(src), str(tmp_path / "nope" / "out.pld"), "F"]) == EXIT_OK


def test_main_non_numeric_setting_is_config_error(monkeypatch, sample_pld: Path, tmp_path: Path):
    monkeypatch.setenv("MAX_CONCURRENT_JOBS", "abc")
    out = tmp_path / "out.txt"
    assert main(["pld2text", str(sample_pld), str(out)]) == EXIT_CONFIG_ERROR
    assert not out.exists()
