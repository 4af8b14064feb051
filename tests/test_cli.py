"""Tests for command-line interface functionality."""

import json
import logging
from pathlib import Path

import pytest

from optout.cli import (
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_OPTION_ERROR,
    EXIT_SUCCESS,
    EXIT_USAGE_ERROR,
    LOG,
    RenderContext,
    main,
    parse_arguments,
    run,
)
from optout.option import Quoting
from optout.schema import Form

SCHEMA = """\
options:
  - key: all
    switch: -a
    boolean: true
  - key: size
    switch: -b
    pattern: '^\\d+$'
  - key: file
"""


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text(SCHEMA, encoding="utf-8")
    return path


@pytest.fixture
def values_file(tmp_path):
    def write(text):
        path = tmp_path / "values.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    return write


# ---------- Argument parsing ----------


def test_parse_arguments_returns_schema_path(tmp_path):
    ns = parse_arguments([str(tmp_path)])
    assert isinstance(ns.schema, Path)
    assert ns.schema == tmp_path
    assert ns.input is None
    assert ns.format == "argv"
    assert ns.quoting is None


def test_parse_arguments_all_options(tmp_path):
    ns = parse_arguments(
        [str(tmp_path), "-i", "values.yaml", "-f", "shell", "-q", "windows", "-vv"]
    )
    assert ns.input == Path("values.yaml")
    assert ns.format == "shell"
    assert ns.quoting == "windows"
    assert ns.verbose == 2


def test_parse_arguments_requires_schema():
    # Argparse should exit with code 2 when required positional arg is missing
    with pytest.raises(SystemExit) as exc:
        parse_arguments([])
    assert exc.value.code == 2


def test_parse_arguments_rejects_unknown_format(tmp_path):
    with pytest.raises(SystemExit) as exc:
        parse_arguments([str(tmp_path), "-f", "xml"])
    assert exc.value.code == 2


def test_parse_arguments_version_flag_prints_version_and_exits(monkeypatch, capsys):
    import importlib.metadata as im

    monkeypatch.setattr(im, "version", lambda _: "1.2.3")
    with pytest.raises(SystemExit) as exc:
        parse_arguments(["-V"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "optout 1.2.3" in out


def test_parse_arguments_version_flag_without_package(monkeypatch, capsys):
    import importlib.metadata as im
    from importlib.metadata import PackageNotFoundError

    def raise_not_found(_):
        raise PackageNotFoundError

    monkeypatch.setattr(im, "version", raise_not_found)

    with pytest.raises(SystemExit) as exc:
        parse_arguments(["-V"])
    assert exc.value.code == 0

    out = capsys.readouterr().out
    assert out.startswith("optout ")
    assert "0.0.0+local" in out


# ---------- Runner behavior ----------


def test_run_renders_argv(schema_file, values_file, capsys):
    values = values_file("all: true\nsize: 1024\nfile: some file\n")
    rc = run(RenderContext(schema_path=schema_file, values_path=values))
    assert rc == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert json.loads(out) == ["-a", "-b", "1024", "some file"]


def test_run_renders_shell(schema_file, values_file, capsys):
    values = values_file("all: true\nfile: it's here\n")
    rc = run(
        RenderContext(schema_path=schema_file, values_path=values, form=Form.SHELL)
    )
    assert rc == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert out.strip() == r"-a 'it'\''s here'"


def test_run_shell_with_windows_quoting(schema_file, values_file, capsys):
    values = values_file("file: a b\n")
    context = RenderContext(
        schema_path=schema_file,
        values_path=values,
        form=Form.SHELL,
        quoting=Quoting.WINDOWS,
    )
    assert run(context) == EXIT_SUCCESS
    assert capsys.readouterr().out.strip() == '"a b"'


def test_run_without_values(schema_file, capsys):
    assert run(RenderContext(schema_path=schema_file)) == EXIT_SUCCESS
    assert json.loads(capsys.readouterr().out) == []


def test_run_reports_schema_on_stderr(schema_file, capsys):
    run(RenderContext(schema_path=schema_file))
    err = capsys.readouterr().err
    assert "Using schema:" in err
    assert "schema.yaml" in err


def test_run_option_error_returns_1(schema_file, values_file, capsys, caplog):
    caplog.set_level(logging.INFO, logger="optout.cli")
    values = values_file("size: lots\n")
    rc = run(RenderContext(schema_path=schema_file, values_path=values))
    assert rc == EXIT_OPTION_ERROR
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "does not match pattern" in captured.err
    assert any("Rejected option size" in r.getMessage() for r in caplog.records)


def test_run_unknown_key_returns_1(schema_file, values_file, capsys):
    values = values_file("bogus: 1\n")
    rc = run(RenderContext(schema_path=schema_file, values_path=values))
    assert rc == EXIT_OPTION_ERROR
    assert "option unknown: 'bogus'" in capsys.readouterr().err


def test_run_missing_schema_returns_2(tmp_path, capsys):
    rc = run(RenderContext(schema_path=tmp_path / "nope.yaml"))
    assert rc == EXIT_USAGE_ERROR
    assert "File not found" in capsys.readouterr().err


def test_run_invalid_schema_returns_2(tmp_path, capsys):
    path = tmp_path / "schema.yaml"
    path.write_text("options: nope\n", encoding="utf-8")
    assert run(RenderContext(schema_path=path)) == EXIT_USAGE_ERROR
    assert "'options' must be a list" in capsys.readouterr().err


def test_run_undecodable_schema_returns_2(tmp_path, capsys):
    path = tmp_path / "schema.yaml"
    path.write_bytes(b"\xff\xfe")
    assert main([str(path)]) == EXIT_USAGE_ERROR
    assert "Could not decode" in capsys.readouterr().err


def test_run_bad_separator_in_schema_returns_2(tmp_path, capsys):
    path = tmp_path / "schema.yaml"
    path.write_text(
        "options:\n  - key: x\n    switch: -x\n    arg_separator: 5\n", encoding="utf-8"
    )
    assert main([str(path)]) == EXIT_USAGE_ERROR
    assert "'arg_separator' must be a string" in capsys.readouterr().err


def test_run_invalid_values_returns_2(schema_file, values_file):
    values = values_file("- not\n- a mapping\n")
    rc = run(RenderContext(schema_path=schema_file, values_path=values))
    assert rc == EXIT_USAGE_ERROR


# ---------- main() integration ----------


def test_main_success_integration(schema_file, values_file, capsys):
    values = values_file("all: true\n")
    rc = main([str(schema_file), "-i", str(values), "-f", "shell"])
    assert rc == EXIT_SUCCESS
    assert capsys.readouterr().out.strip() == "-a"


def test_main_keyboard_interrupt_returns_130(monkeypatch, tmp_path):
    def raise_kbi(_):
        raise KeyboardInterrupt

    monkeypatch.setattr("optout.cli.run", raise_kbi)
    rc = main([str(tmp_path / "schema.yaml")])
    assert rc == EXIT_KEYBOARD_INTERRUPT


def test_main_passes_context(monkeypatch, tmp_path):
    received = []
    monkeypatch.setattr("optout.cli.run", lambda context: received.append(context) or 0)
    main([str(tmp_path / "s.yaml"), "-f", "shell", "-q", "posix"])
    assert received == [
        RenderContext(
            schema_path=tmp_path / "s.yaml",
            form=Form.SHELL,
            quoting=Quoting.POSIX,
        )
    ]


def test_verbose_enables_info_logging(schema_file):
    rc = main(["-v", str(schema_file)])
    assert rc == EXIT_SUCCESS
    assert LOG.isEnabledFor(logging.INFO)
    assert not LOG.isEnabledFor(logging.DEBUG)


def test_verbose_double_enables_debug_logging(schema_file):
    rc = main(["-vv", str(schema_file)])
    assert rc == EXIT_SUCCESS
    assert LOG.isEnabledFor(logging.DEBUG)


def test_quiet_is_warning_level(schema_file):
    rc = main([str(schema_file)])
    assert rc == EXIT_SUCCESS
    assert not LOG.isEnabledFor(logging.INFO)
