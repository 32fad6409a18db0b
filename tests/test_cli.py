from __future__ import annotations

import os
import shlex
import subprocess
import sys
from pathlib import Path

import pytest

from infopage import cli
from infopage.errors import PagerError

from conftest import EXPECTED_TAR, write_page

REPO_ROOT = Path(__file__).resolve().parents[1]


def test_no_page_is_usage_error(capsys):
    assert cli.main([]) == 1

    assert capsys.readouterr().err == "infopage: which page?\n"


def test_missing_page(info_dir, capsys):
    assert cli.main(["nonexistent"]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == 'infopage: no page for "nonexistent"\n'


def test_prints_when_not_a_terminal(tar_page, capsys):
    assert cli.main(["tar"]) == 0

    assert capsys.readouterr().out == EXPECTED_TAR + "\n"


def test_prints_split_manual(split_page, capsys):
    assert cli.main(["foo"]) == 0

    assert capsys.readouterr().out == "This is foo.info.\n\nFirst part.\n\nSecond part.\n\n"


def test_missing_included_page(split_page, capsys):
    (split_page / "foo.info-2.gz").unlink()

    assert cli.main(["foo"]) == 1

    assert 'could not find included page "foo.info-2"' in capsys.readouterr().err


def test_pages_on_terminal(tar_page, capsys, monkeypatch):
    paged = []
    monkeypatch.setattr(sys.stdout, "isatty", lambda: True)
    monkeypatch.setattr(cli, "page_text", paged.append)

    assert cli.main(["tar"]) == 0

    assert paged == [EXPECTED_TAR]
    assert capsys.readouterr().out == ""


def test_pager_failure(tar_page, capsys, monkeypatch):
    def fail(text):
        raise PagerError("less", OSError("boom"))

    monkeypatch.setattr(sys.stdout, "isatty", lambda: True)
    monkeypatch.setattr(cli, "page_text", fail)

    assert cli.main(["tar"]) == 1

    assert capsys.readouterr().err.startswith("infopage: pager 'less' failed")


def test_apropos(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(cli, "ensure_index_exists", lambda *args, **kwargs: calls.append(args))

    import infopage.rag

    monkeypatch.setattr(infopage.rag, "search_vector_database", lambda query, top_k: [
        {"page": "tar", "semantic_summary": "Making tape (and other) archives."},
        {"page": "gzip", "semantic_summary": "General (de)compression of files."},
    ])

    assert cli.main(["--apropos", "archive", "-n", "1"]) == 0

    assert calls == [(False, cli.DEFAULT_WORKERS)]
    out = capsys.readouterr().out
    assert out == " 1. tar                  Making tape (and other) archives.\n"


def test_print_results_empty(capsys):
    cli.print_results([], 5)

    assert capsys.readouterr().out == "No results found.\n"


def test_unknown_option_exits_with_argparse_status():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--bogus"])

    assert exc_info.value.code == 2


def test_reader_closing_pipe_early(info_dir):
    lines = b"".join(b"Line %d of a long manual.\n" % i for i in range(200000))
    write_page(info_dir, "big.info", b"\x1f\nFile: big.info,  Node: Top\n\n" + lines)
    env = dict(os.environ, INFOPATH=str(info_dir), PYTHONPATH=str(REPO_ROOT))

    result = subprocess.run(
        f"{shlex.quote(sys.executable)} -m infopage big | head -1",
        shell=True, capture_output=True, env=env,
    )

    assert result.stdout == b"Line 0 of a long manual.\n"
    assert b"Traceback" not in result.stderr
    assert b"BrokenPipeError" not in result.stderr


def test_broken_pipe_exits_quietly(capsys, monkeypatch):
    def broken(name):
        raise BrokenPipeError(32, "Broken pipe")

    monkeypatch.setattr(cli, "show_page", broken)

    assert cli.main(["tar"]) == 1

    assert capsys.readouterr().err == ""


def test_undecodable_bytes_printed_unchanged(info_dir, capfdbinary):
    write_page(info_dir, "caf.info", b"\x1f\nFile: caf.info,  Node: Top\n\nCaf\xe9 au lait.\n")

    assert cli.main(["caf"]) == 0

    assert capfdbinary.readouterr().out == b"Caf\xe9 au lait.\n\n"
