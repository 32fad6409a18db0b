"""Pytest configuration and fixtures."""
from __future__ import annotations

import gzip
from pathlib import Path

import pytest


TAR_PREAMBLE = (
    "This is tar.info, produced by makeinfo version 6.7 from tar.texi.\n"
    "\n"
    "INFO-DIR-SECTION Archiving\n"
    "START-INFO-DIR-ENTRY\n"
    "* Tar: (tar).                   Making tape (and other) archives.\n"
    "END-INFO-DIR-ENTRY"
)

TAR_TOP = "GNU tar\n*******\n\nThis manual is for tar."

TAR_INTRO = "1 Introduction\n**************\n\nTar makes archives.\n\nMore text."

RAW_TAR = (
    TAR_PREAMBLE.encode() + b"\n\n"
    b"\x1f\nFile: tar.info,  Node: Top,  Next: Introduction,  Up: (dir)\n\n"
    b"GNU tar\n*******\n\nThis manual is for tar.\n\n"
    b"* Menu:\n\n"
    b"* Introduction::\n"
    b"* Tutorial::  A quick tour\n"
    b"\n"
    b"\x1f\nFile: tar.info,  Node: Introduction,  Prev: Top,  Up: Top\n\n"
    b"1 Introduction\n**************\n\nTar makes archives.\n\n\n\n\nMore text.\n"
    b"\x1f\nTag Table:\nNode: Top\x7f230\nNode: Introduction\x7f520\n"
    b"\x1f\nEnd Tag Table\n"
)

EXPECTED_TAR = "\n\n".join([TAR_PREAMBLE, TAR_TOP, TAR_INTRO]) + "\n"

RAW_SPLIT_PRIMARY = (
    b"This is foo.info.\n\n"
    b"\x1f\nIndirect:\nfoo.info-1: 10\nfoo.info-2: 20\n"
    b"\x1f\nTag Table:\n(Indirect)\nNode: Top\x7f10\n"
    b"\x1f\nEnd Tag Table\n"
)

RAW_SPLIT_PART_1 = b"\x1f\nFile: foo.info,  Node: Top,  Next: Two\n\nFirst part.\n"

RAW_SPLIT_PART_2 = b"\x1f\nFile: foo.info,  Node: Two,  Prev: Top\n\nSecond part.\n"


def write_page(directory: Path, filename: str, data: bytes, compress: bool = False) -> Path:
    """Write a raw info file, gzipped when asked."""
    if compress:
        path = directory / (filename + ".gz")
        path.write_bytes(gzip.compress(data))
    else:
        path = directory / filename
        path.write_bytes(data)
    return path


@pytest.fixture
def info_dir(tmp_path, monkeypatch):
    """An empty info directory that INFOPATH points at."""
    directory = tmp_path / "info"
    directory.mkdir()
    monkeypatch.setenv("INFOPATH", str(directory))
    return directory


@pytest.fixture
def tar_page(info_dir):
    return write_page(info_dir, "tar.info", RAW_TAR)


@pytest.fixture
def split_page(info_dir):
    """A manual split into a primary file and two parts, one of them gzipped."""
    write_page(info_dir, "foo.info", RAW_SPLIT_PRIMARY)
    write_page(info_dir, "foo.info-1", RAW_SPLIT_PART_1)
    write_page(info_dir, "foo.info-2", RAW_SPLIT_PART_2, compress=True)
    return info_dir
