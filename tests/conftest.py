"""Pytest configuration and shared fixtures."""

import os
import stat
from pathlib import Path

import pytest
import structlog

from mates.config import Settings, get_settings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Keep the caller's MATES_* / EDITOR variables and .env out of tests."""
    for name in list(os.environ):
        if name.upper().startswith("MATES_") or name.upper() == "EDITOR":
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture
def contact_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "contacts"
    directory.mkdir()
    return directory


@pytest.fixture
def index_path(tmp_path: Path) -> Path:
    return tmp_path / "index"


@pytest.fixture
def make_script(tmp_path: Path):
    """Write an executable sh script and return its path."""

    def _make(name: str, body: str) -> Path:
        script = tmp_path / name
        script.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def passthrough_filter(make_script) -> Path:
    """A filter that ignores its argument and echoes stdin."""
    return make_script("passthrough", "cat")


@pytest.fixture
def settings(contact_dir: Path, index_path: Path) -> Settings:
    """Provide settings pointing at temporary paths."""
    return Settings(
        vdir_path=contact_dir,
        index_path=index_path,
        grep_cmd="grep",
        log_level="DEBUG",
    )


@pytest.fixture
def sample_email() -> str:
    """Provide a raw email whose sender header is folded."""
    return (
        "Return-Path: <jane@example.com>\n"
        "Subject: Lunch on Friday?\n"
        "From: Jane Q. Public\n"
        " <jane@example.com>\n"
        "To: me@example.com\n"
        "\n"
        "From: not-a-header@example.com\n"
        "Are you free?\n"
    )


VCARD_TEMPLATE = "BEGIN:VCARD\r\nVERSION:3.0\r\n{body}END:VCARD\r\n"


@pytest.fixture
def write_vcard():
    """Write a small vCard made of the given property lines."""

    def _write(directory: Path, name: str, *lines: str) -> Path:
        path = directory / name
        body = "".join(f"{line}\r\n" for line in lines)
        path.write_text(VCARD_TEMPLATE.format(body=body), encoding="utf-8", newline="")
        return path

    return _write
