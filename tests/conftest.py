from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from source_export.ignore_file import IgnoreFile
from source_export.workspace import LocalWorkspace


@pytest.fixture
def ignore_file() -> Callable[[str], IgnoreFile]:
    """
    Фабрика IgnoreFile из текста, без обращения к диску.

    Каталог фиктивный: пути в тестах передаются уже относительными.
    """
    def make(text: str) -> IgnoreFile:
        return IgnoreFile.from_text(text, Path("/path/to"), location="/path/to/.gitignore")
    return make


@pytest.fixture
def nested_repo(tmp_path: Path) -> Path:
    """
    Трёхуровневый проект с .gitignore на каждом уровне:

        repo/
          .git/
          .gitignore        -> *.log
          debug.log
          other.log
          mid/
            .gitignore      -> other.log
            debug.log
            other.log
            leaf/
              .gitignore    -> !other.log
              debug.log
              other.log

    Возвращает путь до 'repo'.
    """
    repo = tmp_path / "repo"
    leaf = repo / "mid" / "leaf"
    leaf.mkdir(parents=True)
    (repo / ".git").mkdir()

    (repo / ".gitignore").write_text("*.log\n", encoding="utf-8")
    (repo / "mid" / ".gitignore").write_text("other.log\n", encoding="utf-8")
    (leaf / ".gitignore").write_text("!other.log\n", encoding="utf-8")

    for d in (repo, repo / "mid", leaf):
        (d / "debug.log").write_text("x", encoding="utf-8")
        (d / "other.log").write_text("x", encoding="utf-8")
    return repo


@pytest.fixture
def workspace(nested_repo: Path) -> LocalWorkspace:
    return LocalWorkspace(nested_repo)
