"""
Доступ к файловой системе проекта, нужный движку ignore-правил.

`Workspace` описывает узкий интерфейс, через который GitignoreCache видит
проект; `LocalWorkspace` реализует его поверх локального диска.
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import Optional, Protocol

from charset_normalizer import from_bytes

from .logging_setup import get_logger

logger = get_logger(__name__)

VCS_MARKER = ".git"


class Workspace(Protocol):
    def root(self) -> Optional[Path]: ...
    def is_dir(self, entry: Path) -> bool: ...
    def children(self, directory: Path) -> list[Path]: ...
    def find_child(self, directory: Path, name: str) -> Optional[Path]: ...
    def read_text(self, file: Path) -> str: ...
    def relative_path(self, entry: Path, ancestor: Path) -> Optional[str]: ...
    def is_ancestor(self, ancestor: Path, entry: Path) -> bool: ...


def find_repository_root(start: Path) -> Optional[Path]:
    start = Path(start).resolve()
    for candidate in (start, *start.parents):
        if (candidate / VCS_MARKER).exists():
            return candidate
    return None


def entry_path(entry: Path) -> Path:
    """
    Абсолютный путь записи без перехода по ней самой.

    Родительский каталог разрешается, а последний компонент остаётся как есть:
    символическая ссылка проверяется по своему имени, а не по цели.
    """
    p = Path(os.path.abspath(entry))
    if p.parent == p:
        return p
    return p.parent.resolve() / p.name


def decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        best = from_bytes(data).best()
        if best is not None:
            logger.debug(f"Detected encoding {best.encoding}")
            return str(best)
        return data.decode("utf-8", errors="replace")


class LocalWorkspace:
    def __init__(self, root: Optional[Path]) -> None:
        self._root = Path(root).resolve() if root is not None else None

    @classmethod
    def discover(cls, start: Path) -> "LocalWorkspace":
        # нет репозитория -> корнем считаем саму стартовую папку
        root = find_repository_root(start)
        return cls(root if root is not None else start)

    def root(self) -> Optional[Path]:
        return self._root

    def is_dir(self, entry: Path) -> bool:
        return Path(entry).is_dir()

    def children(self, directory: Path) -> list[Path]:
        return sorted(Path(directory).iterdir(), key=lambda p: p.name)

    def find_child(self, directory: Path, name: str) -> Optional[Path]:
        candidate = Path(directory) / name
        if not candidate.exists():
            return None
        twin = name.swapcase()
        if twin == name or not (Path(directory) / twin).exists():
            return candidate
        # регистронезависимая ФС: точное имя сверяем по листингу каталога
        if any(child.name == name for child in self.children(directory)):
            return candidate
        return None

    def read_text(self, file: Path) -> str:
        return decode_text(Path(file).read_bytes())

    def relative_path(self, entry: Path, ancestor: Path) -> Optional[str]:
        try:
            rel = entry_path(entry).relative_to(Path(ancestor).resolve())
        except ValueError:
            return None
        s = rel.as_posix()
        return "" if s == "." else s

    def is_ancestor(self, ancestor: Path, entry: Path) -> bool:
        a, e = Path(ancestor).resolve(), entry_path(entry)
        return a == e or a in e.parents
