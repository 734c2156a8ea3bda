"""
Фильтры обхода проекта при экспорте: исключение по имени и по ignore-файлам.
"""
from __future__ import annotations
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Protocol

from pathspec import PathSpec

from .config import Config
from .gitignore_cache import GitignoreCache
from .logging_setup import get_logger

logger = get_logger(__name__)


class ExclusionReason(Enum):
    IGNORED_NAME = "ignored_name"
    GITIGNORE = "gitignore"


@dataclass(slots=True)
class ExclusionStats:
    by_ignored_name: int = 0
    by_gitignore: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, reason: ExclusionReason) -> None:
        with self._lock:
            if reason is ExclusionReason.IGNORED_NAME:
                self.by_ignored_name += 1
            elif reason is ExclusionReason.GITIGNORE:
                self.by_gitignore += 1

    @property
    def total(self) -> int:
        return self.by_ignored_name + self.by_gitignore


class ExportFilter(Protocol):
    def should_exclude(self, path: Path, is_dir: bool) -> Optional[ExclusionReason]: ...


class IgnoredNameFilter:
    """Исключает записи, чьё имя подходит под один из шаблонов настроек."""

    def __init__(self, patterns: Iterable[str]) -> None:
        self.patterns = tuple(patterns)
        self.spec = PathSpec.from_lines("gitignore", self.patterns) if self.patterns else None

    def should_exclude(self, path: Path, is_dir: bool) -> Optional[ExclusionReason]:
        if self.spec is None:
            return None
        # завершающий '/' позволяет шаблонам вида 'build/' отличать папку от файла
        name = Path(path).name + ("/" if is_dir else "")
        if self.spec.match_file(name):
            logger.info(f"Skipping ignored file/directory by name: {path}")
            return ExclusionReason.IGNORED_NAME
        return None


class GitignoreFilter:
    def __init__(self, cache: GitignoreCache, explicit_files: Iterable[Path] = ()) -> None:
        self.cache = cache
        self.explicit_files = frozenset(Path(p).resolve() for p in explicit_files)

    def should_exclude(self, path: Path, is_dir: bool) -> Optional[ExclusionReason]:
        # явно выбранный пользователем файл экспортируем всегда
        if not is_dir and Path(path).resolve() in self.explicit_files:
            logger.info(f"Gitignore override: file was explicitly selected. Including {path}")
            return None
        try:
            ignored = self.cache.is_ignored(Path(path))
        except Exception as e:
            logger.warning(f"Error checking gitignore status for {path}. Proceeding. ({e})")
            return None
        if ignored:
            logger.info(f"Gitignore match: skipping {path}")
            return ExclusionReason.GITIGNORE
        return None


def build_traversal_filters(
    cfg: Config,
    cache: Optional[GitignoreCache] = None,
    explicit_files: Iterable[Path] = (),
) -> list[ExportFilter]:
    filters: list[ExportFilter] = [IgnoredNameFilter(cfg.ignored_names)]
    if cfg.respect_gitignore and cache is not None:
        filters.append(GitignoreFilter(cache, explicit_files))
    return filters


def first_exclusion(
    filters: Iterable[ExportFilter],
    path: Path,
    is_dir: bool,
    stats: Optional[ExclusionStats] = None,
) -> Optional[ExclusionReason]:
    for f in filters:
        reason = f.should_exclude(path, is_dir)
        if reason is not None:
            if stats is not None:
                stats.record(reason)
            return reason
    return None
