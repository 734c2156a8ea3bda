from __future__ import annotations
import os
import threading
from pathlib import Path
from typing import Optional

from .ignore_file import IgnoreFile, MatchResult
from .logging_setup import get_logger
from .workspace import Workspace

logger = get_logger(__name__)

class GitignoreCache:
    """
    Иерархическая проверка ignore-файлов от записи до корня проекта.

    Файлы применяются от корня к листу: более глубокий файл переопределяет
    решение родителя, но только если в нём есть применимое правило.
    Скомпилированные файлы кэшируются по расположению до clear_cache()/invalidate().
    """

    def __init__(self, workspace: Workspace, ignore_filename: str = ".gitignore") -> None:
        self.workspace = workspace
        self.ignore_filename = ignore_filename
        self._engines: dict[str, IgnoreFile] = {}
        self._lock = threading.Lock()

    def is_ignored(self, entry: Path) -> bool:
        root = self.workspace.root()
        if root is None:
            logger.warning("Workspace root is unavailable. Nothing is ignored.")
            return False
        entry = Path(entry)
        if not entry.is_absolute():
            entry = root / entry
        # "a/../b" сводим заранее, ссылки при этом не раскрываются
        entry = Path(os.path.normpath(entry))

        rel = self.workspace.relative_path(entry, root)
        if not rel:
            # сам корень или запись вне проекта
            return False
        try:
            is_dir = self.workspace.is_dir(entry)
        except OSError as e:
            logger.warning(f"Cannot stat {entry}: {e}")
            is_dir = False

        verdict = MatchResult.NO_MATCH
        for engine in self._engines_for(entry, root, is_dir):
            rel_to_engine = self.workspace.relative_path(entry, engine.directory)
            if not rel_to_engine:
                continue
            result = engine.match_result(rel_to_engine, is_dir)
            if result is not MatchResult.NO_MATCH:
                verdict = result
                logger.debug(f"{rel}: {result.name} by {engine.location}")
        logger.debug(f"Final decision for {rel}: {verdict.name}")
        return verdict is MatchResult.MATCH_IGNORE

    def clear_cache(self) -> None:
        with self._lock:
            self._engines = {}
        logger.debug("Cleared ignore-file cache")

    def invalidate(self, location: Path | str) -> None:
        key = str(location)
        with self._lock:
            engines = dict(self._engines)
            removed = engines.pop(key, None)
            self._engines = engines
        if removed is not None:
            logger.debug(f"Invalidated cached ignore file {key}")

    def cached_locations(self) -> list[str]:
        with self._lock:
            return sorted(self._engines)

    def _engines_for(self, entry: Path, root: Path, is_dir: bool) -> list[IgnoreFile]:
        # собираем от листа к корню, применять будем в обратном порядке
        leaf_to_root: list[IgnoreFile] = []
        current = entry if is_dir else entry.parent
        while self.workspace.is_ancestor(root, current):
            ignore_file = self._find_ignore_file(current)
            if ignore_file is not None:
                engine = self._engine_for(ignore_file)
                if engine is not None:
                    leaf_to_root.append(engine)
            if current.parent == current:
                break
            current = current.parent
        leaf_to_root.reverse()
        return leaf_to_root

    def _find_ignore_file(self, directory: Path) -> Optional[Path]:
        try:
            found = self.workspace.find_child(directory, self.ignore_filename)
            if found is None or self.workspace.is_dir(found):
                return None
            return found
        except OSError as e:
            logger.warning(f"Cannot look up {self.ignore_filename} in {directory}: {e}")
            return None

    def _engine_for(self, ignore_file: Path) -> Optional[IgnoreFile]:
        key = str(ignore_file)
        engine = self._engines.get(key)
        if engine is not None:
            return engine
        # чтение идёт без блокировки; при гонке побеждает первый записанный
        try:
            text = self.workspace.read_text(ignore_file)
        except (OSError, UnicodeError) as e:
            logger.warning(f"Cannot read {key}: {e}. Skipping this level.")
            return None
        compiled = IgnoreFile.from_text(text, ignore_file.parent, location=key)
        with self._lock:
            return self._engines.setdefault(key, compiled)
