from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from .ignore_rule import Rule, compile_rule, rule_matches
from .logging_setup import get_logger

logger = get_logger(__name__)


class MatchResult(Enum):
    NO_MATCH = "no_match"
    MATCH_IGNORE = "match_ignore"
    MATCH_NEGATE = "match_negate"


@dataclass(frozen=True, slots=True)
class IgnoreFile:
    """
    Скомпилированные правила одного ignore-файла.

    Пути передаются относительно `directory` (каталога, где лежит файл),
    с '/' в качестве разделителя. Решает последнее применимое правило.
    """
    directory: Path
    rules: tuple[Rule, ...]
    location: str = ""

    @classmethod
    def from_lines(cls, lines: Iterable[str], directory: Path, location: str = "") -> "IgnoreFile":
        rules = tuple(r for r in map(compile_rule, lines) if r is not None)
        logger.debug(f"Parsed {len(rules)} rules from {location or directory}")
        return cls(Path(directory), rules, location)

    @classmethod
    def from_text(cls, text: str, directory: Path, location: str = "") -> "IgnoreFile":
        # только "\n", как в git; "\r" в конце строки срезает compile_rule
        return cls.from_lines(text.lstrip("\ufeff").split("\n"), directory, location)

    def matching_rule(self, relative_path: str, is_dir: bool) -> Optional[Rule]:
        if not relative_path:
            return None
        for rule in reversed(self.rules):
            if rule_matches(rule, relative_path, is_dir):
                return rule
        return None

    def match_result(self, relative_path: str, is_dir: bool) -> MatchResult:
        rule = self.matching_rule(relative_path, is_dir)
        if rule is None:
            return MatchResult.NO_MATCH
        return MatchResult.MATCH_NEGATE if rule.negated else MatchResult.MATCH_IGNORE

    def matches(self, relative_path: str, is_dir: bool) -> bool:
        return self.match_result(relative_path, is_dir) is MatchResult.MATCH_IGNORE
