"""
Компиляция одной строки ignore-файла в правило и проверка пути по правилу.

Флаги строки (!, ведущий и завершающий '/', экранирование) разбираются здесь,
а glob каждого сегмента компилирует pathspec ("gitignore"). Путь проверяется
по сегментам:
  - структурно, через PurePosixPath;
  - по тексту пути, разбитому на '/', если путь нельзя представить как путь
    текущей ОС. Скомпилированные сегменты те же, результат совпадает.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Optional, Union

from pathspec import util as pathspec_util

from .logging_setup import TRACE_LEVEL, get_logger

logger = get_logger(__name__)

SEP = "/"

# Символы, недопустимые в путях текущей ОС
_ILLEGAL_PATH_CHARS: frozenset[str] = frozenset("\0")
if os.name == "nt":
    _ILLEGAL_PATH_CHARS |= frozenset('<>:"|?*') | frozenset(map(chr, range(1, 32)))

_segment_pattern = pathspec_util.lookup_pattern("gitignore")


class InvalidPathError(ValueError):
    """Путь не может быть представлен как путь текущей ОС."""


class _Globstar:
    """Сегмент `**`: ноль или больше целых сегментов пути."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "GLOBSTAR"


GLOBSTAR = _Globstar()

Segment = Union[_Globstar, "re.Pattern[str]"]


@dataclass(frozen=True, slots=True)
class Rule:
    source: str                 # исходная строка из файла
    pattern: str                # шаблон без !, ведущего и завершающего '/', escape-ы раскрыты
    literals: frozenset[int]    # позиции в pattern, которые были экранированы
    negated: bool
    rooted: bool
    dir_only: bool
    segments: tuple[Segment, ...] = field(repr=False)

    @property
    def basename_only(self) -> bool:
        """Шаблон без разделителя сравнивается только с последним сегментом."""
        return not self.rooted and len(self.segments) == 1

    def match_parts(self, parts: tuple[str, ...]) -> bool:
        if not parts:
            return False
        n = len(parts)
        if self.basename_only:
            states = {n - 1}
        elif self.rooted:
            states = {0}
        else:
            states = set(range(n + 1))
        for seg in self.segments:
            nxt: set[int] = set()
            for j in states:
                if seg is GLOBSTAR:
                    nxt.update(range(j, n + 1))
                elif j < n and seg.fullmatch(parts[j]):
                    nxt.add(j + 1)
            if not nxt:
                return False
            states = nxt
        return n in states

    def match_text(self, path: str) -> bool:
        return self.match_parts(split_text(path))


def split_text(path: str) -> tuple[str, ...]:
    return tuple(p for p in path.split(SEP) if p not in ("", "."))


def native_parts(path: str) -> tuple[str, ...]:
    """
    Разбирает относительный путь в сегменты через PurePosixPath.

    Бросает InvalidPathError, если путь содержит символы, недопустимые в
    путях текущей ОС, или не кодируется кодировкой файловой системы.
    """
    bad = _ILLEGAL_PATH_CHARS.intersection(path)
    if bad:
        raise InvalidPathError(f"Illegal characters {sorted(bad)!r} in path {path!r}")
    try:
        os.fsencode(path)
    except UnicodeEncodeError as e:
        raise InvalidPathError(f"Path {path!r} is not encodable: {e}") from e
    return PurePosixPath(path.lstrip(SEP)).parts


def _is_escaped(text: str, i: int) -> bool:
    n = 0
    while i - n - 1 >= 0 and text[i - n - 1] == "\\":
        n += 1
    return n % 2 == 1


def _trim_trailing(line: str) -> str:
    end = len(line)
    while end and line[end - 1] in " \t":
        if _is_escaped(line, end - 1):
            break
        end -= 1
    return line[:end]


def _unescape(text: str) -> list[tuple[str, bool]]:
    """Символы шаблона с признаком экранирования; одиночный '\\' в конце - литерал."""
    chars: list[tuple[str, bool]] = []
    i = 0
    while i < len(text):
        c = text[i]
        if c == "\\":
            if i + 1 < len(text):
                i += 1
                c = text[i]
            chars.append((c, True))
        else:
            chars.append((c, False))
        i += 1
    return chars


def _segment_glob(chars: list[tuple[str, bool]]) -> str:
    parts: list[str] = []
    for i, (c, escaped) in enumerate(chars):
        if c.isspace() and i == len(chars) - 1:
            # pathspec обрезает хвостовые пробелы, а "[ ]" остаётся как есть
            parts.append(f"[{c}]")
        elif escaped:
            parts.append(f"\\{c}")
        else:
            parts.append(c)
    return "".join(parts)


def _compile_segments(chars: list[tuple[str, bool]]) -> tuple[Segment, ...]:
    """
    Разбивает шаблон на сегменты и компилирует glob каждого через pathspec.

    Экранированный '/' тоже разделитель. Пустые сегменты отбрасываются,
    повторы '**' схлопываются.
    """
    raw: list[list[tuple[str, bool]]] = [[]]
    for c, escaped in chars:
        if c == SEP:
            raw.append([])
        else:
            raw[-1].append((c, escaped))

    segments: list[Segment] = []
    for seg in raw:
        if not seg:
            continue
        if seg == [("*", False), ("*", False)]:
            if not (segments and segments[-1] is GLOBSTAR):
                segments.append(GLOBSTAR)
            continue
        # ведущий '/' делает шаблон pathspec привязанным: regex вида ^glob(?:/|$)
        segments.append(_segment_pattern(SEP + _segment_glob(seg)).regex)
    return tuple(segments)


def compile_rule(line: str) -> Optional[Rule]:
    """
    Превращает строку ignore-файла в Rule.

    Пустые строки и комментарии дают None. Строка, которую pathspec не может
    скомпилировать (например, диапазон [z-a]), тоже отбрасывается.
    """
    source = line.rstrip("\n")
    if source.endswith("\r"):
        source = source[:-1]
    text = _trim_trailing(source)
    if not text or text.startswith("#"):
        return None

    negated = text.startswith("!")
    if negated:
        text = text[1:]
    rooted = text.startswith(SEP)
    if rooted:
        text = text[1:]
    dir_only = False
    while text.endswith(SEP):
        # 'foo\/' тоже означает каталог: '\' уходит вместе с '/'
        escaped = _is_escaped(text, len(text) - 1)
        dir_only = True
        text = text[:-2] if escaped else text[:-1]
    if not text:
        return None

    chars = _unescape(text)
    try:
        segments = _compile_segments(chars)
    except (ValueError, re.error) as e:
        logger.warning(f"Skipping ignore rule {source!r}: {e}")
        return None
    if not segments:
        return None
    rule = Rule(
        source=source,
        pattern="".join(c for c, _ in chars),
        literals=frozenset(i for i, (_, escaped) in enumerate(chars) if escaped),
        negated=negated,
        rooted=rooted,
        dir_only=dir_only,
        segments=segments,
    )
    if logger.isEnabledFor(TRACE_LEVEL):
        logger.log(TRACE_LEVEL, f"Rule {source!r} -> pattern={rule.pattern!r}, neg={negated}, "
                                f"rooted={rooted}, dirOnly={dir_only}, segments={segments!r}")
    return rule


def rule_matches(rule: Rule, path: str, is_dir: bool) -> bool:
    """
    Проверяет, применимо ли правило к пути (относительно каталога ignore-файла).

    Если путь нельзя построить как путь ОС, сегменты берутся из текста пути;
    результат от этого не меняется.
    """
    if rule.dir_only and not is_dir:
        return False
    try:
        parts = native_parts(path)
    except InvalidPathError as e:
        logger.debug(f"Rule {rule.source!r}: {e}; falling back to text match")
        hit = rule.match_text(path)
    else:
        hit = rule.match_parts(parts)
    if hit and logger.isEnabledFor(TRACE_LEVEL):
        logger.log(TRACE_LEVEL, f"Rule {rule.source!r} matched {path!r} (isDir={is_dir})")
    return hit
