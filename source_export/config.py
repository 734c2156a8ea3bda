from __future__ import annotations
from dataclasses import dataclass, asdict
from pathlib import Path
import json

from .logging_setup import get_logger

logger = get_logger(__name__)

RC_PATH = Path.home() / ".source_export.json"

_TUPLE_FIELDS = ("ignored_names",)

@dataclass(slots=True)
class Config:
    ignore_filename: str = ".gitignore"
    respect_gitignore: bool = True
    # gitignore-синтаксис, сравнивается только с именем записи
    ignored_names: tuple[str, ...] = (
        ".git/", ".hg/", ".svn/", ".idea/", ".vscode/",
        "__pycache__/", "node_modules/", ".venv/", ".mypy_cache/", ".pytest_cache/",
        ".DS_Store", "*.pyc", "*.pyo", "*.class",
    )
    log_level: str = "INFO"

def load_defaults() -> Config:
    if RC_PATH.exists():
        try:
            data: dict[str, object] = json.loads(RC_PATH.read_text(encoding="utf-8"))
            cfg = Config()
            for k, v in data.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, tuple(v) if k in _TUPLE_FIELDS else v)
            return cfg
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Cannot load settings from {RC_PATH}: {e}. Using defaults.")
    return Config()

def save_defaults(cfg: Config) -> None:
    RC_PATH.write_text(json.dumps(asdict(cfg), ensure_ascii=False, indent=2), encoding="utf-8")
