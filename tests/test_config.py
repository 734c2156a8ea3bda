from __future__ import annotations

from pathlib import Path

from source_export.config import Config, RC_PATH, load_defaults, save_defaults


def test_config_roundtrip(tmp_path: Path, monkeypatch) -> None:
    # сохраняем в временный RC-файл и загружаем обратно
    rc = tmp_path / ".source_export.json"
    monkeypatch.setattr("source_export.config.RC_PATH", rc, raising=True)

    cfg = Config()
    cfg.ignore_filename = ".exportignore"
    cfg.respect_gitignore = False
    cfg.ignored_names = ("dist/", "*.min.js")
    cfg.log_level = "DEBUG"

    save_defaults(cfg)

    assert rc.exists()

    loaded = load_defaults()
    assert loaded.ignore_filename == ".exportignore"
    assert loaded.respect_gitignore is False
    assert loaded.ignored_names == ("dist/", "*.min.js")
    assert loaded.log_level == "DEBUG"


def test_unknown_keys_are_ignored(tmp_path: Path, monkeypatch) -> None:
    rc = tmp_path / ".source_export.json"
    monkeypatch.setattr("source_export.config.RC_PATH", rc, raising=True)
    rc.write_text('{"theme": "dark", "respect_gitignore": false}', encoding="utf-8")

    cfg = load_defaults()
    assert cfg.respect_gitignore is False
    assert not hasattr(cfg, "theme")


def test_load_defaults_on_broken_file(tmp_path: Path, monkeypatch) -> None:
    # Если RC-файл битый, load_defaults должен вернуть конфиг по умолчанию
    rc = tmp_path / ".source_export.json"
    monkeypatch.setattr("source_export.config.RC_PATH", rc, raising=True)

    rc.write_text("{ this is not valid json", encoding="utf-8")

    cfg = load_defaults()
    assert isinstance(cfg, Config)
    assert cfg.ignore_filename == ".gitignore"
    assert cfg.respect_gitignore is True


def test_rc_path_constant_is_path() -> None:
    assert isinstance(RC_PATH, Path)
    assert ".source_export.json" in RC_PATH.name
