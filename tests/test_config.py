from pathlib import Path

import pytest

from shopmaster.config import DEFAULT_DB_PATH, load_app_config


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "shopmaster_config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_full_config_resolves_paths_relative_to_file(tmp_path):
    path = write_config(
        tmp_path,
        """
[database]
engine = "sqlite"
path = "db/shop.sqlite"

[logging]
level = "debug"

[display]
mode = "both"
output_dir = "exports"
""",
    )

    cfg = load_app_config(str(path))

    assert cfg.database.engine == "sqlite"
    assert cfg.database.path == (tmp_path / "db" / "shop.sqlite").resolve()
    assert cfg.log_level == "DEBUG"
    assert cfg.display_mode == "both"
    assert cfg.output_dir == (tmp_path / "exports").resolve()


def test_missing_sections_use_defaults(tmp_path):
    cfg = load_app_config(str(write_config(tmp_path, "")))

    assert cfg.database.path == (tmp_path / DEFAULT_DB_PATH).resolve()
    assert cfg.log_level == "INFO"
    assert cfg.display_mode == "table"


def test_no_config_file_in_cwd_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    cfg = load_app_config()

    assert cfg.database.path == (tmp_path / DEFAULT_DB_PATH).resolve()
    assert cfg.log_level == "INFO"


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_app_config(str(tmp_path / "missing.toml"))


def test_invalid_toml_raises(tmp_path):
    path = write_config(tmp_path, "[database\npath = ")

    with pytest.raises(ValueError, match="Failed to parse"):
        load_app_config(str(path))


def test_unsupported_engine_raises(tmp_path):
    path = write_config(tmp_path, '[database]\nengine = "postgres"\n')

    with pytest.raises(ValueError, match="Unsupported database engine"):
        load_app_config(str(path))


def test_invalid_log_level_raises(tmp_path):
    path = write_config(tmp_path, '[logging]\nlevel = "LOUD"\n')

    with pytest.raises(ValueError, match="logging.level"):
        load_app_config(str(path))


def test_invalid_display_mode_falls_back_to_table(tmp_path):
    path = write_config(tmp_path, '[display]\nmode = "fancy"\n')

    assert load_app_config(str(path)).display_mode == "table"
