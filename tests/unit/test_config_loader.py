from __future__ import annotations

from pathlib import Path

import pytest

from src.config.loader import ConfigError, apply_env_overrides, load_config, load_env_file
from src.models.config_models import DEFAULT_ALLOWED_MIME_TYPES, AppConfig


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.server.host == "127.0.0.1"
    assert cfg.server.port == 5050
    assert cfg.upload.upload_dir == "./uploads"
    assert cfg.upload.max_upload_bytes == 1048576
    assert cfg.reader.keep_na_strings == ("NA",)
    assert cfg.error_log_dir == "./logs"


def test_load_config_applies_defaults(temp_workdir: Path):
    path = temp_workdir / "config" / "app.yml"
    path.write_text("server:\n  port: 8080\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.server.port == 8080
    assert cfg.server.host == "0.0.0.0"
    assert cfg.upload.field_name == "excel"
    assert cfg.upload.max_upload_bytes == 10 * 1024 * 1024
    assert cfg.upload.allowed_mime_types == DEFAULT_ALLOWED_MIME_TYPES


def test_load_config_empty_file_is_all_defaults(temp_workdir: Path):
    path = temp_workdir / "config" / "app.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == AppConfig()


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "not_exists.yml")


def test_load_config_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "app.yml"
    path.write_text("server: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


def test_load_config_wrong_type(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("port: 5050", "port: not-a-number")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_load_config_extra_field(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + "\nextra_field: not_allowed\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(write_config)


def test_apply_env_overrides():
    cfg = apply_env_overrides(AppConfig(), {"PORT": "7000", "HOST": "127.0.0.1", "UPLOAD_DIR": "/tmp/up"})
    assert cfg.server.port == 7000
    assert cfg.server.host == "127.0.0.1"
    assert cfg.upload.upload_dir == "/tmp/up"
    assert cfg.server.cors_origin == "*"


def test_apply_env_overrides_invalid_port():
    with pytest.raises(ConfigError, match="invalid PORT"):
        apply_env_overrides(AppConfig(), {"PORT": "http"})


def test_load_env_file(temp_workdir: Path, monkeypatch):
    monkeypatch.delenv("CORS_ORIGIN", raising=False)
    assert load_env_file(temp_workdir / ".env") is False
    (temp_workdir / ".env").write_text("CORS_ORIGIN=http://localhost:3000\n", encoding="utf-8")
    assert load_env_file(temp_workdir / ".env") is True
    cfg = apply_env_overrides(AppConfig())
    assert cfg.server.cors_origin == "http://localhost:3000"
