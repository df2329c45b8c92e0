from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from dotenv import load_dotenv
from jsonschema.exceptions import ValidationError

from src.models.config_models import AppConfig, ReaderConfig, ServerConfig, UploadConfig

"""Config loader.

Responsibilities:
- Load YAML config/app.yml
- Validate against app_config_schema.json (unknown keys rejected)
- Apply defaults for missing optional keys
- Apply environment overrides (HOST / PORT / UPLOAD_DIR / CORS_ORIGIN),
  typically populated from .env via python-dotenv
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
    "load_env_file",
    "apply_env_overrides",
]

SCHEMA_PATH = Path(__file__).with_name("app_config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/app.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_env_file(path: Path = Path(".env"), override: bool = True) -> bool:
    """Load .env into os.environ. Returns False when the file is absent."""
    if not path.exists():
        return False
    return load_dotenv(dotenv_path=path, override=override)


def apply_env_overrides(cfg: AppConfig, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Environment variables take precedence over YAML values."""
    env = os.environ if environ is None else environ
    server = cfg.server
    upload = cfg.upload
    if env.get("HOST"):
        server = replace(server, host=env["HOST"])
    if env.get("PORT"):
        try:
            server = replace(server, port=int(env["PORT"]))
        except ValueError as e:
            raise ConfigError(f"invalid PORT: {env['PORT']!r}") from e
    if env.get("CORS_ORIGIN"):
        server = replace(server, cors_origin=env["CORS_ORIGIN"])
    if env.get("UPLOAD_DIR"):
        upload = replace(upload, upload_dir=env["UPLOAD_DIR"])
    return replace(cfg, server=server, upload=upload)


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    defaults = AppConfig()
    srv_raw = data.get("server", {})
    up_raw = data.get("upload", {})
    rd_raw = data.get("reader", {})
    server = ServerConfig(
        host=srv_raw.get("host", defaults.server.host),
        port=srv_raw.get("port", defaults.server.port),
        cors_origin=srv_raw.get("cors_origin", defaults.server.cors_origin),
    )
    upload = UploadConfig(
        upload_dir=up_raw.get("upload_dir", defaults.upload.upload_dir),
        field_name=up_raw.get("field_name", defaults.upload.field_name),
        max_upload_bytes=up_raw.get("max_upload_bytes", defaults.upload.max_upload_bytes),
        allowed_mime_types=tuple(up_raw.get("allowed_mime_types", defaults.upload.allowed_mime_types)),
    )
    reader = ReaderConfig(
        keep_na_strings=tuple(rd_raw.get("keep_na_strings", defaults.reader.keep_na_strings)),
    )
    return AppConfig(
        server=server,
        upload=upload,
        reader=reader,
        error_log_dir=data.get("error_log_dir", defaults.error_log_dir),
    )
