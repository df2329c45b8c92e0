from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from src.config.loader import DEFAULT_CONFIG_PATH, ConfigError, apply_env_overrides, load_config, load_env_file
from src.logging.init import set_debug, setup_logging
from src.services.upload import ProcessingError, process_upload

"""CLI entrypoint.

Commands:
- serve:   run the HTTP API (Flask development server)
- inspect: normalize a local spreadsheet and print the upload response JSON
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Excel status board backend")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to app.yml")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the upload API")
    serve.add_argument("--host", help="Override server.host")
    serve.add_argument("--port", type=int, help="Override server.port")

    inspect = sub.add_parser("inspect", help="Normalize a spreadsheet and print JSON")
    inspect.add_argument("file", type=Path)
    inspect.add_argument("--limit", type=int, default=None, help="Print only the first N rows")
    return p.parse_args(argv)


def _inspect(cfg, path: Path, limit: int | None, logger) -> int:
    if not path.exists():
        logger.error(f"file not found: {path}")
        return EXIT_FATAL
    try:
        result = process_upload(path, path.name, cfg.reader)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    body = result.to_response()
    if limit is not None:
        body["data"] = body["data"][:limit]
    print(json.dumps(body, ensure_ascii=False, indent=2))
    return EXIT_SUCCESS


def _serve(cfg, host: str | None, port: int | None, debug: bool, logger) -> int:  # pragma: no cover (blocking)
    from src.web.app import create_app

    app = create_app(cfg)
    host = host or cfg.server.host
    port = port or cfg.server.port
    logger.info(f"Excel Upload API ready at http://{host}:{port}/api/upload-excel")
    app.run(host=host, port=port, debug=debug)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで main([...]) を直接呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    load_env_file(Path(".env"), override=True)
    try:
        cfg = apply_env_overrides(load_config(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "inspect":
        return _inspect(cfg, args.file, args.limit, logger)
    return _serve(cfg, args.host, args.port, args.debug, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
