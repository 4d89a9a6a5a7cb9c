from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Optional

import uvicorn

from consentkeeper.core.config import ConfigFsPaths, ConfigManager
from consentkeeper.core.errors import ConfigError
from consentkeeper.core.logger import get_logger, setup_logging
from consentkeeper.runtime import build_app


def main(argv: Optional[list[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="consentkeeper: consent, export and erasure API")
    ap.add_argument("--root", default=".", help="Directory holding config/, data/ and logs/.")
    ap.add_argument("--host", default=None, help="Override bind host.")
    ap.add_argument("--port", type=int, default=None, help="Override listening port (also: PORT env var).")
    ap.add_argument("--in-memory", action="store_true", help="Keep user records in memory only (audit log still written).")
    ap.add_argument("--check-config", action="store_true", help="Print the effective config and exit.")
    args = ap.parse_args(argv)

    root = os.path.abspath(args.root)
    # Handlers are attached once the configured log dir is known.
    boot_logger = get_logger()

    try:
        cfg = ConfigManager(fs=ConfigFsPaths(root), logger=boot_logger, read_only=bool(args.check_config)).load()
    except ConfigError as e:
        print(f"Config error: {e.user_message} {e.context}", file=sys.stderr)
        sys.exit(2)
    overrides = {k: v for k, v in {"host": args.host, "port": args.port}.items() if v is not None}
    if overrides:
        cfg = cfg.model_copy(update=overrides)

    if args.check_config:
        print(json.dumps(cfg.model_dump(), indent=2, sort_keys=True))
        return

    logger = setup_logging(cfg.resolve_log_dir(root))
    app = build_app(cfg, root=root, logger=logger, in_memory=bool(args.in_memory))

    logger.info(f"API server listening on port {cfg.port}")
    server = uvicorn.Server(uvicorn.Config(app, host=cfg.host, port=cfg.port, log_level="info", access_log=False))
    server.run()


if __name__ == "__main__":
    main()
