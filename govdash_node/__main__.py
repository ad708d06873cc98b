# govdash_node/__main__.py
"""
Entry point for running the GovDash Node as a module:
    python -m govdash_node [--host 127.0.0.1] [--port 8000] [--config-dir .]
Env toggles:
  GOVDASH_CONFIG_DIR=...      -> directory holding govdash_config.yaml
  GOVDASH_STORAGE_DRIVER=json -> persist proposals to GOVDASH_STATE_PATH
"""

from __future__ import annotations

import argparse
import os

import uvicorn

from . import config as cfgmod
from .govdash_api import create_app


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="govdash-node",
        description="Run the governance dashboard API (proposals, votes, delegation)",
    )
    p.add_argument(
        "--config-dir",
        default=os.environ.get("GOVDASH_CONFIG_DIR", os.getcwd()),
        help=f"Directory containing {cfgmod.CONFIG_FILENAME} (default: cwd)",
    )
    p.add_argument("--host", default=None, help="Bind address (default: from config)")
    p.add_argument("--port", type=int, default=None, help="HTTP port (default: from config)")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    cfg = cfgmod.load_config(args.config_dir)

    host = args.host or cfgmod.get_bind_host(cfg)
    port = args.port or cfgmod.get_bind_port(cfg)

    try:
        app = create_app(cfg)
    except cfgmod.ConfigError as e:
        raise SystemExit(f"govdash-node: config error: {e}") from None
    uvicorn.run(app, host=host, port=port, log_level=str(cfg["logging"]["level"]).lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
