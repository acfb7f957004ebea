"""
Run the workspace web API.

Usage:
    python run_web.py [--host HOST] [--port PORT] [--config FILE]

Examples:
    python run_web.py
    python run_web.py --port 8080
    python run_web.py --host 0.0.0.0 --port 8000
"""

import argparse
import sys

import uvicorn

from wsrecall.__version__ import __version__
from wsrecall.shared.config.config_loader import load_config
from wsrecall.shared.errors import ConfigurationError
from wsrecall.shared.logging.logger import get_logger, setup_logging
from wsrecall.web.app import create_app

setup_logging()
logger = get_logger("run_web")


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the workspace web API")
    parser.add_argument(
        "--version", "-v", action="version",
        version=f"wsrecall {__version__}",
        help="Show version and exit"
    )
    parser.add_argument("--config", type=str, help="Path to config file (default: config/config.yaml)")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, help="Port to bind to (default: web.port from config)")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(f"[ERROR] {e}")
        return 1

    setup_logging(config.logging.level)
    port = args.port or config.web.port

    logger.progress(f"wsrecall API starting at http://{args.host}:{port}")
    logger.progress(f"   -> API Docs: http://{args.host}:{port}/docs")
    logger.progress(f"   Catalog:    {config.storage.store_path}")

    uvicorn.run(create_app(config), host=args.host, port=port, reload=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
