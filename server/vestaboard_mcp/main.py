#!/usr/bin/env python3
"""
Vestaboard MCP Server - Main Application Entry Point

Parses command-line options and serves the ServerApp with uvicorn.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from .server_app import CONFIG_PATH_ENV, ServerApp

logger = logging.getLogger(__name__)


def run_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    config_path: Optional[str] = None,
    reload: bool = False,
) -> None:
    """Run the server; host/port default to the loaded configuration."""
    if reload:
        # Development mode with hot reload; the reloader child builds the app
        # itself, so the config path travels through the environment
        if config_path:
            os.environ[CONFIG_PATH_ENV] = str(Path(config_path).resolve())
        uvicorn.run(
            "vestaboard_mcp.server_app:create_app",
            host=host or "127.0.0.1",
            port=port or 8123,
            reload=True,
            factory=True,
        )
        return

    server_app = ServerApp(Path(config_path) if config_path else None)
    server_app.startup()
    app = server_app.get_fastapi_app()

    bind_host = host or server_app.config.server.host
    bind_port = port or server_app.config.server.port
    logger.info(f"MCP Streamable HTTP Server listening on {bind_host}:{bind_port}")
    uvicorn.run(app, host=bind_host, port=bind_port, log_level="info")


def main(argv: Optional[list] = None) -> None:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    parser = argparse.ArgumentParser(description="Vestaboard MCP Server")
    parser.add_argument("--host", help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument(
        "--reload", action="store_true", help="Enable hot reload (development)"
    )
    args = parser.parse_args(argv)

    try:
        run_server(
            host=args.host,
            port=args.port,
            config_path=args.config,
            reload=args.reload,
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
