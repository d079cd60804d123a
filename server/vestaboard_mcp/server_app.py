"""
ServerApp - Composition Root

This module contains the ServerApp class, which is responsible for:
- Loading configuration
- Wiring the device client and JSON-RPC dispatcher
- FastAPI application setup (routes, CORS, auth error handling)
- Application lifecycle (startup/shutdown)
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import AppConfig, load_from_toml, default_config
from .codec import GridCodec
from .rpc import RPCDispatcher
from .vestaboard_client import VestaboardClient


logger = logging.getLogger(__name__)

# Carries --config into the uvicorn factory when reloading
CONFIG_PATH_ENV = "VESTABOARD_MCP_CONFIG"


class ServerApp:
    """
    Application composition root for the Vestaboard MCP server.

    Args:
        config_path: TOML file to load; defaults are used if it is missing
        config: Ready-made configuration, takes precedence over config_path
        client: Device API client override (tests inject fakes here)
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        config: Optional[AppConfig] = None,
        client: Optional[VestaboardClient] = None,
    ):
        self.config_path = Path(config_path) if config_path else Path("config.toml")

        # Components - initialized during startup
        self.config: Optional[AppConfig] = config
        self.client: Optional[VestaboardClient] = client
        self.codec: Optional[GridCodec] = None
        self.dispatcher: Optional[RPCDispatcher] = None

        self.app: Optional[FastAPI] = None
        self._started: bool = False

        logger.info(f"ServerApp initialized with config: {self.config_path}")

    def startup(self) -> None:
        """Initialize all application components."""
        if self._started:
            return
        logger.info("Starting up server application...")

        try:
            self._load_configuration()
            self._create_components()
            self._started = True
            logger.info("Server application startup completed successfully")
        except Exception as e:
            logger.error(f"Server application startup failed: {e}")
            raise

    def shutdown(self) -> None:
        """Release application components."""
        logger.info("Shutting down server application...")
        self.dispatcher = None
        self._started = False
        logger.info("Server application shutdown completed")

    def get_fastapi_app(self) -> FastAPI:
        """Build (once) and return the FastAPI application."""
        if self.app is None:
            self.app = self._create_fastapi_app()
        return self.app

    # Private initialization methods

    def _load_configuration(self) -> None:
        """Load configuration from file or use defaults."""
        if self.config is not None:
            logger.info("Using injected configuration")
        elif self.config_path.exists():
            logger.info(f"Loading configuration from {self.config_path}")
            self.config = load_from_toml(self.config_path)
        else:
            logger.warning(
                f"Config file {self.config_path} not found, using default configuration"
            )
            self.config = default_config()

        if self.config.vestaboard.read_write_key is None:
            logger.warning("No Vestaboard Read/Write key configured; device tools will fail")

    def _create_components(self) -> None:
        if self.config is None:
            raise RuntimeError("Config not loaded")

        self.codec = GridCodec()
        if self.client is None:
            self.client = VestaboardClient(self.config.vestaboard)
        self.dispatcher = RPCDispatcher(self.config, client=self.client, codec=self.codec)
        logger.debug(f"Created dispatcher with tools {self.dispatcher.tool_names}")

    def _create_fastapi_app(self) -> FastAPI:
        """Create FastAPI application with routes and middleware."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            started_here = False
            if not self._started:
                self.startup()
                started_here = True
            try:
                yield
            finally:
                if started_here and self._started:
                    self.shutdown()

        # Config is needed up front for CORS
        if self.config is None:
            self._load_configuration()

        app = FastAPI(
            title="Vestaboard MCP Server",
            description="JSON-RPC tools for formatting and posting Vestaboard messages",
            version=self.config.server.version,
            lifespan=lifespan,
        )

        cors = self.config.cors
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors.origins,
            allow_methods=cors.methods,
            allow_headers=cors.headers,
        )

        from .api import router, AuthenticationError, authentication_error_handler

        app.add_exception_handler(AuthenticationError, authentication_error_handler)
        app.state.server = self
        app.include_router(router)

        logger.debug("Created FastAPI application")
        return app


def create_app(config_path: Optional[Path] = None) -> FastAPI:
    """
    Create FastAPI application (uvicorn factory entry point).

    Without an explicit path, the file named by $VESTABOARD_MCP_CONFIG is
    used, falling back to config.toml in the working directory.
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        config_path = Path(env_path) if env_path else None
    return ServerApp(config_path).get_fastapi_app()
