# server/vestaboard_mcp/config.py
from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from .formatter import FormattingOptions
from .validation import ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://rw.vestaboard.com"


@dataclass(frozen=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8123
    name: str = "vestaboard-mcp"
    version: str = "1.0.0"

    def __post_init__(self) -> None:
        if not (0 < self.port <= 0xFFFF):
            raise ConfigValidationError(f"Server port must be 1-65535, got {self.port}")


@dataclass(frozen=True)
class AuthConfig:
    required: bool = False
    api_key: Optional[str] = None
    header_name: str = "Authorization"

    def __post_init__(self) -> None:
        if self.required and not self.api_key:
            raise ConfigValidationError("auth.api_key must be set when auth is required")
        if not self.header_name:
            raise ConfigValidationError("auth.header_name must not be empty")


@dataclass(frozen=True)
class CorsConfig:
    origins: List[str] = field(default_factory=lambda: ["*"])
    methods: List[str] = field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    headers: List[str] = field(
        default_factory=lambda: ["Content-Type", "mcp-session-id", "Authorization"]
    )


@dataclass(frozen=True)
class VestaboardConfig:
    api_base: str = DEFAULT_API_BASE
    read_write_key: Optional[str] = None
    timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigValidationError("Vestaboard timeout must be > 0")
        if not self.api_base.startswith(("http://", "https://")):
            raise ConfigValidationError(
                f"Vestaboard api_base must be an http(s) URL, got '{self.api_base}'"
            )


@dataclass(frozen=True)
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    cors: CorsConfig = field(default_factory=CorsConfig)
    vestaboard: VestaboardConfig = field(default_factory=VestaboardConfig)
    formatting: FormattingOptions = field(default_factory=FormattingOptions)


def _split_list(raw) -> List[str]:
    # Accept both TOML arrays and comma-separated strings
    if isinstance(raw, str):
        return [item.strip() for item in raw.split(",") if item.strip()]
    return [str(item) for item in raw]


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    v = env.get(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    v = env.get(name)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError as e:
        raise ConfigValidationError(f"{name} must be an integer, got '{v}'") from e


def _as_number(section: dict, key: str, default, kind, label: str):
    v = section.get(key, default)
    # bool is an int subclass; true/false is never a valid number here
    if isinstance(v, bool):
        raise ConfigValidationError(f"{label} must be a number, got {v!r}")
    try:
        return kind(v)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"{label} must be a number, got {v!r}") from e


def _build_config(data: dict, env: Mapping[str, str]) -> AppConfig:
    server = data.get("server") or {}
    auth = data.get("auth") or {}
    cors = data.get("cors") or {}
    board = data.get("vestaboard") or {}
    formatting = data.get("formatting") or {}

    defaults = CorsConfig()
    cors_origins = env.get("CORS_ORIGIN") or cors.get("origins")
    cors_methods = env.get("CORS_METHODS") or cors.get("methods")
    cors_headers = env.get("CORS_HEADERS") or cors.get("headers")

    return AppConfig(
        server=ServerConfig(
            host=str(server.get("host", "0.0.0.0")),
            port=_env_int(env, "PORT", _as_number(server, "port", 8123, int, "server.port")),
            name=env.get("MCP_SERVER_NAME") or str(server.get("name", "vestaboard-mcp")),
            version=env.get("MCP_SERVER_VERSION") or str(server.get("version", "1.0.0")),
        ),
        auth=AuthConfig(
            required=_env_bool(env, "MCP_AUTH_REQUIRED", bool(auth.get("required", False))),
            api_key=env.get("MCP_API_KEY") or auth.get("api_key"),
            header_name=env.get("MCP_AUTH_HEADER_NAME")
            or str(auth.get("header_name", "Authorization")),
        ),
        cors=CorsConfig(
            origins=_split_list(cors_origins) if cors_origins else defaults.origins,
            methods=_split_list(cors_methods) if cors_methods else defaults.methods,
            headers=_split_list(cors_headers) if cors_headers else defaults.headers,
        ),
        vestaboard=VestaboardConfig(
            api_base=(
                env.get("VESTABOARD_API_BASE_URL")
                or str(board.get("api_base", DEFAULT_API_BASE))
            ).rstrip("/"),
            read_write_key=env.get("VESTABOARD_READ_WRITE_KEY") or board.get("read_write_key"),
            timeout=_as_number(board, "timeout", 10.0, float, "vestaboard.timeout"),
        ),
        formatting=FormattingOptions.from_mapping(formatting),
    )


def load_from_toml(
    config_path: str | Path, env: Optional[Mapping[str, str]] = None
) -> AppConfig:
    """
    Load an AppConfig from a TOML file, then apply environment overrides.

    Expected TOML structure (every key optional):

    [server]
    host = "0.0.0.0"
    port = 8123
    name = "vestaboard-mcp"
    version = "1.0.0"

    [auth]
    required = false
    api_key = "secret"
    header_name = "Authorization"

    [cors]
    origins = ["*"]
    methods = ["GET", "POST", "OPTIONS"]
    headers = ["Content-Type", "mcp-session-id", "Authorization"]

    [vestaboard]
    api_base = "https://rw.vestaboard.com"
    read_write_key = "..."   # or VESTABOARD_READ_WRITE_KEY
    timeout = 10.0

    [formatting]
    horizontal_align = "left"   # left|center|right
    vertical_align = "top"      # top|middle|bottom
    overflow_handling = "truncate"  # truncate|ellipsis|error
    """
    p = Path(config_path)
    if not p.exists():
        raise FileNotFoundError(f"Configuration file not found: {p}")

    with p.open("rb") as f:
        data = tomllib.load(f)

    cfg = _build_config(data, os.environ if env is None else env)

    logger.info(
        "Loaded AppConfig: server=%s:%d, auth_required=%s, api_base=%s, key_set=%s",
        cfg.server.host,
        cfg.server.port,
        cfg.auth.required,
        cfg.vestaboard.api_base,
        cfg.vestaboard.read_write_key is not None,
    )
    return cfg


def default_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Local default: no auth, public Read/Write API, environment overrides applied."""
    return _build_config({}, os.environ if env is None else env)
