"""
config.py - Configuration model for Arrmeta
"""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
from rich.console import Console
import sys

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

console = Console()

DEFAULT_SERVER_URL = "http://localhost:8282"


class ServerConfig(BaseModel):
    url: str = Field(
        default=DEFAULT_SERVER_URL,
        description="Base URL of the service exposing api/metadata/*"
    )
    timeout: int = Field(
        default=10,
        description="Total request timeout in seconds"
    )


class ConsoleConfig(BaseModel):
    """Presentation settings for the interactive console."""

    debug: bool = False
    log_file: Optional[Path] = None
    page_size: int = Field(
        default=0,
        description="Rows shown per table render (0 shows every row)"
    )


class ArrmetaConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    console: ConsoleConfig = Field(default_factory=ConsoleConfig)
    config_path: Optional[Path] = None


def default_config(url: Optional[str] = None) -> ArrmetaConfig:
    """Config with defaults, optionally pointed at another server"""
    server = ServerConfig(url=url) if url else ServerConfig()
    return ArrmetaConfig(server=server)


def load_config(config_path: Path) -> ArrmetaConfig:
    """Load configuration from TOML file"""

    if not config_path.exists():
        console.print(f"[red][ERROR][/red] Configuration file not found: {config_path}")
        console.print("Please create config.toml or pass --url")
        sys.exit(1)

    try:
        with open(config_path, "rb") as f:
            config_data = tomllib.load(f)

        return ArrmetaConfig(
            server=ServerConfig(**config_data.get("server", {})),
            console=ConsoleConfig(**config_data.get("console", {})),
            config_path=config_path
        )

    except Exception as e:
        console.print(f"[red][ERROR][/red] Error loading configuration: {e}")
        sys.exit(1)
