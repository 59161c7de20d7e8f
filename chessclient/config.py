"""
Configuration loading from config.yaml.

Uses typed dataclasses throughout so the rest of the app gets IDE
completion and type-checker support without touching raw dicts.
The file is optional: Config() holds the defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class ClientConfig:
    server_url: str = "ws://localhost:8080"
    reconnect_delay: float = 3.0   # seconds between reconnection attempts
    open_timeout: float = 10.0     # seconds allowed for the opening handshake
    log_frames: bool = True
    log_dir: str = "./logs"


@dataclass
class DisplayConfig:
    show_labels: bool = True
    message_log_size: int = 12


@dataclass
class Config:
    client: ClientConfig = field(default_factory=ClientConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    @property
    def log_dir_path(self) -> Path:
        return Path(self.client.log_dir)


def load_config(path: str | Path = "config.yaml") -> Config:
    """
    Load and validate config.yaml.

    Raises:
        FileNotFoundError: the file is missing.
        ValueError: fields are present but invalid.
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {cfg_path.resolve()}\n"
            "Copy config.example.yaml to config.yaml or run without --config."
        )

    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    try:
        client_raw = raw.get("client") or {}
        client_cfg = ClientConfig(
            server_url=str(client_raw.get("server_url", "ws://localhost:8080")),
            reconnect_delay=float(client_raw.get("reconnect_delay", 3.0)),
            open_timeout=float(client_raw.get("open_timeout", 10.0)),
            log_frames=bool(client_raw.get("log_frames", True)),
            log_dir=str(client_raw.get("log_dir", "./logs")),
        )

        display_raw = raw.get("display") or {}
        display_cfg = DisplayConfig(
            show_labels=bool(display_raw.get("show_labels", True)),
            message_log_size=int(display_raw.get("message_log_size", 12)),
        )

        config = Config(client=client_cfg, display=display_cfg)
        _validate(config)
        return config

    except (AttributeError, TypeError) as exc:
        raise ValueError(f"Invalid config.yaml structure: {exc}") from exc


def _validate(config: Config) -> None:
    if not config.client.server_url.startswith(("ws://", "wss://")):
        raise ValueError(
            f"client.server_url must start with ws:// or wss://, got '{config.client.server_url}'"
        )
    if config.client.reconnect_delay <= 0:
        raise ValueError("client.reconnect_delay must be > 0")
    if config.client.open_timeout <= 0:
        raise ValueError("client.open_timeout must be > 0")
    if config.display.message_log_size < 1:
        raise ValueError("display.message_log_size must be >= 1")
