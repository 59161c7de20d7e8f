"""
Chess client — entry point.

Wires together:  config → logging → display → client (transport + view model + input)

Usage:
    python main.py                          # config.yaml if present, else defaults
    python main.py --url ws://host:8080
    python main.py --config other.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import signal
import sys
from dataclasses import replace
from pathlib import Path

from chessclient.cli.display import BoardDisplay, MessageLogHandler, console
from chessclient.client import ChessClient
from chessclient.config import Config, load_config
from chessclient.frame_logger import FrameLogger

_DEFAULT_CONFIG = Path("config.yaml")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Terminal client for a networked chess server.")
    parser.add_argument("--config", type=Path, default=None, help="path to config.yaml")
    parser.add_argument("--url", default=None, help="server URL, e.g. ws://localhost:8080")
    return parser.parse_args(argv)


def _load(args: argparse.Namespace) -> Config:
    if args.config is not None:
        config = load_config(args.config)
    elif _DEFAULT_CONFIG.exists():
        config = load_config(_DEFAULT_CONFIG)
    else:
        config = Config()
    if args.url:
        config.client = replace(config.client, server_url=args.url)
    return config


def _configure_logging(config: Config) -> MessageLogHandler:
    """File log for everything; the on-screen message panel for the client's own records."""
    log_file = config.log_dir_path / "chessclient.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    messages = MessageLogHandler(maxlen=config.display.message_log_size)
    messages.addFilter(logging.Filter("chessclient"))

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        handlers=[
            logging.handlers.RotatingFileHandler(
                log_file, maxBytes=2 * 1024 * 1024, backupCount=3,  # 2 MB × 3 files
                encoding="utf-8",
            ),
            messages,
        ],
    )
    logging.getLogger("websockets").setLevel(logging.INFO)
    return messages


async def _main(args: argparse.Namespace, stop_event: asyncio.Event) -> None:
    try:
        config = _load(args)
    except FileNotFoundError as exc:
        console.print(f"[red]Error:[/] {exc}")
        sys.exit(1)
    except ValueError as exc:
        console.print(f"[red]Config error:[/] {exc}")
        sys.exit(1)

    messages = _configure_logging(config)
    display = BoardDisplay(messages, show_labels=config.display.show_labels)
    frame_logger = (
        FrameLogger(config.log_dir_path, config.client.server_url)
        if config.client.log_frames
        else None
    )

    client = ChessClient(config, display=display, frame_logger=frame_logger)
    await client.run(stop_event)


def main() -> None:
    args = _parse_args()

    async def _run() -> None:
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()

        original_sigint = signal.getsignal(signal.SIGINT)

        def _on_sigint(sig: int, frame: object) -> None:
            # Schedule the event set on the event loop thread (safe on Windows)
            loop.call_soon_threadsafe(stop_event.set)
            # Restore the original handler so a second Ctrl+C force-quits
            signal.signal(signal.SIGINT, original_sigint)

        signal.signal(signal.SIGINT, _on_sigint)
        await _main(args, stop_event)

    asyncio.run(_run())


if __name__ == "__main__":
    main()
