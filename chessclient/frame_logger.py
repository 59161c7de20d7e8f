"""
Frame logger — writes every frame exchanged with the server to a text file.

One log file is created per client session, named by timestamp. Inbound
frames, outbound move strings and connection events are appended as they
happen, so a session can be replayed by reading the file top to bottom.

Log files land in ./logs/ by default (created automatically).
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

_SEP = "=" * 80


class FrameLogger:
    def __init__(self, log_dir: Path, server_url: str) -> None:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._path = log_dir / f"session_{timestamp}.log"
        self._write(
            f"{_SEP}\n"
            f"  Chess Client — Frame Log\n"
            f"  Server: {server_url}\n"
            f"  Started: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
            f"{_SEP}\n"
        )

    # ------------------------------------------------------------------ #
    # Public API                                                           #
    # ------------------------------------------------------------------ #

    def log_inbound(self, text: str) -> None:
        self._line("<<", text)

    def log_outbound(self, text: str) -> None:
        self._line(">>", text)

    def log_event(self, note: str) -> None:
        self._line("--", note)

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------ #
    # Internal                                                             #
    # ------------------------------------------------------------------ #

    def _line(self, marker: str, text: str) -> None:
        self._write(f"{datetime.now().strftime('%H:%M:%S.%f')[:-3]} {marker} {text}\n")

    def _write(self, text: str) -> None:
        with self._path.open("a", encoding="utf-8") as f:
            f.write(text)
