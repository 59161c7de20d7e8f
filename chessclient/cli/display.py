"""
Rich-based terminal surface.

This is the ONLY place where terminal output happens. It draws a BoardFrame
(from renderer.render_frame) together with the status panel, the promotion
chooser, the game-end banner and the recent message log.

Diagnostics reach the message log through MessageLogHandler, a logging
handler attached to the "chessclient" logger in main.py, so every module
reports to the user with plain logger calls.
"""

from __future__ import annotations

import logging
from collections import deque

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from chessclient.board import glyph
from chessclient.events import ConnectionStatus
from chessclient.renderer import BoardFrame, CellView
from chessclient.view_model import GameViewModel

console = Console(legacy_windows=False)

_LIGHT = "#f0d9b5"
_DARK = "#b58863"
_LAST_FROM = "#cdd26a"
_LAST_TO = "#aaa23a"
_SELECTED = "#6fa8dc"
_IN_CHECK = "#e06666"

_STATUS_STYLES: dict[str, str] = {
    "connecting": "yellow",
    "connected": "green",
    "disconnected-retrying": "red",
}

_LEVEL_STYLES: dict[int, str] = {
    logging.INFO: "",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}

HELP_TEXT = (
    "Enter a square (e2) or display row,col (7,5) to select and move; "
    "q/r/b/n to promote; 'cancel' to drop a selection; 'new' for a new game; 'quit' to exit."
)


class MessageLogHandler(logging.Handler):
    """Keeps the most recent log records for the on-screen message panel."""

    def __init__(self, maxlen: int = 12, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.records: deque[tuple[int, str]] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.records.append((record.levelno, record.getMessage()))
        except Exception:
            self.handleError(record)


class BoardDisplay:
    def __init__(
        self,
        messages: MessageLogHandler | None = None,
        *,
        show_labels: bool = True,
        out: Console | None = None,
    ) -> None:
        self.messages = messages
        self.show_labels = show_labels
        self.console = out or console

    def draw(
        self,
        view: GameViewModel,
        frame: BoardFrame,
        status: ConnectionStatus,
    ) -> None:
        self.console.clear()
        self.console.print(Group(*self._sections(view, frame, status)))
        self.console.print(f"[dim]{HELP_TEXT}[/]")

    # ------------------------------------------------------------------ #
    # Sections                                                            #
    # ------------------------------------------------------------------ #

    def _sections(
        self,
        view: GameViewModel,
        frame: BoardFrame,
        status: ConnectionStatus,
    ) -> list:
        sections: list = [_status_panel(view, status), _board_table(frame, self.show_labels)]
        if frame.promotion_choices:
            sections.append(_promotion_panel(frame))
        if frame.game_over_text:
            sections.append(
                Panel(
                    Text.assemble(
                        (frame.game_over_text, "bold"), "\n", ("Type 'new' to play again.", "dim")
                    ),
                    title="[bold]Game Over[/]",
                    border_style="red",
                    expand=False,
                )
            )
        if self.messages is not None and self.messages.records:
            sections.append(_message_panel(self.messages))
        return sections


# --------------------------------------------------------------------------- #
# Display functions                                                            #
# --------------------------------------------------------------------------- #

def _status_panel(view: GameViewModel, status: ConnectionStatus) -> Panel:
    status_style = "bold red" if view.status_is_error else "bold"
    turn_style = "bold green" if view.my_turn else "dim"
    # Server text is shown as written, never parsed as markup.
    body = Text.assemble(
        (view.status_text, status_style), "\n",
        view.role_text, "\n",
        (view.turn_text, turn_style), "\n",
        view.last_move_text,
    )
    return Panel(
        body,
        title="[bold green] Chess Client [/]",
        subtitle=f"[{_STATUS_STYLES[status]}]{status}[/]",
        border_style="green",
        expand=False,
    )


def _cell_text(cell: CellView) -> Text:
    background = _LIGHT if cell.light else _DARK
    if cell.last_move_from:
        background = _LAST_FROM
    if cell.last_move_to:
        background = _LAST_TO
    if cell.selected:
        background = _SELECTED
    if cell.in_check:
        background = _IN_CHECK
    return Text(f" {cell.glyph or ' '} ", style=f"bold black on {background}")


def _board_table(frame: BoardFrame, show_labels: bool) -> Table:
    table = Table.grid(padding=0)
    if show_labels:
        table.add_column(justify="right", style="dim")
    for _ in frame.file_labels:
        table.add_column(justify="center")

    for rank, row in zip(frame.rank_labels, frame.rows()):
        cells = [_cell_text(cell) for cell in row]
        if show_labels:
            table.add_row(f"{rank} ", *cells)
        else:
            table.add_row(*cells)

    if show_labels:
        table.add_row("", *(Text(f" {f} ", style="dim") for f in frame.file_labels))
    return table


def _promotion_panel(frame: BoardFrame) -> Panel:
    choices = "   ".join(
        f"[bold]{glyph(piece)}[/] {piece.symbol().lower()}" for piece in frame.promotion_choices
    )
    return Panel(
        choices,
        title="[bold]Promote Your Pawn[/]",
        border_style="yellow",
        expand=False,
    )


def _message_panel(messages: MessageLogHandler) -> Panel:
    lines = Text()
    for i, (level, message) in enumerate(messages.records):
        if i:
            lines.append("\n")
        lines.append(message, style=_LEVEL_STYLES.get(level, ""))
    return Panel(lines, title="[dim]Messages[/]", border_style="dim", expand=False)
