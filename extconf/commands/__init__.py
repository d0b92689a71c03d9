"""Command registry."""

from __future__ import annotations

from .config import COMMAND as CONFIG_COMMAND
from .help import COMMAND as HELP_COMMAND
from .sync import COMMANDS as SYNC_COMMANDS

COMMANDS = [
    HELP_COMMAND,
    CONFIG_COMMAND,
    *SYNC_COMMANDS,
]

__all__ = ["COMMANDS"]
