"""Command registry shared by the CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from io import StringIO
import shutil
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .configuration import ConfigurationBundle
from .errors import ExtconfError

if TYPE_CHECKING:
    from .manager import ConfigSyncManager

CommandHandler = Callable[["CommandContext", List[str]], str]


@dataclass
class CommandContext:
    """Context passed into each command handler."""

    config: ConfigurationBundle
    router: "CommandRouter"
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def manager(self) -> "ConfigSyncManager":
        return self.router.get_manager()


@dataclass
class Command:
    name: str
    description: str
    handler: CommandHandler
    usage: str = ""
    requires_ready: bool = False


class CommandRouter:
    """Registry + dispatcher for commands."""

    def __init__(
        self,
        config: ConfigurationBundle,
        metadata: Optional[Dict[str, Any]] = None,
        manager: Optional["ConfigSyncManager"] = None,
    ) -> None:
        self.config = config
        self.metadata = metadata or {}
        self._commands: Dict[str, Command] = {}
        self._manager = manager
        self.last_error: Optional[ExtconfError] = None

    def register(self, command: Command) -> None:
        self._commands[command.name.lower()] = command

    def get_manager(self) -> "ConfigSyncManager":
        if self._manager is None:
            from .runtime import build_manager

            self._manager = build_manager(self.config)
        return self._manager

    def handle(self, command_name: str, args: List[str]) -> str:
        self.last_error = None
        command = self._commands.get(command_name.lower())
        if command is None:
            return f"[extconf] Unknown command '{command_name}'. Try 'help'."
        if command.requires_ready and self.config.status != "ready":
            return (
                f"[extconf] '{command_name}' requires a ready configuration "
                f"(current status: {self.config.status})."
            )
        context = CommandContext(config=self.config, router=self, metadata=self.metadata)
        try:
            return command.handler(context, args)
        except ExtconfError as exc:
            self.last_error = exc
            return f"[{command.name}] {exc}"

    @property
    def command_names(self) -> Sequence[str]:
        return sorted(self._commands.keys())

    def commands(self) -> Sequence[Command]:
        return [self._commands[name] for name in self.command_names]

    def get(self, command_name: str) -> Optional[Command]:
        return self._commands.get(command_name.lower())


def render_help_table(commands: Sequence[Command]) -> str:
    def _render(console: Console) -> None:
        table = Table(title="Commands", show_header=True, header_style="bold cyan")
        table.add_column("Command", style="green", no_wrap=True)
        table.add_column("Description")
        for cmd in commands:
            table.add_row(f"{cmd.name} {cmd.usage}".strip(), cmd.description)
        console.print(table)

    return render_rich(_render)


def render_rich(render_fn: Callable[[Console], None]) -> str:
    """Render a Rich layout to an ANSI string without printing live."""

    terminal_size = shutil.get_terminal_size(fallback=(100, 24))
    width = max(80, terminal_size.columns)

    console = Console(
        record=True,
        force_terminal=True,
        color_system="auto",
        width=width,
        file=StringIO(),
    )
    render_fn(console)
    return console.export_text(clear=False, styles=True)


__all__ = [
    "Command",
    "CommandContext",
    "CommandRouter",
    "render_help_table",
    "render_rich",
]
