"""Commands that run the sync manager against one extension."""

from __future__ import annotations

from typing import Callable, List, Optional

from rich.console import Console
from rich.table import Table

from ..manager import ConfigStatus, StatusReport, SyncReport
from ..router import Command, CommandContext, render_rich

LEVEL_STYLES = {
    "success": "green",
    "warning": "yellow",
    "error": "red",
}
STATUS_STYLES = {
    ConfigStatus.DEFAULT: "green",
    ConfigStatus.MISSING_IN_EXTENSION: "red",
    ConfigStatus.MISSING_IN_ACTIVE: "yellow",
    ConfigStatus.OVERRIDDEN: "magenta",
}


def _extension_arg(args: List[str]) -> Optional[str]:
    if len(args) != 1 or not args[0].strip():
        return None
    return args[0].strip()


def _render_report(report: SyncReport) -> str:
    def _render(console: Console) -> None:
        table = Table(
            title=f"{report.operation.title()} {report.extension} ({report.extension_type.value})",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Config", style="bold", no_wrap=True)
        table.add_column("Category", no_wrap=True)
        table.add_column("Result", no_wrap=True)
        table.add_column("Message", overflow="fold")
        for outcome in report.outcomes:
            style = LEVEL_STYLES[outcome.level]
            table.add_row(
                outcome.name,
                outcome.category.value,
                f"[{style}]{outcome.kind.value}[/]",
                outcome.message,
            )
        if not report.outcomes:
            console.print(f"[dim]{report.extension} declares no configuration.[/dim]")
            return
        console.print(table)

    return render_rich(_render)


def _render_status(report: StatusReport) -> str:
    def _render(console: Console) -> None:
        table = Table(
            title=f"Configuration status of {report.extension}",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Config", style="bold", no_wrap=True)
        table.add_column("Category", no_wrap=True)
        table.add_column("Status", no_wrap=True)
        for row in report.rows:
            style = STATUS_STYLES[row.status]
            table.add_row(row.name, row.category.value, f"[{style}]{row.status.label}[/]")
        console.print(table)
        for message in report.messages:
            console.print(f"[{LEVEL_STYLES[message.level]}]{message.text}[/]")

    return render_rich(_render)


def _make_handler(operation: str, run: Callable[[CommandContext, str], str]):
    def _handler(context: CommandContext, args: List[str]) -> str:
        extension = _extension_arg(args)
        if extension is None:
            return f"[{operation}] usage: {operation} <extension>"
        return run(context, extension)

    return _handler


def _run_export(context: CommandContext, extension: str) -> str:
    return _render_report(context.manager.export_config(extension))


def _run_import(context: CommandContext, extension: str) -> str:
    return _render_report(context.manager.import_config(extension))


def _run_delete(context: CommandContext, extension: str) -> str:
    return _render_report(context.manager.delete_config(extension))


def _run_status(context: CommandContext, extension: str) -> str:
    return _render_status(context.manager.status(extension))


def _run_untracked(context: CommandContext, extension: str) -> str:
    files = context.manager.find_untracked_files(extension)
    if not files:
        return f"[untracked] {extension} has no untracked configuration files."
    lines = [f"[untracked] {len(files)} file(s) not listed in {extension}.info.yml:"]
    lines.extend(f"  {path}" for path in files)
    return "\n".join(lines)


EXPORT_COMMAND = Command(
    name="export",
    description="Write active configuration into the extension's config directories.",
    handler=_make_handler("export", _run_export),
    usage="<extension>",
    requires_ready=True,
)
IMPORT_COMMAND = Command(
    name="import",
    description="Load the extension's configuration files into active storage.",
    handler=_make_handler("import", _run_import),
    usage="<extension>",
    requires_ready=True,
)
DELETE_COMMAND = Command(
    name="delete",
    description="Remove the extension's configuration from active storage.",
    handler=_make_handler("delete", _run_delete),
    usage="<extension>",
    requires_ready=True,
)
STATUS_COMMAND = Command(
    name="status",
    description="Compare shipped and active configuration.",
    handler=_make_handler("status", _run_status),
    usage="<extension>",
)
UNTRACKED_COMMAND = Command(
    name="untracked",
    description="List config files not declared in the extension's info file.",
    handler=_make_handler("untracked", _run_untracked),
    usage="<extension>",
)

COMMANDS = [
    EXPORT_COMMAND,
    IMPORT_COMMAND,
    DELETE_COMMAND,
    STATUS_COMMAND,
    UNTRACKED_COMMAND,
]
