"""Command for inspecting the runtime configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import yaml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ..configuration import ConfigurationBundle, load_runtime_configuration
from ..router import Command, CommandContext, render_rich

YAML_FLAGS = {"--yaml", "-y", "yaml"}
LEVEL_STYLES = {"info": "cyan", "warning": "yellow", "error": "red"}


def _handler(context: CommandContext, args: List[str]) -> str:
    if not args or all(arg.lower() in YAML_FLAGS for arg in args):
        return _render_config_view(context.config)

    if args[0].lower() == "validate":
        bundle = load_runtime_configuration(context.config.site_dir)
        context.router.config = bundle
        return _render_diagnostics(bundle)

    parts = [segment.strip() for segment in args[0].split(".") if segment.strip()]
    if not parts:
        return "[config] key path cannot be empty."
    dotted = ".".join(parts)
    value = _lookup_path(context.config.merged, parts)
    if value is None:
        return f"[config] {dotted} is not set."
    return f"[config] {dotted} = {_format_value(value)}"


def _render_config_view(bundle: ConfigurationBundle) -> str:
    files_table = Table(
        show_header=True,
        header_style="bold magenta",
        box=box.SIMPLE,
        pad_edge=False,
    )
    files_table.add_column("Order", justify="right", style="magenta", no_wrap=True)
    files_table.add_column("File", overflow="fold", ratio=1)
    if bundle.files_loaded:
        for idx, path in enumerate(bundle.files_loaded, start=1):
            files_table.add_row(str(idx), _friendly_path(path, bundle.site_dir))
    else:
        files_table.add_row("-", "[dim]No config files loaded[/dim]")

    yaml_text = yaml.safe_dump(
        bundle.merged or {},
        sort_keys=True,
        default_flow_style=False,
    ).strip() or "# empty configuration"

    def _render(console: Console) -> None:
        console.print(
            Panel(files_table, title="Loaded Config Files", border_style="magenta", padding=(0, 1))
        )
        console.print(
            Panel(
                Syntax(yaml_text, "yaml", word_wrap=True),
                title=f"Merged Configuration ({bundle.status})",
                border_style="cyan",
                padding=(0, 1),
            )
        )

    return render_rich(_render)


def _render_diagnostics(bundle: ConfigurationBundle) -> str:
    def _render(console: Console) -> None:
        if not bundle.diagnostics:
            console.print(Panel("[green]No diagnostics reported.", title="Diagnostics"))
            return
        table = Table(show_header=True, header_style="bold red", box=box.SIMPLE)
        table.add_column("Level", no_wrap=True)
        table.add_column("Message", overflow="fold")
        for diag in bundle.diagnostics:
            style = LEVEL_STYLES.get(diag.level, "white")
            table.add_row(f"[{style}]{diag.level}[/]", diag.message)
        console.print(Panel(table, title=f"Diagnostics ({bundle.status})", border_style="red"))

    return render_rich(_render)


def _lookup_path(data: Any, parts: List[str]) -> Any:
    cursor = data
    for part in parts:
        if not isinstance(cursor, dict) or part not in cursor:
            return None
        cursor = cursor[part]
    return cursor


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    return repr(value)


def _friendly_path(path: Path, site_dir: Path) -> str:
    try:
        return str(path.relative_to(site_dir))
    except ValueError:
        return str(path)


COMMAND = Command(
    name="config",
    description="Show merged settings, look up a key or validate the site config.",
    handler=_handler,
    usage="[key | validate | --yaml]",
)
