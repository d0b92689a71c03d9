"""Console entry point for extconf."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import List, Optional, Sequence

from rich.console import Console
from rich.text import Text

from .commands import COMMANDS
from .configuration import ConfigurationBundle, load_runtime_configuration, resolve_site_dir
from .logging_utils import setup_logging
from .router import CommandRouter

logger = logging.getLogger("extconf")


def build_router(bundle: ConfigurationBundle) -> CommandRouter:
    router = CommandRouter(bundle)
    for command in COMMANDS:
        router.register(command)
    return router


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="extconf",
        description="Synchronize extension configuration with active storage.",
    )
    parser.add_argument(
        "--site",
        type=Path,
        default=None,
        help="Site root (defaults to $EXTCONF_SITE_DIR or the current directory).",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at INFO level.")
    parser.add_argument("command", nargs="?", default="help")
    parser.add_argument("args", nargs=argparse.REMAINDER)
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    options = _parse_args(argv)
    site_dir = options.site or resolve_site_dir()
    bundle = load_runtime_configuration(site_dir)

    log_settings = bundle.section("logging")
    level = "INFO" if options.verbose else log_settings.get("level", "WARNING")
    if bundle.status != "missing":
        bundle.log_path = setup_logging(
            site_dir,
            level=level,
            structured=bool(log_settings.get("structured", False)),
        )
    for diag in bundle.diagnostics:
        if diag.level == "error":
            logger.error("%s", diag.message)

    router = build_router(bundle)
    args: List[str] = list(options.args)
    output = router.handle(options.command, args)

    console = Console()
    console.print(Text.from_ansi(output.rstrip("\n")), soft_wrap=True)
    if router.get(options.command) is None:
        return 2
    return 1 if router.last_error is not None else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
