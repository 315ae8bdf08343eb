#!/usr/bin/env python3
"""
cli.py - Entry point for ARRMETA
Browse, search, edit and delete torrent-to-arr metadata mappings.
"""

try:
    import asyncio
    import sys
    import argparse
    from pathlib import Path
    from rich.console import Console
    from rich.markup import escape
    from rich.prompt import Prompt
    from typing import Any, Callable, Optional
    import arrmeta as pkg
    from . import logger
    from .config import ArrmetaConfig, ServerConfig, default_config, load_config
    from .notifications import ConsoleNotifier
    from .page import MetadataPage
    from .renderer import MappingRow, render_stats, render_table
    from .transport import HttpTransport
except ImportError as e:
    print(f"Error: Missing required dependency: {e}")
    print("Please install required dependencies: pip install -e .")
    sys.exit(1)

console = Console()
CANCEL_TOKEN = "/cancel"
MAIN_MENU_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Mappings",
        (
            ("L", "List mappings"),
            ("S", "Search mappings"),
            ("E", "Edit a mapping's arr"),
            ("D", "Delete a mapping"),
            ("R", "Refresh"),
        ),
    ),
    (
        "Arrmeta",
        (
            ("Q", "Quit"),
        ),
    ),
)


def _ui_info(message: str) -> None:
    console.print(f"[cyan][INFO][/cyan] {message}")


def _ui_warn(message: str) -> None:
    console.print(f"[yellow][WARNING][/yellow] {message}")


def _ui_error(message: str) -> None:
    console.print(f"[red][ERROR][/red] {message}")


def _ui_prompt(label: str, default: str | None = None) -> str:
    if default is None:
        return Prompt.ask(label)
    return Prompt.ask(label, default=default)


def _ui_prompt_yesno(label: str, *, default_yes: bool) -> bool:
    suffix = "[Y/n]" if default_yes else "[y/N]"

    choice = _ui_prompt(f"{label} {suffix}", default="Y" if default_yes else "N").strip().lower()
    if not choice:
        return default_yes
    first = choice[0]
    if first == "y":
        return True
    if first == "n":
        return False
    return default_yes


class PromptConfirmer:
    """Ask yes/no on the terminal without blocking the event loop."""

    async def confirm(self, message: str) -> bool:
        return await asyncio.to_thread(_ui_prompt_yesno, escape(message), default_yes=False)


def _mapping_rows(page: MetadataPage) -> list[MappingRow]:
    return [row for row in page.rows if isinstance(row, MappingRow)]


def _resolve_row_choice(page: MetadataPage, choice: str) -> str | None:
    """Row number from the last listing, else the value as a typed infohash."""
    value = choice.strip()
    if not value:
        return None
    rows = _mapping_rows(page)
    if value.isdigit():
        index = int(value)
        if 1 <= index <= len(rows):
            return rows[index - 1].infohash
    return value


def _render_view(page: MetadataPage, config: ArrmetaConfig) -> None:
    if page.view.is_loading:
        _ui_info("Loading metadata...")
        return
    if page.view.is_error:
        _ui_error(page.view.error_message or "Failed to load metadata")
        _ui_info("Press R to retry.")
        return
    render_stats(console, page.store.stats)
    if page.search_text.strip():
        _ui_info(f"Filter: \"{page.search_text.strip()}\"")
    render_table(console, page.rows, limit=config.console.page_size)


def _render_main_menu(page: MetadataPage) -> None:
    console.print()
    for title, entries in MAIN_MENU_SECTIONS:
        console.print(f"[bold]{title}[/bold]")
        for key, label in entries:
            if key == "R" and page.view.is_error:
                label = "Retry"
            console.print(f"  [cyan]{key}[/cyan]  {label}")


async def _ask(label: str, default: str | None = None) -> str:
    return await asyncio.to_thread(_ui_prompt, label, default)


async def _handle_edit(page: MetadataPage, config: ArrmetaConfig) -> None:
    infohash = _resolve_row_choice(page, await _ask("Row # or infohash to edit"))
    if not await page.dispatch("edit", infohash):
        _ui_warn("No mapping selected.")
        return
    editor = page.editor
    console.print(f"[bold]Edit mapping[/bold]: {escape(editor.title)}")
    while editor.is_open:
        label = await _ask(f"Arr name ({CANCEL_TOKEN} to cancel)", default=editor.label)
        if label.strip() == CANCEL_TOKEN:
            page.on_cancel_requested()
            _ui_info("Edit cancelled.")
            return
        if await page.on_save_requested(label):
            # Row numbers on screen must match page.rows after the refresh.
            _render_view(page, config)


async def _handle_delete(page: MetadataPage, config: ArrmetaConfig) -> None:
    infohash = _resolve_row_choice(page, await _ask("Row # or infohash to delete"))
    if not infohash:
        _ui_warn("No mapping selected.")
        return
    if await page.dispatch("delete", infohash):
        _render_view(page, config)


async def _handle_menu_choice(page: MetadataPage, config: ArrmetaConfig, choice: str) -> bool:
    """Run one menu choice; False when the user quits."""
    key = choice.strip().upper()[:1]
    if key == "Q":
        return False
    if key == "R":
        await page.refresh()
        _render_view(page, config)
    elif key == "L":
        _render_view(page, config)
    elif key == "S":
        page.on_search_changed(await _ask("Search (blank shows all)"))
        _render_view(page, config)
    elif key == "E":
        await _handle_edit(page, config)
    elif key == "D":
        await _handle_delete(page, config)
    else:
        _ui_warn(f"Unknown choice '{choice}'")
    return True


def _build_page(
    config: ArrmetaConfig,
    transport_factory: Callable[[ServerConfig], Any],
) -> tuple[MetadataPage, Any]:
    transport = transport_factory(config.server)
    page = MetadataPage(transport, ConsoleNotifier(console), PromptConfirmer())
    return page, transport


async def run_console(
    config: ArrmetaConfig,
    transport_factory: Callable[[ServerConfig], Any] = HttpTransport,
) -> int:
    """Interactive menu loop over one page instance."""
    page, transport = _build_page(config, transport_factory)
    try:
        _ui_info(f"Connecting to {config.server.url}")
        await page.start()
        _render_view(page, config)
        while True:
            _render_main_menu(page)
            choice = await _ask("Choice", default="L")
            if not await _handle_menu_choice(page, config, choice):
                _ui_info("Goodbye!")
                return 0
    finally:
        await transport.close()


async def run_once(
    config: ArrmetaConfig,
    *,
    stats_only: bool,
    search: str = "",
    transport_factory: Callable[[ServerConfig], Any] = HttpTransport,
) -> int:
    """Refresh once, print stats (and optionally the table), then exit."""
    page, transport = _build_page(config, transport_factory)
    try:
        await page.start()
        if page.view.is_error:
            _ui_error(page.view.error_message or "Failed to load metadata")
            return 1
        if stats_only:
            render_stats(console, page.store.stats)
            return 0
        page.on_search_changed(search)
        _render_view(page, config)
        return 0
    finally:
        await transport.close()


def resolve_config(args_config: Optional[str], args_url: Optional[str]) -> ArrmetaConfig:
    if args_config:
        p = Path(args_config).expanduser()
        if p.is_dir():
            p = p / "config.toml"
        config = load_config(p)
    else:
        cwd_candidate = Path.cwd() / "config.toml"
        config = load_config(cwd_candidate) if cwd_candidate.exists() else default_config()
    if args_url:
        config.server.url = args_url
    return config


def show_help(parser: argparse.ArgumentParser) -> None:
    print(f"ARRMETA v{getattr(pkg, '__version__', '0.0.0')} - Manage torrent-to-arr metadata mappings")
    print()
    parser.print_help()


def main():
    """Entry point"""
    parser = argparse.ArgumentParser(add_help=False)
    for args, kwargs in (
        (("-h", "--help"), {"action": "store_true", "help": "Show help"}),
        (("-c", "--config"), {"metavar": "PATH", "help": "Path to config.toml (file or directory)"}),
        (("-u", "--url"), {"metavar": "URL", "help": "Base URL of the mapping service"}),
        (("-d", "--debug"), {"action": "store_true", "help": "Debug mode with API calls, responses, timestamps"}),
        (("--stats",), {"action": "store_true", "help": "Print mapping stats and exit"}),
        (("--list",), {"nargs": "?", "const": "", "metavar": "SEARCH", "help": "Print mappings (optionally filtered) and exit"}),
    ):
        parser.add_argument(*args, **kwargs)

    try:
        args = parser.parse_args()
        if args.help:
            show_help(parser)
            sys.exit(0)

        config = resolve_config(args.config, args.url)
        logger.set_logger(
            logger.ArrmetaLogger(
                log_file=config.console.log_file,
                debug=args.debug or config.console.debug,
                console=console,
            )
        )

        if args.stats:
            sys.exit(asyncio.run(run_once(config, stats_only=True)))
        if args.list is not None:
            sys.exit(asyncio.run(run_once(config, stats_only=False, search=args.list)))
        sys.exit(asyncio.run(run_console(config)))
    except KeyboardInterrupt:
        _ui_info("Goodbye!")
        sys.exit(0)
    except Exception as e:
        _ui_error(f"Fatal error: {e}")
        sys.exit(1)
    finally:
        logger.get_logger().close()


if __name__ == "__main__":
    main()
