"""CLI commands for telebox: offline administration of prefixes, aliases and plugins."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from telebox import __logo__, __version__
from telebox.config.loader import get_env_path, load_settings, save_prefixes
from telebox.core.prefixes import PrefixSet

app = typer.Typer(
    name="telebox",
    help=f"{__logo__} telebox - chat userbot plugin host",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} telebox v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """telebox - chat userbot plugin host."""
    pass


@app.command()
def version():
    """Show the telebox version."""
    console.print(f"{__logo__} telebox v{__version__}")


# ============================================================================
# Prefixes
# ============================================================================


@app.command()
def prefix(
    action: str = typer.Argument("show", help="show, set, add or del"),
    values: list[str] = typer.Argument(None, help="Prefixes to set, add or remove"),
    env_file: Path = typer.Option(None, "--env-file", help="Path of the .env file"),
):
    """Show or change the command prefixes stored in .env."""
    env_path = env_file or get_env_path()
    settings = load_settings(env_path)
    prefixes = PrefixSet(settings.prefixes)

    if action == "show":
        console.print(" ".join(prefixes))
        return
    if action not in ("set", "add", "del"):
        console.print(f"[red]Unknown action: {action}[/red]")
        raise typer.Exit(1)
    if not values:
        console.print(f"[red]'{action}' needs at least one prefix[/red]")
        raise typer.Exit(1)

    try:
        if action == "set":
            current = prefixes.replace(values)
        elif action == "add":
            current = prefixes.add(values)
        else:
            current = prefixes.remove(values)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not save_prefixes(current, env_path):
        console.print(f"[red]Could not write {env_path}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Prefixes: {' '.join(current)}")


# ============================================================================
# Aliases
# ============================================================================

alias_app = typer.Typer(help="Manage command aliases")
app.add_typer(alias_app, name="alias")


def _alias_store():
    from telebox.storage.alias import AliasStore

    settings = load_settings()
    return AliasStore(settings.db_path("alias"))


@alias_app.command("ls")
def alias_list():
    """List aliases."""
    records = _alias_store().list()
    if not records:
        console.print("No aliases set.")
        return

    table = Table(title="Aliases")
    table.add_column("Alias", style="cyan")
    table.add_column("Command", style="green")
    for record in records:
        table.add_row(record.alias, record.original)
    console.print(table)


@alias_app.command("set")
def alias_set(
    alias: str = typer.Argument(..., help="Alias token"),
    original: str = typer.Argument(..., help="Command the alias points at"),
):
    """Add or repoint an alias."""
    store = _alias_store()
    reason = store.would_chain(alias, original)
    if reason:
        console.print(f"[red]Alias chains are not allowed: {reason}[/red]")
        raise typer.Exit(1)
    store.set(alias, original)
    console.print(f"[green]✓[/green] {alias} → {original}")


@alias_app.command("del")
def alias_delete(alias: str = typer.Argument(..., help="Alias token")):
    """Remove an alias."""
    if _alias_store().delete(alias):
        console.print(f"[green]✓[/green] Removed alias {alias}")
    else:
        console.print(f"[red]No alias {alias}[/red]")
        raise typer.Exit(1)


# ============================================================================
# Cron
# ============================================================================

cron_app = typer.Typer(help="Inspect cron expressions")
app.add_typer(cron_app, name="cron")


@cron_app.command("check")
def cron_check(
    expression: str = typer.Argument(..., help="Six-field cron expression"),
    count: int = typer.Option(3, "--count", "-n", help="Upcoming firings to show"),
):
    """Validate a six-field cron expression and show its next firings."""
    from datetime import datetime

    from telebox.cron.service import next_fire_time, schedule_error

    error = schedule_error(expression)
    if error:
        console.print(f"[red]Invalid: {error}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Valid: {expression}")
    base = datetime.now()
    for _ in range(count):
        base = next_fire_time(expression, base)
        console.print(f"  {base.strftime('%Y-%m-%d %H:%M:%S')}")


# ============================================================================
# Plugins
# ============================================================================


@app.command()
def plugins(
    user_dir: Path = typer.Option(None, "--dir", "-d", help="User plugin directory"),
):
    """Load every plugin offline and print the command table."""
    from telebox.core.logger import configure_logger
    from telebox.plugins.manager import PluginManager
    from telebox.storage.alias import AliasStore

    settings = load_settings()
    configure_logger(settings)
    manager = PluginManager(
        settings,
        client=None,
        alias_store=AliasStore(settings.db_path("alias")),
        user_dir=user_dir,
    )

    async def load_once():
        try:
            return await manager.reload()
        finally:
            await manager.shutdown()

    report = asyncio.run(load_once())

    table = Table(title=f"{__logo__} Commands")
    table.add_column("Command", style="cyan")
    for command in report.commands:
        table.add_row(command)
    console.print(table)
    console.print(f"Plugins: {', '.join(report.loaded) or '-'}")
    if report.cron_jobs:
        console.print(f"Cron jobs: {', '.join(report.cron_jobs)}")
    for path, issues in report.rejected.items():
        console.print(f"[red]✗ {Path(path).name}[/red]: {'; '.join(issues)}")
    if report.rejected:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
