"""gdblint CLI - find unused and undefined symbols in GDB scripts."""
from pathlib import Path
from typing import Optional

import click
import typer
from rich.table import Table
from rich.markup import escape

from gdblint.config import PROGRAM_NAME, __version__, get_config
from gdblint.utils.logger import configure_logging
from gdblint.utils.safe_console import SafeConsole
from gdblint.analyzer.cache import EnvironmentCache
from gdblint.analyzer.environment import EnvironmentUnavailableError, GdbEnvironment
from gdblint.analyzer.reporter import (
    STDIN_LABEL,
    WarningFilter,
    render_plain,
    render_scriptable,
)
from gdblint.analyzer.session import SOURCE_CACHE, LintSession

app = typer.Typer(
    name=PROGRAM_NAME,
    help="Lint GDB scripts for unused and undefined commands and convenience variables",
    add_completion=False
)
# Tables go to stdout; warnings and errors to stderr so scriptable output stays clean
console = SafeConsole()
err_console = SafeConsole(stderr=True)

# Cache management sub-command
cache_app = typer.Typer(name="cache", help="Manage the GDB environment cache")


def build_session() -> LintSession:
    """Create a session wired to the configured cache file and GDB executable."""
    config = get_config()
    configure_logging(config.log_level)
    return LintSession(
        cache=EnvironmentCache(config.cache_file),
        environment=GdbEnvironment(config.gdb_executable, config.gdb_timeout),
        check_duplicates=config.check_duplicates,
    )


def _read_script(gdbfile: str) -> list:
    """Read all physical lines of the script; '-' is standard input."""
    with click.open_file(gdbfile, 'r', encoding='utf-8', errors='replace') as f:
        return f.readlines()


@app.command()
def lint(
    gdbfile: str = typer.Argument("-", help="GDB script to lint ('-' reads standard input)"),
    script: bool = typer.Option(False, "--script", "-s", help="Emit bash-friendly output"),
    arch: Optional[str] = typer.Option(None, "--arch", "-a", help="Target architecture used to list registers"),
    refresh: bool = typer.Option(False, "--refresh", help="Query GDB even when a cache exists"),
    sort: bool = typer.Option(False, "--sort", help="Order diagnostics by line number"),
    wno_unused: bool = typer.Option(False, "--wno-unused", help="Disable warnings for unused functions and variables"),
    wno_unused_function: bool = typer.Option(False, "--wno-unused-function", help="Disable warnings for unused functions"),
    wno_unused_variable: bool = typer.Option(False, "--wno-unused-variable", help="Disable warnings for unused variables"),
    wno_undefined: bool = typer.Option(False, "--wno-undefined", help="Disable warnings for undefined functions and variables"),
    wno_undefined_function: bool = typer.Option(False, "--wno-undefined-function", help="Disable warnings for undefined functions"),
    wno_undefined_variable: bool = typer.Option(False, "--wno-undefined-variable", help="Disable warnings for undefined variables"),
):
    """Lint a GDB script. Exits with status 1 when any issue is found."""
    from_stdin = gdbfile == "-"

    try:
        physical_lines = _read_script(gdbfile)
    except OSError as e:
        err_console.error(f"Cannot read script {escape(gdbfile)}: {escape(str(e))}")
        raise typer.Exit(1)

    if from_stdin:
        file_label = script_path = STDIN_LABEL
    else:
        file_label = Path(gdbfile).name
        script_path = str(Path(gdbfile).resolve())

    session = build_session()
    source = session.prepare_environment(refresh=refresh, architecture=arch)
    for notice in session.notices:
        err_console.warn(escape(notice))

    warnings = WarningFilter(
        no_unused=wno_unused,
        no_undefined=wno_undefined,
        no_unused_function=wno_unused_function,
        no_unused_variable=wno_unused_variable,
        no_undefined_function=wno_undefined_function,
        no_undefined_variable=wno_undefined_variable,
    )
    result = session.lint(physical_lines, warnings=warnings, sort_by_line=sort)

    if script:
        output = render_scriptable(result.diagnostics, file_label, result.line_number_width)
    else:
        output = render_plain(result.diagnostics, file_label, result.line_number_width, script_path)
    for line in output:
        typer.echo(line)

    if source == SOURCE_CACHE and not script:
        err_console.print("[dim]Environment loaded from cache (use --refresh to re-query GDB)[/dim]")

    if result.diagnostics:
        raise typer.Exit(1)


@app.command()
def archs():
    """List target architectures available with GDB."""
    session = build_session()
    try:
        names = session.list_architectures()
    except EnvironmentUnavailableError as e:
        err_console.error(escape(str(e)))
        raise typer.Exit(1)

    typer.echo("ARCHITECTURES")
    typer.echo("\tAvailable GDB architectures\n")
    for name in names:
        typer.echo(f"\t{name}")


@cache_app.command("clear")
def cache_clear():
    """Remove the definitions and commands cache.

    The next lint run queries GDB again.
    """
    cache = EnvironmentCache(get_config().cache_file)
    if cache.clear():
        console.print(f"[green]✓ Definitions and commands cache removed:[/green] {escape(str(cache.cache_file))}")
    else:
        console.print(f"[dim]No cache at {escape(str(cache.cache_file))}[/dim]")


@cache_app.command("stats")
def cache_stats():
    """Display what the environment cache holds."""
    cache = EnvironmentCache(get_config().cache_file)
    stats = cache.stats()

    if not stats['exists']:
        console.print(f"[dim]No cache at {escape(stats['path'])}[/dim]")
        return

    if not stats['valid']:
        err_console.warn(f"Cache at {escape(stats['path'])} is unreadable: {escape(stats.get('error', ''))}")
        raise typer.Exit(1)

    table = Table(title=f"Cache Statistics: {escape(stats['path'])}", show_header=True, header_style="bold cyan")
    table.add_column("Section", style="cyan")
    table.add_column("Entries", justify="right", style="green")

    table.add_row("Definitions (registers, convenience variables)", str(stats['definitions']))
    table.add_row("References", str(stats['references']))
    table.add_row("Commands", str(stats['commands']))

    console.print(table)


# Register cache sub-command
app.add_typer(cache_app)


def _version_callback(value: bool):
    if value:
        typer.echo(f"{PROGRAM_NAME} {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit",
    ),
):
    """gdblint - lint GDB scripts for unused and undefined symbols."""


if __name__ == "__main__":
    app()
