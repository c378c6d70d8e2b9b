"""CLI entry point for ScriptShell.

Commands:
- scriptshell init: Create a default .scriptshell/config.yaml
- scriptshell shell: Interactive command loop over stdin
- scriptshell run: Run a local or remote script
- scriptshell version: Show version information
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from scriptshell.core.config import (
    CONFIG_DIR,
    DEFAULT_CONFIG_YAML,
    ShellConfig,
    default_config_path,
    load_config,
)
from scriptshell.core.interpreter import Interpreter
from scriptshell.core.models import ConfigError, ExecutionMode

console = Console()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def get_repo_path() -> Path:
    """Get the project path (current directory)."""
    return Path.cwd()


def _load_config_or_exit(config_path: str | None) -> ShellConfig:
    try:
        return load_config(get_repo_path(), Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    help="Diagnostic log level (logs go to stderr)",
)
def main(log_level: str) -> None:
    """ScriptShell - run commands and SERIAL/PARALLEL scripts.

    Each input line is an external command. "SERIAL <ref>" and
    "PARALLEL <ref>" run a nested script from a file or http:// URL.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
def init() -> None:
    """Create a default configuration file."""
    config_dir = get_repo_path() / CONFIG_DIR

    if config_dir.exists():
        console.print("[yellow]Project already initialized[/yellow]")
        return

    config_dir.mkdir(parents=True)
    default_config_path(get_repo_path()).write_text(DEFAULT_CONFIG_YAML)

    console.print(
        Panel(
            f"[green]Project initialized![/green]\n\nEdit {CONFIG_DIR}/config.yaml to customize.",
            title="ScriptShell",
        )
    )


@main.command()
@click.option("--config", "config_path", type=click.Path(), default=None, help="Config file path")
@click.option("--no-prompt", is_flag=True, help="Do not print a prompt (for piped input)")
def shell(config_path: str | None, no_prompt: bool) -> None:
    """Read commands from stdin and run them one at a time.

    Example:
        scriptshell shell
        echo "SERIAL build.txt" | scriptshell shell --no-prompt
    """
    config = _load_config_or_exit(config_path)
    interpreter = Interpreter(console=console, config=config)
    prompt = "" if no_prompt else config.prompt

    stdin = click.get_text_stream("stdin", errors="replace")
    interpreter.process(stdin, prompt, ExecutionMode.SERIAL)
    if prompt:
        console.print()


@main.command()
@click.argument("reference")
@click.option("--parallel/--serial", default=False, help="Parallel or serial execution")
@click.option("--config", "config_path", type=click.Path(), default=None, help="Config file path")
def run(reference: str, parallel: bool, config_path: str | None) -> None:
    """Run a script from a local file or http:// URL.

    REFERENCE is a file path or a URL like http://host[:port]/path.

    Example:
        scriptshell run build.txt
        scriptshell run http://localhost:8080/jobs.txt --parallel
    """
    config = _load_config_or_exit(config_path)
    interpreter = Interpreter(console=console, config=config)
    mode = ExecutionMode.PARALLEL if parallel else ExecutionMode.SERIAL

    if not interpreter.run_script(reference, mode):
        sys.exit(1)


@main.command()
def version() -> None:
    """Show version information."""
    from scriptshell import __version__

    console.print(f"ScriptShell v{__version__}")
    console.print("Serial/parallel command script interpreter")


if __name__ == "__main__":
    main()
