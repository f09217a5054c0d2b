#!/usr/bin/env python3
"""
Command-line interface for dotsync.

Each command runs one controller action and prints the resulting status.
The `menu` command offers the same actions as a numbered prompt loop.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import IntPrompt
from rich.table import Table

from .core.config import load_settings
from .core.controller import Action, Controller
from .core.errors import BackendNotFound, ConfigError
from .core.status import Status
from .utils.logger import setup_logging
from .utils.platform import PlatformDetector

# Rich console for formatted output
console = Console()


def build_controller(ctx: click.Context) -> Controller:
    """Create the controller from the loaded settings."""
    if 'controller' not in ctx.obj:
        ctx.obj['controller'] = Controller(ctx.obj['settings'])
    return ctx.obj['controller']


def print_status(status: Status) -> None:
    if status.success:
        console.print(f"[green]✓ {escape(status.text)}[/green]")
    else:
        console.print(f"[red]✗ {escape(status.text)}[/red]")


def run_action(ctx: click.Context, action: Action, description: str) -> None:
    """Run one action with a spinner and exit non-zero on failure."""
    controller = build_controller(ctx)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True
    ) as progress:
        progress.add_task(description, total=None)
        status = controller.run(action)

    print_status(status)
    if not status.success:
        sys.exit(1)


# Main CLI group
@click.group()
@click.option('--config', 'config_path', type=click.Path(path_type=Path),
              help='Path to a YAML config file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--plain', is_flag=True, help='Plain coloured log output instead of rich')
@click.option('--log-file', type=click.Path(path_type=Path), help='Log file path')
@click.pass_context
def cli(ctx, config_path: Optional[Path], verbose: bool, plain: bool, log_file: Optional[Path]):
    """dotsync - provision packages and keep dotfiles in sync."""
    ctx.ensure_object(dict)

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    setup_logging(
        level='DEBUG' if verbose else 'INFO',
        log_file=log_file,
        verbose=verbose,
        plain=plain,
        home=settings.home
    )

    ctx.obj['settings'] = settings


@cli.command()
@click.pass_context
def update(ctx):
    """Refresh the package database."""
    run_action(ctx, Action.UPDATE_PACKAGES, "Updating packages...")


@cli.command()
@click.pass_context
def upgrade(ctx):
    """Upgrade installed packages."""
    run_action(ctx, Action.UPGRADE_PACKAGES, "Upgrading packages...")


@cli.command()
@click.pass_context
def install(ctx):
    """Install the configured package set."""
    run_action(ctx, Action.INSTALL_PACKAGES, "Installing packages...")


@cli.command()
@click.pass_context
def clone(ctx):
    """Clone the dotfiles repository into ~/.dotfiles."""
    run_action(ctx, Action.CLONE_REPO, "Cloning repository...")


@cli.command()
@click.pass_context
def sync(ctx):
    """Fetch and merge the dotfiles repository."""
    run_action(ctx, Action.SYNC_DOTFILES, "Syncing dotfiles...")


@cli.command()
@click.pass_context
def link(ctx):
    """Stow the configured dotfiles packages into home."""
    run_action(ctx, Action.LINK_DOTFILES, "Stowing dotfiles...")


@cli.command()
@click.pass_context
def unlink(ctx):
    """Unstow every package found in the dotfiles repository."""
    run_action(ctx, Action.UNLINK_DOTFILES, "Unstowing dotfiles...")


@cli.command()
@click.option('--format', 'output_format', type=click.Choice(['table', 'json']),
              default='table', help='Output format')
@click.pass_context
def info(ctx, output_format: str):
    """Show host details, detected backend, paths and configured packages."""
    settings = ctx.obj['settings']
    controller = build_controller(ctx)
    detector = PlatformDetector(settings.home)
    system = detector.get_system_info()

    try:
        backend = controller.backend().value
        backend_error = None
    except BackendNotFound as e:
        backend = None
        backend_error = str(e)

    if output_format == 'json':
        data = {
            'system': system,
            'package_manager': backend,
            'repository_present': settings.repo_path.exists(),
            'settings': settings.to_dict(),
        }
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="magenta")

    table.add_row("Platform", escape(system['platform']))
    table.add_row("Machine", escape(system['machine']))
    table.add_row("Python", system['python_version'])
    table.add_row("Package manager", backend or f"[red]{escape(backend_error)}[/red]")
    table.add_row("Home", escape(system['home_directory']))
    table.add_row("Repository", escape(str(settings.repo_path)))
    table.add_row("Repository present", "yes" if settings.repo_path.exists() else "no")
    table.add_row("Remote", escape(settings.repo_url))
    table.add_row("Base packages", ", ".join(settings.base_packages))
    table.add_row("Auxiliary packages", ", ".join(settings.aux_packages))
    table.add_row("Stow packages", ", ".join(settings.stow_packages))

    console.print(table)
    if not detector.is_linux:
        console.print("[yellow]⚠ dotsync only supports Linux hosts[/yellow]")


@cli.command()
@click.pass_context
def menu(ctx):
    """Pick actions from a numbered menu until Quit."""
    controller = build_controller(ctx)

    while not controller.quit_requested:
        lines = [
            f"[cyan]{index}[/cyan]. {label}"
            for index, (label, _) in enumerate(controller.menu_items, start=1)
        ]
        console.print(Panel("\n".join(lines), title=controller.menu_title))
        console.print(Panel(escape(controller.current_status), title="Output"))

        choice = IntPrompt.ask(
            "Select an option",
            choices=[str(i) for i in range(1, len(controller.menu_items) + 1)],
            show_choices=False
        )
        controller.select(choice - 1)

        with console.status("Working..."):
            controller.run_selected()


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user.[/yellow]")
        sys.exit(1)


if __name__ == '__main__':
    main()
