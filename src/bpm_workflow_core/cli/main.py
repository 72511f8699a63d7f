"""CLI entry point for bpm-workflow-core.

Invoked as::

    bpm-core [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m bpm_workflow_core.cli.main

Commands
--------
- validate   Check a plugin document or a list of node documents
- inspect    Load a plugin into a fresh engine and show what it registers
- version    Show version information
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
import yaml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bpm_workflow_core.config import ConfigLoader, EngineSettings
from bpm_workflow_core.core import WorkflowCore
from bpm_workflow_core.errors import ConfigValidationError, PluginLifecycleError
from bpm_workflow_core.text import resolve_text

console = Console()
err_console = Console(stderr=True)


def _read_document(path: Path) -> object:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        return yaml.safe_load(text)
    return json.loads(text)


def _load_settings(settings_path: str | None) -> EngineSettings:
    loader = ConfigLoader()
    if settings_path is None:
        return loader.defaults()
    return loader.load(Path(settings_path))


def _print_errors(title: str, errors: list[tuple[str, str]]) -> None:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column("Document", style="cyan")
    table.add_column("Error")
    for source, message in errors:
        table.add_row(source, message)
    console.print(table)


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="bpm-workflow-core")
def cli() -> None:
    """bpm-core: validate and inspect workflow editor plugins."""


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from bpm_workflow_core import __version__

    console.print(
        Panel(
            f"[bold]bpm-workflow-core[/bold]  v[cyan]{__version__}[/cyan]\n"
            "Extensibility engine for BPMN workflow editors.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--plugin/--nodes",
    "as_plugin",
    default=True,
    show_default=True,
    help="Treat FILE as a plugin document or as a list of node documents.",
)
def validate_command(file: str, as_plugin: bool) -> None:
    """Validate a plugin or node document (JSON or YAML)."""
    try:
        document = _read_document(Path(file))
    except (ValueError, yaml.YAMLError) as exc:
        err_console.print(f"[red]Could not parse {file}:[/red] {exc}")
        sys.exit(1)

    core = WorkflowCore()
    errors: list[tuple[str, str]] = []

    if as_plugin:
        result = core.plugin_loader.validate_plugin(document)
        errors.extend(("plugin", message) for message in result.errors)
        checked = 1
    else:
        nodes = document if isinstance(document, list) else [document]
        for index, node in enumerate(nodes):
            label = str(node.get("id", f"#{index}")) if isinstance(node, dict) else f"#{index}"
            result = core.node_factory.validate_config(node)
            errors.extend((label, message) for message in result.errors)
        checked = len(nodes)

    if errors:
        _print_errors("Validation Errors", errors)
        console.print(f"[red]INVALID[/red]  {len(errors)} error(s) in {file}")
        sys.exit(1)

    noun = "plugin" if as_plugin else f"{checked} node document(s)"
    console.print(f"[green]VALID[/green]  {noun} in {file}")


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


async def _install_and_activate(core: WorkflowCore, document: object) -> str:
    plugin = core.plugin_loader.load_plugin(document)  # type: ignore[arg-type]
    await core.plugin_manager.install(plugin)
    await core.plugin_manager.activate(plugin.id)
    return plugin.id


@cli.command(name="inspect")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--settings",
    "settings_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to an engine settings YAML file.",
)
def inspect_command(file: str, settings_path: str | None) -> None:
    """Load a plugin into a fresh engine and list what it registers."""
    try:
        settings = _load_settings(settings_path)
    except (ValueError, yaml.YAMLError) as exc:
        err_console.print(f"[red]Could not load settings {settings_path}:[/red] {exc}")
        sys.exit(1)

    logging.basicConfig(level=settings.log_level)
    core = WorkflowCore(settings)
    language = settings.default_language

    try:
        document = _read_document(Path(file))
        plugin_id = asyncio.run(_install_and_activate(core, document))
    except (ValueError, yaml.YAMLError, PluginLifecycleError) as exc:
        err_console.print(f"[red]Could not load {file}:[/red] {exc}")
        if isinstance(exc, ConfigValidationError) and exc.errors:
            _print_errors("Validation Errors", [("plugin", message) for message in exc.errors])
        sys.exit(1)

    node_table = Table(title=f"Nodes registered by '{plugin_id}'", box=box.SIMPLE)
    node_table.add_column("ID", style="cyan")
    node_table.add_column("Name")
    node_table.add_column("Extends", style="magenta")
    node_table.add_column("Category", style="dim")
    for item in core.node_registry.get_all():
        config = item.config if isinstance(item.config, dict) else {}
        node_table.add_row(
            item.id,
            resolve_text(item.name, language),
            str(config.get("nodeType", "")),
            item.category or "",
        )
    console.print(node_table)

    for item in core.node_registry.get_all():
        groups_table = Table(title=f"Property groups of '{item.id}'", box=box.SIMPLE)
        groups_table.add_column("Group", style="cyan")
        groups_table.add_column("Order", justify="right")
        groups_table.add_column("Fields")
        for group in core.property_registry.get_node_property_groups(item.id):
            groups_table.add_row(
                resolve_text(group.label, language),
                str(group.order),
                ", ".join(field.id for field in group.fields),
            )
        console.print(groups_table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
