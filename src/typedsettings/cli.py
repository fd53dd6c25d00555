"""Typed settings CLI application.

This module provides the command-line interface for inspecting and
editing a settings file: reading, writing, ensuring and removing typed
settings, and validating a file against the document schema.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Final, Optional

import typer
from dotenv import load_dotenv

from typedsettings.codecs import default_registry
from typedsettings.errors import SettingNotFoundError, SettingsError
from typedsettings.store import SettingsStore

# Load environment variables (TYPEDSETTINGS_FILE) from .env file(s)
load_dotenv()

# ── CLI setup ────────────────────────────────────────────────────────────────
app = typer.Typer(help="Typed settings file CLI", add_completion=False)

logger: Final = logging.getLogger(__name__)  # Will be "typedsettings.cli"

FILE_OPTION = typer.Option(
    None, "--file", "-f", dir_okay=False, help="Settings file (JSON or YAML)"
)
DEBUG_OPTION = typer.Option(False, "--debug", help="Enable debug logging")
TYPE_OPTION = typer.Option("str", "--type", "-t", help="Setting type (str, int, bool, ...)")
FORCE_OPTION = typer.Option(False, "--force", help="Overwrite even if the stored type differs")
GROUP_ARGUMENT = typer.Argument(..., help="Settings group name")
NAME_ARGUMENT = typer.Argument(..., help="Setting name")


class _State:
    file: Optional[Path] = None


state = _State()


def _fail(exc: Exception) -> typer.Exit:
    typer.secho(str(exc), fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _target() -> Path:
    """Settings file to write back to (the explicit one, or the resolved one)."""
    try:
        return SettingsStore.resolve_path(state.file)
    except FileNotFoundError as exc:
        raise _fail(exc) from exc


def _load(create: bool = False) -> tuple[SettingsStore, Path]:
    path = state.file if create and state.file is not None else _target()
    try:
        if create and not path.exists():
            logger.debug("Settings file %s not found, starting empty", path)
            return SettingsStore(), path
        return SettingsStore.load(path), path
    except (SettingsError, FileNotFoundError) as exc:
        raise _fail(exc) from exc


@app.callback()
def main(file: Optional[Path] = FILE_OPTION, debug: bool = DEBUG_OPTION) -> None:
    """Read and write typed settings stored as text."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    state.file = file


@app.command()
def get(group: str = GROUP_ARGUMENT, name: str = NAME_ARGUMENT, type_: str = TYPE_OPTION) -> None:
    """Print a setting read as the given type."""
    store, _ = _load()
    try:
        codec = default_registry.lookup_name(type_)
        if group not in store:
            raise SettingNotFoundError(group, f"Cannot find the group {group}")
        value = store.group(group).get(name, codec.type)
    except SettingsError as exc:
        raise _fail(exc) from exc
    typer.echo(codec.format(value))


@app.command("set")
def set_(
    group: str = GROUP_ARGUMENT,
    name: str = NAME_ARGUMENT,
    value: str = typer.Argument(..., help="New value, as text"),
    type_: str = TYPE_OPTION,
    force: bool = FORCE_OPTION,
) -> None:
    """Parse VALUE as the given type and store it."""
    store, path = _load(create=True)
    try:
        codec = default_registry.lookup_name(type_)
        store.group(group).set(name, codec.decode(value, name), force, type_=codec.type)
        store.save(path)
    except SettingsError as exc:
        raise _fail(exc) from exc
    typer.secho(f"{group}.{name} = {value}", fg=typer.colors.GREEN)


@app.command()
def ensure(group: str = GROUP_ARGUMENT, name: str = NAME_ARGUMENT, type_: str = TYPE_OPTION) -> None:
    """Create a setting with the type's default if missing, then print it."""
    store, path = _load(create=True)
    try:
        codec = default_registry.lookup_name(type_)
        value = store.group(group).ensure(name, codec.type)
        store.save(path)
    except SettingsError as exc:
        raise _fail(exc) from exc
    typer.echo(codec.format(value))


@app.command()
def unset(group: str = GROUP_ARGUMENT, name: str = NAME_ARGUMENT) -> None:
    """Remove a setting."""
    store, path = _load()
    try:
        if group not in store:
            raise SettingNotFoundError(group, f"Cannot find the group {group}")
        store.group(group).remove(name)
        store.save(path)
    except SettingsError as exc:
        raise _fail(exc) from exc
    typer.echo(f"Removed {group}.{name}")


@app.command("list")
def list_(group: Optional[str] = typer.Argument(None, help="Only show this group")) -> None:
    """Print settings as 'group.name = value' lines."""
    store, _ = _load()
    if group is not None and group not in store:
        raise _fail(SettingNotFoundError(group, f"Cannot find the group {group}"))
    for group_name, settings in sorted(store.items()):
        if group is not None and group_name != group:
            continue
        for name, text in sorted(settings.to_dict().items()):
            typer.echo(f"{group_name}.{name} = {text}")


@app.command()
def validate(file: Path = typer.Argument(..., help="Settings file to check")) -> None:
    """Validate a settings file against the document schema."""
    try:
        store = SettingsStore.load(file)
    except (SettingsError, FileNotFoundError) as exc:
        raise _fail(exc) from exc
    typer.echo(f"✅ Settings valid ({len(store)} group(s))")


# ───────────────────────── module entrypoint ────────────────────────────────
if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(0)
