"""Named settings groups and their JSON/YAML persistence."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from datetime import date
from pathlib import Path
from typing import Any, ClassVar, Final, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from typedsettings.codecs import CodecRegistry
from typedsettings.errors import SettingNotFoundError, SettingsFileError
from typedsettings.group import SettingsGroup
from typedsettings.utils.file import write_text_atomic

logger: Final = logging.getLogger(__name__)

ENV_VAR: Final = "TYPEDSETTINGS_FILE"
JSON_SUFFIXES: Final = frozenset({".json"})
YAML_SUFFIXES: Final = frozenset({".yaml", ".yml"})


class GroupDocument(BaseModel):
    """Persisted form of one group: ``{"settings": {name: text}}``."""

    model_config = ConfigDict(extra="forbid")

    settings: dict[str, str] = Field(default_factory=dict)

    @field_validator("settings", mode="before")
    @classmethod
    def scalars_to_text(cls, v: Any) -> Any:
        """Accept unquoted YAML scalars (75, true, 2024-01-01) as their text form."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            return v
        out: dict[Any, Any] = {}
        for key, item in v.items():
            if isinstance(item, bool):
                item = "True" if item else "False"
            elif isinstance(item, (int, float)):
                item = str(item)
            elif isinstance(item, date):
                # also covers datetime, which YAML makes of unquoted timestamps
                item = item.isoformat()
            out[key] = item
        return out


class SettingsDocument(BaseModel):
    """Schema for a settings file."""

    model_config = ConfigDict(extra="forbid")

    groups: dict[str, GroupDocument] = Field(default_factory=dict)

    @field_validator("groups", mode="before")
    @classmethod
    def empty_groups(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {name: {} if doc is None else doc for name, doc in v.items()}
        return v


class SettingsStore:
    """Collection of named settings groups backed by a JSON or YAML file.

    Groups are created on first access, so callers can write
    ``store.group("audio").ensure("volume", int)`` without setup.

    Examples:
        store = SettingsStore.load(Path("settings.json"))
        store.group("audio").set("volume", 75)
        store.save(Path("settings.json"))
    """

    # Default search paths for the settings file
    DEFAULT_PATHS: ClassVar[list[Path]] = [
        Path("settings.json"),
        Path("settings.yaml"),
        Path("~/.config/typedsettings/settings.json").expanduser(),
    ]

    def __init__(
        self,
        groups: Optional[dict[str, SettingsGroup]] = None,
        *,
        codecs: Optional[CodecRegistry] = None,
    ) -> None:
        self._codecs = codecs
        self._groups: dict[str, SettingsGroup] = dict(groups or {})

    def group(self, name: str) -> SettingsGroup:
        """Return the named group, creating an empty one if needed."""
        if name not in self._groups:
            logger.debug("Creating settings group %s", name)
            self._groups[name] = SettingsGroup(codecs=self._codecs)
        return self._groups[name]

    def groups(self) -> list[str]:
        """Names of all groups."""
        return list(self._groups)

    def remove_group(self, name: str) -> None:
        """Delete a group and all its settings.

        Raises:
            SettingNotFoundError: If the group does not exist
        """
        if name not in self._groups:
            raise SettingNotFoundError(name, f"Cannot find the group {name}")
        del self._groups[name]

    def items(self) -> Iterator[tuple[str, SettingsGroup]]:
        return iter(self._groups.items())

    def __contains__(self, name: object) -> bool:
        return name in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    # ---- document conversion ----
    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted document shape."""
        return SettingsDocument(
            groups={
                name: GroupDocument(settings=group.to_dict())
                for name, group in self._groups.items()
            }
        ).model_dump()

    @classmethod
    def from_dict(
        cls,
        data: Any,
        codecs: Optional[CodecRegistry] = None,
        path: Optional[Path] = None,
    ) -> SettingsStore:
        """Build a store from a persisted document.

        Args:
            data: Parsed document (``None`` means empty)
            codecs: Codec registry for the groups
            path: Source file, used in error messages

        Raises:
            SettingsFileError: If the document does not match the schema
        """
        try:
            doc = SettingsDocument.model_validate(data or {})
        except ValidationError as err:
            raise SettingsFileError(path, f"Invalid settings document:\n{err}", err) from err

        return cls(
            {
                name: SettingsGroup(group_doc.settings, codecs=codecs)
                for name, group_doc in doc.groups.items()
            },
            codecs=codecs,
        )

    # ---- persistence ----
    @classmethod
    def resolve_path(cls, path: Optional[Path] = None) -> Path:
        """Find the settings file to use.

        Args:
            path: Explicit path (returned unchanged when given)

        Returns:
            Path of an existing settings file

        Raises:
            FileNotFoundError: If no settings file is found
        """
        if path is not None:
            return path

        # Check environment variable first
        env_path = os.environ.get(ENV_VAR)
        if env_path:
            path = Path(env_path)
            if not path.exists():
                raise FileNotFoundError(f"Settings file from {ENV_VAR} not found: {path}")
            return path

        for default_path in cls.DEFAULT_PATHS:
            if default_path.exists():
                return default_path
        raise FileNotFoundError(f"No settings file found. Create settings.json or set {ENV_VAR}.")

    @classmethod
    def load(
        cls, path: Optional[Path] = None, codecs: Optional[CodecRegistry] = None
    ) -> SettingsStore:
        """Load a store from a JSON or YAML file.

        Args:
            path: Settings file (optional, searches default locations if None)
            codecs: Codec registry for the groups

        Returns:
            Populated SettingsStore

        Raises:
            FileNotFoundError: If no settings file is found
            SettingsFileError: If the file cannot be parsed or is invalid
        """
        path = cls.resolve_path(path)
        suffix = _check_suffix(path)

        try:
            raw = path.read_text(encoding="utf-8")
            if suffix in JSON_SUFFIXES:
                data = json.loads(raw) if raw.strip() else None
            else:
                data = yaml.safe_load(raw)
        except FileNotFoundError:
            raise
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise SettingsFileError(path, f"Unable to read settings: {exc}", exc) from exc

        store = cls.from_dict(data, codecs=codecs, path=path)
        logger.info("Loaded %d settings group(s) from %s", len(store), path)
        return store

    def save(self, path: Path) -> None:
        """Write the store to a JSON or YAML file, replacing it atomically.

        Raises:
            SettingsFileError: If the file suffix is not supported
        """
        suffix = _check_suffix(path)
        data = self.to_dict()
        if suffix in JSON_SUFFIXES:
            content = json.dumps(data, indent=2, sort_keys=True) + "\n"
        else:
            content = yaml.safe_dump(data, sort_keys=True)
        write_text_atomic(path, content)
        logger.info("Saved %d settings group(s) to %s", len(self), path)


def _check_suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in JSON_SUFFIXES | YAML_SUFFIXES:
        raise SettingsFileError(path, f"Unsupported settings file type {suffix or '(none)'!r}")
    return suffix
