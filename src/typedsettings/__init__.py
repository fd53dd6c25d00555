"""Typed settings stored as text.

This package provides:
- SettingsGroup: typed get/ensure/set over a string-to-string mapping
- CodecRegistry: the parse/format pairs used for coercion
- SettingsStore: named groups persisted to JSON or YAML
"""

from typedsettings.codecs import CodecRegistry, SettingCodec, default_registry
from typedsettings.errors import (
    InvalidTypeError,
    SettingFormatError,
    SettingNotFoundError,
    SettingsError,
    SettingsFileError,
)
from typedsettings.group import SettingsGroup
from typedsettings.store import SettingsStore

__all__ = [
    "CodecRegistry",
    "InvalidTypeError",
    "SettingCodec",
    "SettingFormatError",
    "SettingNotFoundError",
    "SettingsError",
    "SettingsFileError",
    "SettingsGroup",
    "SettingsStore",
    "default_registry",
]
