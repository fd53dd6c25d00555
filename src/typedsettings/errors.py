"""Exception classes for settings access.

This module defines a hierarchy of exception classes for handling
the error conditions raised when reading, writing or persisting
typed settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class SettingsError(Exception):
    """Base error for all settings operations.

    Carries the name of the setting (or group) concerned, when known,
    and a human-readable message.
    """

    def __init__(self, name: Optional[str], message: str) -> None:
        """Initialize the exception.

        Args:
            name: Setting or group name the error refers to, if any
            message: Human-readable error message
        """
        super().__init__(f"[{name}] {message}" if name is not None else message)
        self.name: Optional[str] = name
        self.message: str = message

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class SettingNotFoundError(SettingsError, KeyError):
    """Raised when a requested setting has no entry in its group."""

    def __init__(self, name: str, message: Optional[str] = None) -> None:
        super().__init__(name, message or f"Cannot find the setting {name} in this group")


class SettingFormatError(SettingsError, ValueError):
    """Raised when text cannot be coerced to, or formatted from, a type.

    Also raised by a non-forced write when the value already stored is
    incompatible with the type being written.
    """

    def __init__(
        self,
        name: Optional[str],
        message: str,
        original_error: Optional[Exception] = None,
    ) -> None:
        """Initialize with coercion error details.

        Args:
            name: Setting name, if known at the point of failure
            message: Description of the coercion failure
            original_error: The parser exception that was caught
        """
        super().__init__(name, message)
        self.original_error = original_error


class InvalidTypeError(SettingsError, TypeError):
    """Raised when the requested type is unusable (None or no codec)."""

    def __init__(self, message: str) -> None:
        super().__init__(None, message)


class SettingsFileError(SettingsError):
    """Raised when a settings document cannot be read, parsed or validated."""

    def __init__(
        self,
        path: Optional[Path],
        message: str,
        original_error: Optional[Exception] = None,
    ) -> None:
        """Initialize with file error details.

        Args:
            path: File the error refers to, if any
            message: Description of the failure
            original_error: The original exception that was caught
        """
        super().__init__(str(path) if path is not None else None, message)
        self.path = path
        self.original_error = original_error
