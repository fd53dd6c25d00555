"""Common utility functions and helpers for the typedsettings package."""

from typedsettings.utils.file import ensure_directory_exists, write_text_atomic

__all__ = [
    "ensure_directory_exists",
    "write_text_atomic",
]
