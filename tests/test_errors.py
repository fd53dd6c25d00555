from pathlib import Path

import pytest

from typedsettings.errors import (
    InvalidTypeError,
    SettingFormatError,
    SettingNotFoundError,
    SettingsError,
    SettingsFileError,
)


def test_settings_error_str_with_name() -> None:
    err = SettingsError("volume", "Something went wrong")
    assert str(err) == "[volume] Something went wrong"
    assert err.name == "volume"
    assert err.message == "Something went wrong"


def test_settings_error_str_without_name() -> None:
    assert str(SettingsError(None, "plain")) == "plain"


def test_not_found_default_message() -> None:
    err = SettingNotFoundError("volume")
    assert str(err) == "[volume] Cannot find the setting volume in this group"


@pytest.mark.parametrize(
    "err, builtin",
    [
        (SettingNotFoundError("volume"), KeyError),
        (SettingFormatError("volume", "bad"), ValueError),
        (InvalidTypeError("no codec"), TypeError),
    ],
)
def test_errors_are_builtin_subclasses(err: SettingsError, builtin: type[Exception]) -> None:
    assert isinstance(err, SettingsError)
    assert isinstance(err, builtin)


def test_format_error_wraps_exception() -> None:
    try:
        int("loud")
    except ValueError as e:
        err = SettingFormatError("volume", "Cannot read", original_error=e)
        assert err.original_error is e
        assert str(err) == "[volume] Cannot read"


def test_file_error_carries_path() -> None:
    err = SettingsFileError(Path("settings.json"), "Broken")
    assert err.path == Path("settings.json")
    assert str(err) == "[settings.json] Broken"
    assert err.original_error is None
