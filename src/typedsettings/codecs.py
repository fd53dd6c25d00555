"""Text codecs for setting values.

Every setting is stored as text. A ``SettingCodec`` is the explicit
parse/format pair for one Python type, and a ``CodecRegistry`` maps types
(and short names, for the CLI) to their codecs.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any, Final, Generic, TypeVar

from typedsettings.errors import InvalidTypeError, SettingFormatError

logger: Final = logging.getLogger(__name__)

T = TypeVar("T")

_INT_RE: Final = re.compile(r"\s*[+-]?\d+\s*")


@dataclass(frozen=True)
class SettingCodec(Generic[T]):
    """Parse/format pair for one setting type.

    Attributes:
        type: Python type handled by this codec
        name: Short name used to select the codec from text (CLI)
        parse: Converts stored text to a value; raises ValueError on bad input
        format: Converts a value to stored text
        default: Produces the zero value written by ``ensure``
    """

    type: type[T]
    name: str
    parse: Callable[[str], T]
    format: Callable[[T], str]
    default: Callable[[], T]
    accepts: tuple[type[Any], ...] = ()

    def decode(self, text: str, setting: str | None = None) -> T:
        """Parse stored text, wrapping parser failures in SettingFormatError."""
        try:
            return self.parse(text)
        except (ValueError, TypeError, ArithmeticError) as exc:
            raise SettingFormatError(
                setting, f"Cannot read {text!r} as {self.name}", original_error=exc
            ) from exc

    def encode(self, value: Any, setting: str | None = None) -> str:
        """Format a value, rejecting instances of unrelated types."""
        allowed = (self.type, *self.accepts)
        # bool is an int subclass but never a valid int/float/decimal value here
        if not isinstance(value, allowed) or (
            isinstance(value, bool) and self.type is not bool
        ):
            raise SettingFormatError(
                setting, f"Cannot write {type(value).__name__} value as {self.name}"
            )
        try:
            return self.format(value)
        except (ValueError, TypeError, ArithmeticError) as exc:
            raise SettingFormatError(
                setting,
                f"Cannot write {type(value).__name__} value as {self.name}",
                original_error=exc,
            ) from exc


def _parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer literal: {text!r}")
    return int(text)


def _parse_float(text: str) -> float:
    if "_" in text:
        raise ValueError(f"invalid float literal: {text!r}")
    return float(text)


def _parse_bool(text: str) -> bool:
    value = text.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValueError(f"invalid boolean literal: {text!r}")


def _parse_decimal(text: str) -> Decimal:
    try:
        return Decimal(text.strip())
    except InvalidOperation as exc:
        raise ValueError(f"invalid decimal literal: {text!r}") from exc


_MICROSECONDS: Final = 1_000_000


def _format_timedelta(value: timedelta) -> str:
    # Exact seconds with six decimals; float seconds lose microseconds
    micros = (value.days * 86_400 + value.seconds) * _MICROSECONDS + value.microseconds
    return str(Decimal(micros).scaleb(-6))


def _parse_timedelta(text: str) -> timedelta:
    micros = _parse_decimal(text) * _MICROSECONDS
    if micros != micros.to_integral_value():
        raise ValueError(f"timedelta finer than a microsecond: {text!r}")
    return timedelta(microseconds=int(micros))


BUILTIN_CODECS: Final[tuple[SettingCodec[Any], ...]] = (
    SettingCodec(str, "str", str, str, str),
    SettingCodec(int, "int", _parse_int, str, int),
    SettingCodec(float, "float", _parse_float, repr, float, accepts=(int,)),
    SettingCodec(bool, "bool", _parse_bool, lambda v: "True" if v else "False", bool),
    SettingCodec(Decimal, "decimal", _parse_decimal, str, Decimal, accepts=(int,)),
    SettingCodec(
        datetime, "datetime", datetime.fromisoformat, datetime.isoformat, lambda: datetime.min
    ),
    SettingCodec(date, "date", date.fromisoformat, date.isoformat, lambda: date.min),
    SettingCodec(timedelta, "timedelta", _parse_timedelta, _format_timedelta, timedelta),
    SettingCodec(Path, "path", Path, str, Path),
)


def enum_codec(enum_type: type[Enum]) -> SettingCodec[Any]:
    """Build a codec storing enum members by name.

    Args:
        enum_type: Enum class to encode

    Returns:
        Codec whose default is the first declared member

    Raises:
        InvalidTypeError: If the enum has no members
    """
    members = list(enum_type)
    if not members:
        raise InvalidTypeError(f"Enum {enum_type.__name__} has no members")

    def parse(text: str) -> Enum:
        try:
            return enum_type[text.strip()]
        except KeyError as exc:
            raise ValueError(f"{text!r} is not a member of {enum_type.__name__}") from exc

    return SettingCodec(
        enum_type, enum_type.__name__.lower(), parse, lambda m: m.name, lambda: members[0]
    )


class CodecRegistry:
    """Lookup table from Python types to setting codecs.

    Examples:
        registry = CodecRegistry.with_defaults()
        registry.lookup(int).decode("42")  # -> 42
        registry.lookup_name("bool").decode("True")  # -> True
    """

    def __init__(self, codecs: tuple[SettingCodec[Any], ...] = ()) -> None:
        self._by_type: dict[type[Any], SettingCodec[Any]] = {}
        for codec in codecs:
            self.register(codec)

    @classmethod
    def with_defaults(cls) -> CodecRegistry:
        """Create a registry holding the built-in codecs."""
        return cls(BUILTIN_CODECS)

    def register(self, codec: SettingCodec[Any]) -> None:
        """Add or replace the codec for ``codec.type``."""
        if codec.type in self._by_type:
            logger.debug("Replacing codec for %s", codec.type.__name__)
        self._by_type[codec.type] = codec

    def names(self) -> list[str]:
        """Names of the registered codecs, in registration order."""
        return [codec.name for codec in self._by_type.values()]

    def lookup(self, type_: Any) -> SettingCodec[Any]:
        """Return the codec for a type.

        Enum subclasses without an explicit codec get a name-based one;
        other subclasses fall back to the codec of their nearest registered base.

        Raises:
            InvalidTypeError: If ``type_`` is None, not a class, or has no codec
        """
        if type_ is None:
            raise InvalidTypeError("The requested type is None")
        if not isinstance(type_, type):
            raise InvalidTypeError(f"{type_!r} is not a type")

        codec = self._by_type.get(type_)
        if codec is not None:
            return codec
        if issubclass(type_, Enum):
            return enum_codec(type_)
        # Subclasses such as PosixPath use their registered base
        for base in type_.__mro__[1:]:
            if base in self._by_type:
                return self._by_type[base]
        raise InvalidTypeError(f"No codec registered for type {type_.__name__}")

    def lookup_name(self, name: str) -> SettingCodec[Any]:
        """Return the codec registered under a short name.

        Raises:
            InvalidTypeError: If no codec has that name
        """
        for codec in self._by_type.values():
            if codec.name == name:
                return codec
        raise InvalidTypeError(
            f"Unknown setting type {name!r} (choose from: {', '.join(self.names())})"
        )


default_registry: Final = CodecRegistry.with_defaults()
