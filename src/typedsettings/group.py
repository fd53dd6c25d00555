"""Typed accessors over a string-keyed settings mapping."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Mapping
from typing import Any, Final, Optional, TypeVar

from typedsettings.codecs import CodecRegistry, SettingCodec, default_registry
from typedsettings.errors import InvalidTypeError, SettingFormatError, SettingNotFoundError

logger: Final = logging.getLogger(__name__)

T = TypeVar("T")

# Scalar kinds recognised in stored text, narrowest first
_STORED_KINDS: Final = (bool, int, float)


def _readable(codec: SettingCodec[Any], text: str) -> bool:
    try:
        value = codec.parse(text)
    except (ValueError, TypeError, ArithmeticError):
        return False
    # "nan" and "inf" are words as often as numbers
    return not (isinstance(value, float) and not math.isfinite(value))


class SettingsGroup:
    """A collection of settings stored as text and read back as typed values.

    The backing mapping (setting name -> serialized text) stays ``None``
    until the first write. It is the exact shape a persistence layer
    serializes, see ``to_dict``.

    Examples:
        group = SettingsGroup()
        group.set("volume", 75)
        group.get("volume", int)  # -> 75
        group.set("volume", "loud")  # raises SettingFormatError
        group.set("volume", "loud", force=True)
        group.get("volume", str)  # -> "loud"
    """

    def __init__(
        self,
        settings: Optional[dict[str, str]] = None,
        *,
        codecs: Optional[CodecRegistry] = None,
    ) -> None:
        """Initialize the group, optionally adopting deserialized entries.

        Args:
            settings: Previously persisted entries, used as the backing store
            codecs: Codec registry (default: the shared built-in registry)

        Raises:
            SettingFormatError: If an entry value is not text
        """
        self._codecs = codecs or default_registry
        self._entries: Optional[dict[str, str]] = None
        if settings is not None:
            for name, text in settings.items():
                if not isinstance(text, str):
                    raise SettingFormatError(
                        name, f"Stored value must be text, got {type(text).__name__}"
                    )
            self._entries = settings

    # ---- typed access ----
    def get(self, name: str, type_: type[T]) -> T:
        """Read a setting coerced to ``type_``.

        Args:
            name: Setting name
            type_: Type to coerce the stored text into

        Returns:
            The coerced value

        Raises:
            SettingNotFoundError: If the setting does not exist
            SettingFormatError: If the stored text cannot be read as ``type_``
            InvalidTypeError: If ``type_`` has no codec
        """
        if self._entries is None or name not in self._entries:
            raise SettingNotFoundError(name)
        codec = self._codecs.lookup(type_)
        return codec.decode(self._entries[name], name)

    def ensure(self, name: str, type_: type[T]) -> T:
        """Make sure a setting exists, writing the type's default if missing.

        Returns:
            The same value ``get`` returns afterwards
        """
        codec = self._codecs.lookup(type_)
        if name not in self:
            logger.debug("Setting %s missing, writing %s default", name, codec.name)
            self.set(name, codec.default(), force=True, type_=type_)
        return self.get(name, type_)

    def set(
        self,
        name: str,
        value: Any,
        force: bool = False,
        *,
        type_: Optional[type[Any]] = None,
    ) -> None:
        """Write a setting.

        Without ``force``, an existing entry must be readable as the type
        being written. A str write over stored boolean, integer or number text
        must itself read as that kind. Compatible cross-type writes pass
        ("2" over 1, 0.5 over 75), while type drift ("loud" or "2.5" over 75)
        is refused.

        Args:
            name: Setting name
            value: Value to store
            force: Skip the compatibility check and overwrite unconditionally
            type_: Type to encode ``value`` as (default: ``type(value)``)

        Raises:
            SettingFormatError: If ``value`` cannot be encoded, or the existing
                entry is incompatible and ``force`` is false
            InvalidTypeError: If the type has no codec
        """
        codec = self._codecs.lookup(type(value) if type_ is None else type_)
        text = codec.encode(value, name)

        if self._entries is None:
            self._entries = {}

        if name in self._entries and not force:
            existing = self._entries[name]
            # Raises before the write if the stored text doesn't fit
            codec.decode(existing, name)
            kind = self._stored_kind(existing) if codec.type is str else None
            if kind is not None and not _readable(kind, text):
                raise SettingFormatError(
                    name, f"Cannot replace {kind.name} value {existing!r} with {text!r}"
                )

        self._entries[name] = text
        logger.debug("Set %s (%s)%s", name, codec.name, " [forced]" if force else "")

    def _stored_kind(self, text: str) -> Optional[SettingCodec[Any]]:
        for kind_type in _STORED_KINDS:
            try:
                codec = self._codecs.lookup(kind_type)
            except InvalidTypeError:
                continue
            if _readable(codec, text):
                return codec
        return None

    def remove(self, name: str) -> None:
        """Delete a setting.

        Raises:
            SettingNotFoundError: If the setting does not exist
        """
        if self._entries is None or name not in self._entries:
            raise SettingNotFoundError(name)
        del self._entries[name]

    # ---- mapping view ----
    @property
    def is_initialized(self) -> bool:
        """Whether the backing mapping has been created."""
        return self._entries is not None

    def names(self) -> list[str]:
        """Names of the stored settings."""
        return list(self._entries or ())

    def to_dict(self) -> dict[str, str]:
        """Copy of the backing mapping (empty when uninitialized)."""
        return dict(self._entries or {})

    def __contains__(self, name: object) -> bool:
        return self._entries is not None and name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._entries or ())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SettingsGroup):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"SettingsGroup({self._entries!r})"

    @classmethod
    def from_mapping(
        cls, settings: Mapping[str, str], codecs: Optional[CodecRegistry] = None
    ) -> SettingsGroup:
        """Build a group from a read-only mapping by copying it."""
        return cls(dict(settings), codecs=codecs)
