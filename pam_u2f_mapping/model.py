"""In-memory model of a pam_u2f mapping file and its editing operations."""

from __future__ import annotations

from dataclasses import dataclass, field

from .constants import (
    FIELD_SEPARATOR,
    FLAG_PIN,
    FLAG_PRESENCE,
    FLAG_SEPARATOR,
    FLAG_VERIFICATION,
    USER_SEPARATOR,
)

_LINE_BREAKS = ("\n", "\r")


class ModelError(ValueError):
    """Raised when a model value or edit would break the file structure."""


@dataclass(slots=True)
class Key:
    """One registered credential, a single colon-separated entry of a line.

    Fields are checked whenever they are assigned. The flags list itself is
    only checked on assignment and through set_flag.
    """

    handle: str
    public_key: str
    kind: str
    flags: list[str] = field(default_factory=list)

    def __setattr__(self, name: str, value: object) -> None:
        if name == "handle":
            _check_text("key handle", value, forbidden=(USER_SEPARATOR, FIELD_SEPARATOR))
        elif name == "public_key":
            _check_text("public key", value, forbidden=(USER_SEPARATOR, FIELD_SEPARATOR))
        elif name == "kind":
            _check_text("key kind", value, forbidden=(USER_SEPARATOR, FIELD_SEPARATOR))
        elif name == "flags":
            value = list(value)
            for flag in value:
                _check_flag(flag)
        object.__setattr__(self, name, value)

    def has_flag(self, name: str) -> bool:
        return name in self.flags

    def set_flag(self, name: str, enabled: bool = True) -> None:
        """Enable or disable a flag, leaving the order of the others alone."""
        if enabled:
            _check_flag(name)
            if name not in self.flags:
                self.flags.append(name)
            return
        self.flags = [flag for flag in self.flags if flag != name]

    @property
    def requires_presence(self) -> bool:
        return self.has_flag(FLAG_PRESENCE)

    @property
    def requires_pin(self) -> bool:
        return self.has_flag(FLAG_PIN)

    @property
    def requires_verification(self) -> bool:
        return self.has_flag(FLAG_VERIFICATION)


@dataclass(slots=True)
class Mapping:
    """The keys registered for one user, a single line of the file."""

    user: str
    keys: list[Key] = field(default_factory=list)

    def __setattr__(self, name: str, value: object) -> None:
        if name == "user":
            _check_text("user", value, forbidden=(USER_SEPARATOR,))
        elif name == "keys":
            value = list(value)
        object.__setattr__(self, name, value)

    def add_key(self, key: Key) -> Key:
        self.keys.append(key)
        return key

    def remove_key(self, index: int) -> Key:
        """Remove the key at a zero-based position."""
        if not 0 <= index < len(self.keys):
            raise ModelError(f"user '{self.user}' has no key #{index + 1}")
        return self.keys.pop(index)


@dataclass(slots=True)
class MappingFile:
    """Ordered mappings, one per line of the file."""

    mappings: list[Mapping] = field(default_factory=list)

    def users(self) -> list[str]:
        return [mapping.user for mapping in self.mappings]

    def find(self, user: str) -> Mapping | None:
        for mapping in self.mappings:
            if mapping.user == user:
                return mapping
        return None

    def add_user(self, user: str) -> Mapping:
        if not user:
            raise ModelError("user name must be a non-empty string")
        if self.find(user) is not None:
            raise ModelError(f"user '{user}' already has a mapping")
        mapping = Mapping(user=user)
        self.mappings.append(mapping)
        return mapping

    def remove_user(self, user: str) -> Mapping:
        for idx, mapping in enumerate(self.mappings):
            if mapping.user == user:
                return self.mappings.pop(idx)
        raise ModelError(f"user '{user}' has no mapping")

    def key_count(self) -> int:
        return sum(len(mapping.keys) for mapping in self.mappings)


def _check_flag(flag: str) -> None:
    _check_text("flag", flag, forbidden=(USER_SEPARATOR, FLAG_SEPARATOR))


def _check_text(label: str, value: str, *, forbidden: tuple[str, ...]) -> None:
    if not isinstance(value, str):
        raise ModelError(f"{label} must be a string")
    for token in forbidden + _LINE_BREAKS:
        if token in value:
            raise ModelError(f"{label} must not contain {token!r}: {value!r}")
