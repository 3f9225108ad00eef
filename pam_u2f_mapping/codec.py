"""Decoding and encoding of pamu2fcfg mapping files.

A mapping file holds one line per user::

    <user>(:<handle>,<public_key>,<kind>,(+<flag>)*)*

There is no escaping; values containing a separator are outside the grammar.
"""

from __future__ import annotations

import enum
import re

from .constants import (
    FIELD_SEPARATOR,
    FLAG_SEPARATOR,
    KEY_FIELD_COUNT,
    LINE_SEPARATOR,
    USER_SEPARATOR,
)
from .model import Key, Mapping, MappingFile

# CRLF, lone CR and LF all end a line, so no CR survives inside a value.
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


class DecodeErrorKind(enum.Enum):
    """Closed set of reasons a mapping line can fail to decode."""

    # Splitting always yields a first segment, so decode_mapping never raises this.
    USER_MISSING = "entry has no username"
    HANDLE_MISSING = "missing second half of key data"
    KIND_MISSING = "entry has no key type"
    FLAGS_MISSING = "entry has no flags"
    BAD_FLAGS = "entry has ill-formed flags"

    @property
    def message(self) -> str:
        return self.value


class DecodeError(ValueError):
    """Raised when mapping text does not follow the file grammar."""

    def __init__(self, kind: DecodeErrorKind, *, line: int | None = None, key: int | None = None) -> None:
        self.kind = kind
        self.line = line
        self.key = key
        super().__init__(self._render())

    def at(self, *, line: int | None = None, key: int | None = None) -> DecodeError:
        """Return a copy positioned at the given 1-based line/key entry."""
        return DecodeError(
            self.kind,
            line=line if line is not None else self.line,
            key=key if key is not None else self.key,
        )

    def _render(self) -> str:
        where = []
        if self.line is not None:
            where.append(f"line {self.line}")
        if self.key is not None:
            where.append(f"key {self.key}")
        if not where:
            return self.kind.message
        return f"{', '.join(where)}: {self.kind.message}"


_MISSING_BY_POSITION = {
    1: DecodeErrorKind.HANDLE_MISSING,
    2: DecodeErrorKind.KIND_MISSING,
    3: DecodeErrorKind.FLAGS_MISSING,
}


def decode_key(segment: str) -> Key:
    """Decode one ``handle,public_key,kind,+flags`` key entry."""
    # The flags group is the remainder after the third separator.
    subfields = segment.split(FIELD_SEPARATOR, KEY_FIELD_COUNT - 1)
    if len(subfields) < KEY_FIELD_COUNT:
        raise DecodeError(_MISSING_BY_POSITION[len(subfields)])
    handle, public_key, kind, flags_group = subfields

    leading, *flags = flags_group.split(FLAG_SEPARATOR)
    if leading != "":
        raise DecodeError(DecodeErrorKind.BAD_FLAGS)

    return Key(handle=handle, public_key=public_key, kind=kind, flags=flags)


def decode_mapping(line: str) -> Mapping:
    """Decode one line into a user and its keys."""
    user, *segments = line.split(USER_SEPARATOR)
    keys: list[Key] = []
    for idx, segment in enumerate(segments, start=1):
        try:
            keys.append(decode_key(segment))
        except DecodeError as exc:
            raise exc.at(key=idx) from None
    return Mapping(user=user, keys=keys)


def decode_text(text: str) -> MappingFile:
    """Decode a whole mapping file; the first malformed line aborts."""
    lines = _LINE_BREAK_RE.split(text)
    if lines[-1] == "":
        # Trailing newline (or empty input) ends the last line, it does not start a new one.
        lines.pop()

    mappings: list[Mapping] = []
    for number, line in enumerate(lines, start=1):
        try:
            mappings.append(decode_mapping(line))
        except DecodeError as exc:
            raise exc.at(line=number) from None
    return MappingFile(mappings=mappings)


def encode_key(key: Key) -> str:
    fields = FIELD_SEPARATOR.join([key.handle, key.public_key, key.kind])
    flags = "".join(FLAG_SEPARATOR + flag for flag in key.flags)
    return f"{fields}{FIELD_SEPARATOR}{flags}"


def encode_mapping(mapping: Mapping) -> str:
    """Encode one mapping as a single line without a terminator."""
    return "".join([mapping.user] + [USER_SEPARATOR + encode_key(key) for key in mapping.keys])


def encode_text(mapping_file: MappingFile) -> str:
    """Encode a mapping file in canonical form, every line newline-terminated."""
    return "".join(encode_mapping(mapping) + LINE_SEPARATOR for mapping in mapping_file.mappings)
