"""Reading and writing mapping files on disk."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from .codec import DecodeError, decode_text, encode_text
from .model import MappingFile

logger = logging.getLogger(__name__)

NEW_FILE_MODE = 0o600


class MappingFileError(Exception):
    """Raised when a mapping file cannot be read, decoded or written."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")


def read_mapping_file(path: str | Path) -> MappingFile:
    path = Path(path)
    return _decode(path, _read_bytes(path))


def write_mapping_file(path: str | Path, mapping_file: MappingFile) -> None:
    """Write canonical text through a private sibling temp file, keeping the target's permissions."""
    path = Path(path)
    data = encode_text(mapping_file).encode("utf-8")
    tmp: str | None = None
    try:
        mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else NEW_FILE_MODE
        path.parent.mkdir(parents=True, exist_ok=True)
        # mkstemp creates the file 0o600 under a unique name.
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            os.fchmod(f.fileno(), mode)
        os.replace(tmp, path)
    except OSError as exc:
        logger.debug("failed to write %s: %s", path, exc)
        if tmp is not None:
            Path(tmp).unlink(missing_ok=True)
        raise MappingFileError(path, f"cannot write mapping file: {exc}") from exc

    logger.info("wrote %d mappings to %s", len(mapping_file.mappings), path)


def is_canonical(path: str | Path) -> bool:
    """Return True when the file already matches what write_mapping_file would produce."""
    path = Path(path)
    raw = _read_bytes(path)
    return raw == encode_text(_decode(path, raw)).encode("utf-8")


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        logger.debug("failed to read %s: %s", path, exc)
        raise MappingFileError(path, f"cannot read mapping file: {exc}") from exc


def _decode(path: Path, raw: bytes) -> MappingFile:
    try:
        mapping_file = decode_text(raw.decode("utf-8"))
    except UnicodeDecodeError as exc:
        logger.debug("failed to read %s: %s", path, exc)
        raise MappingFileError(path, f"cannot read mapping file: {exc}") from exc
    except DecodeError as exc:
        logger.debug("failed to decode %s: %s", path, exc)
        raise MappingFileError(path, str(exc)) from exc

    logger.info("read %d mappings from %s", len(mapping_file.mappings), path)
    return mapping_file
