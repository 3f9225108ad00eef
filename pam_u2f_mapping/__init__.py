"""Parser and formatter for pam_u2f mapping files generated by pamu2fcfg(1)."""

from .codec import (
    DecodeError,
    DecodeErrorKind,
    decode_key,
    decode_mapping,
    decode_text,
    encode_key,
    encode_mapping,
    encode_text,
)
from .config import EditorConfig, get_editor_config
from .model import Key, Mapping, MappingFile, ModelError
from .store import MappingFileError, is_canonical, read_mapping_file, write_mapping_file

__all__ = [
    "DecodeError",
    "DecodeErrorKind",
    "decode_key",
    "decode_mapping",
    "decode_text",
    "encode_key",
    "encode_mapping",
    "encode_text",
    "EditorConfig",
    "get_editor_config",
    "Key",
    "Mapping",
    "MappingFile",
    "ModelError",
    "MappingFileError",
    "is_canonical",
    "read_mapping_file",
    "write_mapping_file",
]

__version__ = "0.1.0"
