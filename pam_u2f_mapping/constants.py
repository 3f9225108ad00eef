"""Mapping file format constants."""

USER_SEPARATOR = ":"
FIELD_SEPARATOR = ","
FLAG_SEPARATOR = "+"
LINE_SEPARATOR = "\n"

# handle, public key, kind, flags group
KEY_FIELD_COUNT = 4

FLAG_PRESENCE = "presence"
FLAG_PIN = "pin"
FLAG_VERIFICATION = "verification"
KNOWN_FLAGS = (FLAG_PRESENCE, FLAG_PIN, FLAG_VERIFICATION)

KNOWN_KINDS = {"es256", "eddsa", "rs256"}

DEFAULT_MAPPING_FILE = "~/.config/Yubico/u2f_keys"
DEFAULT_LOG_LEVEL = "WARNING"

ENV_MAPPING_FILE = "PAM_U2F_MAPPING_FILE"
ENV_LOG_LEVEL = "PAM_U2F_LOG_LEVEL"
