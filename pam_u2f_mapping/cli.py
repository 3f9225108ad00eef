"""CLI entrypoint for inspecting and editing pam_u2f mapping files."""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import Callable

from .codec import DecodeError, decode_mapping
from .config import get_editor_config
from .constants import KNOWN_FLAGS, KNOWN_KINDS, USER_SEPARATOR
from .model import Key, Mapping, MappingFile, ModelError
from .store import MappingFileError, is_canonical, read_mapping_file, write_mapping_file

logger = logging.getLogger(__name__)

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def main(argv: list[str] | None = None) -> int:
    config = get_editor_config()

    parser = argparse.ArgumentParser(prog="pam-u2f-mapping", description="Inspect and edit pam_u2f mapping files")
    parser.add_argument(
        "--file",
        default=str(config.mapping_file),
        help="Mapping file path (default: $PAM_U2F_MAPPING_FILE or ~/.config/Yubico/u2f_keys)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=_LOG_LEVELS,
        default=config.log_level if config.log_level in _LOG_LEVELS else "WARNING",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_cmd = subparsers.add_parser("validate", help="Check that the mapping file decodes")
    validate_cmd.set_defaults(func=_cmd_validate)

    users_cmd = subparsers.add_parser("users", help="List users with a mapping")
    users_cmd.set_defaults(func=_cmd_users)

    show = subparsers.add_parser("show", help="Show the keys registered for a user")
    show.add_argument("user")
    show.set_defaults(func=_cmd_show)

    add_user = subparsers.add_parser("add-user", help="Add a user without keys")
    add_user.add_argument("user")
    add_user.set_defaults(func=_cmd_add_user)

    remove_user = subparsers.add_parser("remove-user", help="Remove a user and all of its keys")
    remove_user.add_argument("user")
    remove_user.set_defaults(func=_cmd_remove_user)

    add_key = subparsers.add_parser("add-key", help="Register a key for a user, creating the user if needed")
    add_key.add_argument("user")
    source = add_key.add_mutually_exclusive_group(required=True)
    source.add_argument("--entry", help="Key entry as printed by 'pamu2fcfg -n' (:handle,public_key,kind,+flags)")
    source.add_argument("--handle", help="Key handle")
    add_key.add_argument("--public-key", help="Public key material (with --handle)")
    add_key.add_argument("--kind", default="es256", help="Key algorithm (with --handle)")
    add_key.add_argument(
        "--flag",
        action="append",
        default=[],
        help=f"Key flag, repeatable (with --handle). Known flags: {', '.join(KNOWN_FLAGS)}",
    )
    add_key.set_defaults(func=_cmd_add_key)

    remove_key = subparsers.add_parser("remove-key", help="Remove one key of a user")
    remove_key.add_argument("user")
    remove_key.add_argument("index", type=int, help="Key number as listed by 'show'")
    remove_key.set_defaults(func=_cmd_remove_key)

    set_flag = subparsers.add_parser("set-flag", help="Enable or disable a flag on one key")
    set_flag.add_argument("user")
    set_flag.add_argument("index", type=int, help="Key number as listed by 'show'")
    set_flag.add_argument("flag")
    set_flag.add_argument("--off", action="store_true", help="Disable the flag instead of enabling it")
    set_flag.set_defaults(func=_cmd_set_flag)

    fmt = subparsers.add_parser("fmt", help="Rewrite the mapping file in canonical form")
    fmt.add_argument("--check", action="store_true", help="Only report whether the file is canonical")
    fmt.set_defaults(func=_cmd_fmt)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")
    args.path = pathlib.Path(args.file).expanduser()

    try:
        return args.func(args)
    except (MappingFileError, ModelError, DecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


def _cmd_validate(args: argparse.Namespace) -> int:
    mapping_file = read_mapping_file(args.path)
    print(f"valid ({len(mapping_file.mappings)} users, {mapping_file.key_count()} keys)")
    return 0


def _cmd_users(args: argparse.Namespace) -> int:
    for user in read_mapping_file(args.path).users():
        print(user)
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    mapping = _require_user(read_mapping_file(args.path), args.user)
    if not mapping.keys:
        print(f"no keys registered for {mapping.user}")
        return 0

    rows = [["#", "kind", "pin", "presence", "verification", "handle"]]
    for idx, key in enumerate(mapping.keys, start=1):
        rows.append(
            [
                str(idx),
                key.kind,
                _yes_no(key.requires_pin),
                _yes_no(key.requires_presence),
                _yes_no(key.requires_verification),
                _abbreviate(key.handle),
            ]
        )
    widths = [max(len(row[col]) for row in rows) for col in range(len(rows[0]))]
    for row in rows:
        print("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip())
    return 0


def _cmd_add_user(args: argparse.Namespace) -> int:
    def edit(mapping_file: MappingFile) -> None:
        mapping_file.add_user(args.user)
        logger.info("added user %s", args.user)

    return _edit(args.path, edit, create=True)


def _cmd_remove_user(args: argparse.Namespace) -> int:
    def edit(mapping_file: MappingFile) -> None:
        removed = mapping_file.remove_user(args.user)
        logger.info("removed user %s with %d keys", removed.user, len(removed.keys))

    return _edit(args.path, edit)


def _cmd_add_key(args: argparse.Namespace) -> int:
    keys = _keys_from_args(args)

    def edit(mapping_file: MappingFile) -> None:
        mapping = mapping_file.find(args.user) or mapping_file.add_user(args.user)
        for key in keys:
            if key.kind not in KNOWN_KINDS:
                logger.warning("key kind '%s' is not one pamu2fcfg writes", key.kind)
            mapping.add_key(key)
        logger.info("added %d keys for %s", len(keys), args.user)

    return _edit(args.path, edit, create=True)


def _cmd_remove_key(args: argparse.Namespace) -> int:
    def edit(mapping_file: MappingFile) -> None:
        mapping = _require_user(mapping_file, args.user)
        mapping.remove_key(args.index - 1)
        logger.info("removed key #%d of %s", args.index, args.user)

    return _edit(args.path, edit)


def _cmd_set_flag(args: argparse.Namespace) -> int:
    def edit(mapping_file: MappingFile) -> None:
        mapping = _require_user(mapping_file, args.user)
        if not 1 <= args.index <= len(mapping.keys):
            raise ModelError(f"user '{args.user}' has no key #{args.index}")
        mapping.keys[args.index - 1].set_flag(args.flag, enabled=not args.off)
        logger.info("%s flag %s on key #%d of %s", "cleared" if args.off else "set", args.flag, args.index, args.user)

    return _edit(args.path, edit)


def _cmd_fmt(args: argparse.Namespace) -> int:
    if is_canonical(args.path):
        print("already canonical")
        return 0
    if args.check:
        print(f"{args.path} is not in canonical form")
        return 1
    write_mapping_file(args.path, read_mapping_file(args.path))
    print(f"reformatted {args.path}")
    return 0


def _edit(path: pathlib.Path, edit: Callable[[MappingFile], None], *, create: bool = False) -> int:
    if create and not path.exists():
        logger.info("%s does not exist, starting an empty mapping file", path)
        mapping_file = MappingFile()
    else:
        mapping_file = read_mapping_file(path)
    edit(mapping_file)
    write_mapping_file(path, mapping_file)
    return 0


def _keys_from_args(args: argparse.Namespace) -> list[Key]:
    if args.entry is not None:
        entry = args.entry.strip()
        if not entry.startswith(USER_SEPARATOR):
            entry = USER_SEPARATOR + entry
        return decode_mapping(entry).keys
    if not args.public_key:
        raise ModelError("--public-key is required with --handle")
    return [Key(handle=args.handle, public_key=args.public_key, kind=args.kind, flags=args.flag)]


def _require_user(mapping_file: MappingFile, user: str) -> Mapping:
    mapping = mapping_file.find(user)
    if mapping is None:
        raise ModelError(f"user '{user}' has no mapping")
    return mapping


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def _abbreviate(value: str, keep: int = 8) -> str:
    if len(value) <= keep * 2 + 3:
        return value
    return f"{value[:keep]}...{value[-keep:]}"


if __name__ == "__main__":
    raise SystemExit(main())
