"""Utility helpers exposed by depositkit."""

from .encoding import little_endian_hex_to_int, timestamp_to_datetime, to_hex_string
from .keyring_backend import KEYRING_SERVICE, KeyringEntry, delete_entry, get_entry, set_entry
from .paths import env_file_path, state_dir

__all__ = [
    "KEYRING_SERVICE",
    "KeyringEntry",
    "delete_entry",
    "env_file_path",
    "get_entry",
    "little_endian_hex_to_int",
    "set_entry",
    "state_dir",
    "timestamp_to_datetime",
    "to_hex_string",
]
