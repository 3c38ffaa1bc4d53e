"""Keyring integration for secrets such as API-keyed RPC URLs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

KEYRING_SERVICE = "depositkit"


@dataclass
class KeyringEntry:
    """A secret stored under ``service``/``username``."""

    service: str
    username: str
    secret: str


def get_entry(service: str, username: str) -> Optional[KeyringEntry]:
    try:
        secret = keyring.get_password(service, username)
    except KeyringError:
        return None
    if secret is None:
        return None
    return KeyringEntry(service=service, username=username, secret=secret)


def set_entry(service: str, username: str, secret: str) -> None:
    keyring.set_password(service, username, secret)


def delete_entry(service: str, username: str) -> None:
    try:
        keyring.delete_password(service, username)
    except PasswordDeleteError:
        return


__all__ = ["KEYRING_SERVICE", "KeyringEntry", "delete_entry", "get_entry", "set_entry"]
