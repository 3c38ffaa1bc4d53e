"""Rotating diagnostic logger with a tamper-evident audit trail.

Every record is written twice: once as a JSON line to a rotating log file
under ``<state dir>/logs`` and once to ``<state dir>/audit.jsonl`` where each
entry carries the hash of its predecessor and an Ed25519 signature.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import os
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from .paths import state_dir

LOGGER_NAME = "depositkit"


def log_file() -> Path:
    return state_dir() / "logs" / "depositkit.log"


def audit_log() -> Path:
    return state_dir() / "audit.jsonl"


def audit_key() -> Path:
    return state_dir() / "audit_ed25519.pem"


def _get_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    path = log_file()
    for existing in list(logger.handlers):
        if isinstance(existing, RotatingFileHandler) and existing.baseFilename == os.path.abspath(path):
            return logger
        # The state dir moved; follow it.
        logger.removeHandler(existing)
        existing.close()

    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
    formatter = logging.Formatter("%(message)s")

    logger.setLevel(logging.INFO)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


def _load_or_create_key() -> ed25519.Ed25519PrivateKey:
    path = audit_key()
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        data = path.read_bytes()
        return serialization.load_pem_private_key(data, password=None)
    key = ed25519.Ed25519PrivateKey.generate()
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    path.write_bytes(pem)
    os.chmod(path, 0o600)
    return key


_last_hashes: Dict[Path, Optional[str]] = {}


def _read_last_hash(path: Path) -> Optional[str]:
    if not path.exists():
        return None
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    if not lines:
        return None
    try:
        payload = json.loads(lines[-1])
    except json.JSONDecodeError:
        return None
    return payload.get("hash")


def _last_hash() -> Optional[str]:
    path = audit_log()
    if path not in _last_hashes:
        _last_hashes[path] = _read_last_hash(path)
    return _last_hashes[path]


def _write_audit_record(record: Dict[str, object]) -> None:
    key = _load_or_create_key()
    entry = {
        "ts": time.time(),
        "prev": _last_hash(),
        "record": record,
    }
    canonical = json.dumps(entry, sort_keys=True, separators=(",", ":"), default=str).encode("utf-8")
    digest = hashlib.sha256(canonical).digest()
    signature = key.sign(digest)
    entry["hash"] = hashlib.sha256(canonical).hexdigest()
    entry["signature"] = base64.b64encode(signature).decode("ascii")
    entry["public_key"] = base64.b64encode(
        key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
    ).decode("ascii")
    with audit_log().open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(entry, sort_keys=True, default=str) + "\n")
    _last_hashes[audit_log()] = entry["hash"]


def info(record: Dict[str, object]) -> None:
    """Write a JSON record to the rotating log and the audit trail."""

    logger = _get_logger()
    logger.info(json.dumps(record, default=str))
    _write_audit_record(record)


def warning(record: Dict[str, object]) -> None:
    """Same as :func:`info` but flagged so operators can grep for it."""

    info({**record, "level": "warning"})


__all__ = ["audit_key", "audit_log", "info", "log_file", "warning"]
