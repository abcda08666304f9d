# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.getenv("PORTAL_CONFIG", "config.yml")
DEFAULT_PORT = 3000
DEFAULT_KEY = b"secret1secret2secret3secret4abcd"
DEFAULT_DB_NAME = "insecure.db"
KEY_LENGTH = 32


@dataclass(frozen=True)
class PortalConfig:
    port: int = DEFAULT_PORT
    session_key: bytes = DEFAULT_KEY
    db_name: str = DEFAULT_DB_NAME


def _port(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 65535:
        logger.warning("Invalid port %r, keeping default %s", value, DEFAULT_PORT)
        return DEFAULT_PORT
    return value


def _key(value: object) -> bytes:
    if not isinstance(value, str):
        logger.warning("Session key must be a string, keeping default")
        return DEFAULT_KEY
    raw = value.encode("utf-8")
    if len(raw) != KEY_LENGTH:
        logger.warning(
            "Session key of insufficient length (%s bytes), key length of %s bytes required",
            len(raw),
            KEY_LENGTH,
        )
        return DEFAULT_KEY
    return raw


def _db_name(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        logger.warning("Invalid db_name %r, keeping default %s", value, DEFAULT_DB_NAME)
        return DEFAULT_DB_NAME
    return value.strip()


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> PortalConfig:
    """Load the YAML config file, falling back to defaults key by key.

    A missing or unparseable file is never fatal: the built-in defaults are
    returned and the problem is logged.
    """
    p = Path(path)
    if not p.exists():
        logger.info("Could not find config %s, using defaults", p)
        return PortalConfig()

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("Could not read config %s (%s), using defaults", p, e)
        return PortalConfig()

    if not isinstance(raw, dict):
        logger.warning("Config %s is not a mapping, using defaults", p)
        return PortalConfig()

    return PortalConfig(
        port=_port(raw["port"]) if "port" in raw else DEFAULT_PORT,
        session_key=_key(raw["key"]) if "key" in raw else DEFAULT_KEY,
        db_name=_db_name(raw["db_name"]) if "db_name" in raw else DEFAULT_DB_NAME,
    )
