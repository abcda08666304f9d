# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

logger = logging.getLogger(__name__)

COOKIE_NAME = os.getenv("PORTAL_COOKIE_NAME", "portal_session")

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16
ASSOCIATED_DATA = b"portal.session.v1"


def _b64encode(raw: bytes) -> str:
    # unpadded, so the cookie value never needs quoting
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


@dataclass(frozen=True)
class SessionData:
    username: str


class SessionCodec:
    """Encrypt a SessionData into an opaque cookie value and back.

    Tokens are url-safe base64 of nonce + ChaCha20-Poly1305 ciphertext.
    A fresh nonce is drawn per encode, so equal identities give different
    tokens.
    """

    def __init__(self, key: bytes):
        if len(key) != KEY_SIZE:
            raise ValueError(f"Session key must be {KEY_SIZE} bytes")
        self._aead = ChaCha20Poly1305(key)

    def encode(self, session: SessionData) -> str:
        payload = json.dumps({"u": session.username}, separators=(",", ":")).encode("utf-8")
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._aead.encrypt(nonce, payload, ASSOCIATED_DATA)
        return _b64encode(nonce + ciphertext)

    def decode(self, token: Optional[str]) -> Optional[SessionData]:
        if not token:
            return None
        try:
            encoded = token.encode("ascii")
            raw = base64.urlsafe_b64decode(encoded + b"=" * (-len(encoded) % 4))
            # the decoder ignores stray characters and unused trailing bits
            if _b64encode(raw).encode("ascii") != encoded:
                return None
            if len(raw) < NONCE_SIZE + TAG_SIZE:
                return None
            payload = self._aead.decrypt(raw[:NONCE_SIZE], raw[NONCE_SIZE:], ASSOCIATED_DATA)
            data = json.loads(payload.decode("utf-8"))
        except (ValueError, binascii.Error, InvalidTag) as e:
            logger.debug("Rejected session token: %s", type(e).__name__)
            return None

        if not isinstance(data, dict):
            return None
        u = data.get("u")
        if not isinstance(u, str) or not u:
            return None
        return SessionData(username=u)
