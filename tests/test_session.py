import base64

import pytest

from portal.auth.session import NONCE_SIZE, SessionCodec, SessionData

KEY = b"0123456789abcdef0123456789abcdef"


def _raw(token: str) -> bytes:
    return base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))


def _token(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


@pytest.fixture()
def codec() -> SessionCodec:
    return SessionCodec(KEY)


@pytest.mark.parametrize("username", ["alice", "bob", "ünïcødé", "a" * 500, "' OR '1'='1"])
def test_decode_recovers_encoded_identity(codec, username):
    session = SessionData(username=username)
    assert codec.decode(codec.encode(session)) == session


def test_encodings_use_fresh_nonces(codec):
    a = codec.encode(SessionData(username="alice"))
    b = codec.encode(SessionData(username="alice"))
    assert a != b
    assert codec.decode(a) == codec.decode(b)


def test_token_does_not_reveal_username(codec):
    token = codec.encode(SessionData(username="alice"))
    assert "alice" not in token
    assert b"alice" not in _raw(token)


def test_every_bit_flip_is_rejected(codec):
    token = codec.encode(SessionData(username="alice"))
    raw = _raw(token)
    for i in range(len(raw) * 8):
        tampered = bytearray(raw)
        tampered[i // 8] ^= 1 << (i % 8)
        assert codec.decode(_token(bytes(tampered))) is None


def test_every_character_bit_flip_is_rejected(codec):
    token = codec.encode(SessionData(username="alice"))
    for pos in range(len(token)):
        for bit in range(8):
            ch = chr(ord(token[pos]) ^ (1 << bit))
            assert codec.decode(token[:pos] + ch + token[pos + 1:]) is None


@pytest.mark.parametrize("token", [None, "", "garbage", "====", "é", "A" * 40])
def test_malformed_tokens_are_anonymous(codec, token):
    assert codec.decode(token) is None


def test_truncated_token_is_anonymous(codec):
    raw = _raw(codec.encode(SessionData(username="alice")))
    for n in (0, NONCE_SIZE, NONCE_SIZE + 5, len(raw) - 1):
        assert codec.decode(_token(raw[:n])) is None


def test_other_key_cannot_decode(codec):
    token = codec.encode(SessionData(username="alice"))
    assert SessionCodec(b"z" * 32).decode(token) is None


def test_empty_username_is_anonymous(codec):
    assert codec.decode(codec.encode(SessionData(username=""))) is None


def test_key_must_be_32_bytes():
    with pytest.raises(ValueError):
        SessionCodec(b"short")


@pytest.mark.parametrize("username", ["a", "ab", "abc", "alice", "bob"])
def test_tokens_are_unpadded(codec, username):
    token = codec.encode(SessionData(username=username))
    assert "=" not in token
    assert codec.decode(token + "=" * (-len(token) % 4 or 4)) is None
