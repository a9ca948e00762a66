import jwt
import pytest

from app.services.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_hash_is_bcrypt_and_verifies() -> None:
    hashed = hash_password("secret-pass")

    assert hashed.startswith("$2b$04$")
    assert verify_password("secret-pass", hashed)
    assert not verify_password("secret-pasS", hashed)


def test_passwords_past_72_bytes_stay_significant() -> None:
    base = "x" * 80
    hashed = hash_password(base + "a")

    assert verify_password(base + "a", hashed)
    assert not verify_password(base + "b", hashed)


def test_malformed_hash_never_verifies() -> None:
    assert not verify_password("secret-pass", "pbkdf2_sha256$1000$abc$def")
    assert not verify_password("secret-pass", "")


def test_token_round_trip_and_tamper() -> None:
    token = create_access_token("user-1", "admin")

    claims = decode_access_token(token)
    assert claims["sub"] == "user-1"
    assert claims["role"] == "admin"

    with pytest.raises(jwt.InvalidTokenError):
        decode_access_token(token + "x")
