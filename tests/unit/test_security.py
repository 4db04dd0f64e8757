from datetime import datetime, timedelta, timezone

import jwt
import pytest

from billing_api.config import settings
from billing_api.utils.security import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)


def test_password_hash_roundtrip_and_mismatch() -> None:
    hashed = hash_password("s3cret")

    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_blank_password_cannot_be_hashed() -> None:
    with pytest.raises(ValueError):
        hash_password("")


def test_verify_password_tolerates_malformed_hash() -> None:
    assert verify_password("s3cret", "not-a-real-hash") is False
    assert verify_password("s3cret", "") is False


def test_access_token_carries_operator_identity() -> None:
    token, expires_at = create_access_token(42, "alice")

    payload = decode_token(token)
    assert payload is not None
    assert payload["sub"] == "42"
    assert payload["login"] == "alice"
    assert payload["type"] == "access"
    assert expires_at > datetime.now(timezone.utc)


def test_decode_token_rejects_wrong_type_and_bad_signature() -> None:
    now = datetime.now(timezone.utc)
    refresh = jwt.encode(
        {"sub": "42", "type": "refresh", "exp": now + timedelta(minutes=5)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    forged = jwt.encode(
        {"sub": "42", "type": "access", "exp": now + timedelta(minutes=5)},
        "some-other-secret-that-is-long-enough",
        algorithm=settings.JWT_ALGORITHM,
    )

    assert decode_token(refresh) is None
    assert decode_token(forged) is None
    assert decode_token("garbage") is None


def test_decode_token_rejects_expired_token() -> None:
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    expired = jwt.encode(
        {"sub": "42", "type": "access", "exp": past},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    assert decode_token(expired) is None
