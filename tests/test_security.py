from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.core import security
from app.core.config import settings
from app.core.exceptions import TokenExpired, TokenInvalid, TokenMalformed

SECRET = "unit-test-secret"


def test_generated_token_carries_user_and_identifier():
    token, token_uid = security.generate_token(42, 15, SECRET)

    claims = security.decode_token(token, SECRET)

    assert claims.user_id == 42
    assert claims.token_uid == token_uid
    assert claims.expires_at > datetime.now(timezone.utc)


def test_each_issuance_gets_a_new_identifier():
    _, first_uid = security.generate_token(1, 15, SECRET)
    _, second_uid = security.generate_token(1, 15, SECRET)
    assert first_uid != second_uid


def test_expiry_is_now_plus_lifetime():
    now = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    token, _ = security.generate_token(1, 30, SECRET, now=now)

    payload = jwt.get_unverified_claims(token)

    assert payload["exp"] == int((now + timedelta(minutes=30)).timestamp())


def test_token_signed_with_other_secret_is_invalid():
    refresh_token, _ = security.generate_token(1, 15, settings.REFRESH_SECRET)

    with pytest.raises(TokenInvalid) as exc_info:
        security.decode_token(refresh_token, settings.ACCESS_SECRET)
    assert not isinstance(exc_info.value, TokenExpired)


def test_expired_token():
    issued = datetime.now(timezone.utc) - timedelta(minutes=20)
    token, _ = security.generate_token(1, 15, SECRET, now=issued)

    with pytest.raises(TokenExpired):
        security.decode_token(token, SECRET)


def test_expired_token_is_also_invalid():
    assert issubclass(TokenExpired, TokenInvalid)


def test_garbage_token_is_invalid():
    with pytest.raises(TokenInvalid):
        security.decode_token("not-a-jwt", SECRET)


@pytest.mark.parametrize(
    "payload",
    [
        {"sub": "abc", "uid": "some-uid"},
        {"sub": "1"},
        {"uid": "some-uid"},
    ],
)
def test_malformed_payload(payload):
    payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=5)
    token = jwt.encode(payload, SECRET, algorithm=settings.ALGORITHM)

    with pytest.raises(TokenMalformed):
        security.decode_token(token, SECRET)


def test_password_hasher():
    hasher = security.PasswordHasher(rounds=4)
    hashed = hasher.hash("Secret123")

    assert hashed != "Secret123"
    assert hasher.verify("Secret123", hashed)
    assert not hasher.verify("Secret124", hashed)


def test_password_hasher_rejects_unknown_hash_format():
    assert not security.PasswordHasher(rounds=4).verify("Secret123", "plain-text-not-a-hash")


def test_reset_code_is_numeric_and_padded():
    for _ in range(20):
        code = security.generate_reset_code(6)
        assert len(code) == 6
        assert code.isdigit()
