import pytest

from facturo.app.core.security import (
    create_access_token,
    decode_access_token,
    generate_reset_token,
    get_password_hash,
    hash_reset_token,
    verify_password,
)


def test_password_hashing_not_plain():
    plain = "password123"
    hashed = get_password_hash(plain)
    assert hashed and hashed != plain


def test_verify_password():
    hashed = get_password_hash("secret")
    assert verify_password("secret", hashed)
    assert not verify_password("wrong", hashed)


def test_create_and_decode_token_contains_sub_and_exp():
    token = create_access_token(user_id=123)
    assert isinstance(token, str) and token
    payload = decode_access_token(token)
    assert payload.get("sub") == "123"
    assert "exp" in payload


def test_expired_token_raises_value_error():
    expired_token = create_access_token(user_id=1, expires_minutes=-1)
    with pytest.raises(ValueError):
        decode_access_token(expired_token)


def test_invalid_token_raises_value_error():
    with pytest.raises(ValueError):
        decode_access_token("invalid.token.value")


def test_reset_tokens_are_random_and_hashed_deterministically():
    first = generate_reset_token()
    second = generate_reset_token()
    assert first != second
    assert len(first) == 64
    assert hash_reset_token(first) == hash_reset_token(first)
    assert hash_reset_token(first) != first
    assert len(hash_reset_token(first)) == 64
