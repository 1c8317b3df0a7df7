import base64

import pytest
from jose import JWTError, jwt

from courtinvite.core.config import settings
from courtinvite.core.errors import InvalidGuestTokenError
from courtinvite.core.security import create_guest_token, decode_access_token, verify_guest_token
from courtinvite.schemas.token import TokenPayload
from courtinvite.services.identity import resolve_identity


def test_signed_in_user_maps_to_user_key():
    user = TokenPayload(sub="abc", email="a@example.com", exp=9999999999)
    identity = resolve_identity(user, None)
    assert identity.key == "user:abc"
    assert identity.user_id == "abc"
    assert identity.is_guest is False


def test_user_wins_over_guest_token():
    token, _ = create_guest_token()
    user = TokenPayload(sub="abc", exp=9999999999)
    identity = resolve_identity(user, token)
    assert identity.key == "user:abc"


def test_valid_guest_token_maps_to_guest_key():
    token, guest_id = create_guest_token()
    identity = resolve_identity(None, token)
    assert identity.key == f"guest:{guest_id}"
    assert identity.issued_token is None


def test_no_credentials_without_issue_returns_none():
    assert resolve_identity(None, None) is None


def test_no_credentials_with_issue_mints_token():
    identity = resolve_identity(None, None, issue_if_missing=True)
    assert identity.issued_token is not None
    assert verify_guest_token(identity.issued_token) == identity.guest_id
    assert identity.key == f"guest:{identity.guest_id}"


def test_tampered_guest_token_is_rejected():
    token, _ = create_guest_token()
    header, _, signature = token.split(".")
    payload = base64.urlsafe_b64encode(b'{"sub":"someone-else","typ":"guest"}').rstrip(b"=").decode()
    with pytest.raises(InvalidGuestTokenError):
        resolve_identity(None, f"{header}.{payload}.{signature}")


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode({"sub": "someone", "typ": "guest"}, "not-the-secret", algorithm="HS256")
    with pytest.raises(InvalidGuestTokenError):
        resolve_identity(None, forged)


def test_non_guest_token_is_not_accepted_as_guest():
    # A user access token is validly signed but is not a guest token
    token = jwt.encode(
        {"sub": "abc", "aud": settings.JWT_AUDIENCE}, settings.JWT_SECRET, algorithm="HS256"
    )
    assert verify_guest_token(token) is None


def test_guest_token_is_not_an_access_token():
    token, _ = create_guest_token()
    with pytest.raises(JWTError):
        decode_access_token(token)


def test_access_token_without_audience_is_rejected():
    token = jwt.encode(
        {"sub": "abc", "exp": 9999999999}, settings.JWT_SECRET, algorithm="HS256"
    )
    with pytest.raises(JWTError):
        decode_access_token(token)


def test_guest_typed_token_on_host_key_is_rejected():
    token = jwt.encode(
        {"sub": "abc", "typ": "guest", "aud": settings.JWT_AUDIENCE, "exp": 9999999999},
        settings.JWT_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(JWTError):
        decode_access_token(token)


def test_access_token_decodes():
    token = jwt.encode(
        {"sub": "abc", "aud": settings.JWT_AUDIENCE, "exp": 9999999999},
        settings.JWT_SECRET,
        algorithm="HS256",
    )
    assert decode_access_token(token)["sub"] == "abc"
