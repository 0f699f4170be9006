"""Test the Auth Gateway's bearer verification."""
from datetime import timedelta

import pytest

from conftest import make_settings
from shared.security import (
    AuthenticatedUser,
    AuthGateway,
    ExpiredCredential,
    InvalidCredential,
    MalformedCredential,
    MissingCredential,
)

USER = AuthenticatedUser(id="u-1", email="reader@example.com", username="reader")


@pytest.fixture
def gateway():
    return AuthGateway(make_settings())


def test_valid_token_round_trips_identity(gateway):
    token = gateway.create_access_token(USER)
    assert gateway.authenticate(f"Bearer {token}") == USER


def test_scheme_is_case_insensitive(gateway):
    token = gateway.create_access_token(USER)
    assert gateway.authenticate(f"bearer {token}").id == "u-1"


def test_missing_header(gateway):
    with pytest.raises(MissingCredential):
        gateway.authenticate(None)
    with pytest.raises(MissingCredential):
        gateway.authenticate("")


@pytest.mark.parametrize("header", ["Bearer", "Bearer   ", "Token abc.def.ghi", "Bearer not-a-jwt"])
def test_malformed_header(gateway, header):
    with pytest.raises(MalformedCredential):
        gateway.authenticate(header)


def test_expired_token(gateway):
    token = gateway.create_access_token(USER, expires_delta=timedelta(seconds=-5))
    with pytest.raises(ExpiredCredential):
        gateway.authenticate(f"Bearer {token}")


def test_token_signed_with_another_secret_is_invalid(gateway):
    other = AuthGateway(make_settings(jwt_secret_key="someone-else"))
    token = other.create_access_token(USER)
    with pytest.raises(InvalidCredential):
        gateway.authenticate(f"Bearer {token}")


def test_wrong_audience_is_invalid(gateway):
    other = AuthGateway(make_settings(jwt_audience="another-app"))
    token = other.create_access_token(USER)
    with pytest.raises(InvalidCredential):
        gateway.authenticate(f"Bearer {token}")


def test_token_without_identity_claims_is_malformed(gateway):
    from jose import jwt

    settings = make_settings()
    token = jwt.encode(
        {"sub": "u-1", "iss": settings.jwt_issuer, "aud": settings.jwt_audience},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(MalformedCredential):
        gateway.authenticate(f"Bearer {token}")


def test_failures_are_unauthenticated_errors():
    from shared.errors import Unauthenticated

    for error in (MissingCredential, MalformedCredential, ExpiredCredential, InvalidCredential):
        assert issubclass(error, Unauthenticated)
        assert error().status_code == 401
