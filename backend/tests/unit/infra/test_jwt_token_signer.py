"""Unit tests for the Flask-JWT-Extended access-token signer."""

from __future__ import annotations

from datetime import timedelta

import pytest
from freezegun import freeze_time

from catalog.infra.jwt.flask_jwt_token_signer import JWTTokenSigner
from catalog.services._shared.errors import ExpiredError, InternalError, InvalidTokenError
from catalog.services._shared.ports import AccessClaims


@pytest.fixture()
def signer(app):
    with app.app_context():
        yield JWTTokenSigner(ttl=timedelta(minutes=5))


def test_parse_returns_created_claims(signer):
    claims = AccessClaims(username="alice", refresh_token_id=42)

    parsed = signer.parse(signer.create(claims))

    assert parsed.username == "alice"
    assert parsed.refresh_token_id == 42
    assert parsed.expires_at is not None


def test_token_is_signed_with_hs512(signer):
    import jwt as pyjwt

    token = signer.create(AccessClaims(username="alice", refresh_token_id=1))

    assert pyjwt.get_unverified_header(token)["alg"] == "HS512"


def test_tampered_token_is_rejected(signer):
    token = signer.create(AccessClaims(username="alice", refresh_token_id=1))
    head, payload, sig = token.split(".")
    tampered = ".".join([head, payload, sig[:-2] + ("AA" if sig[-2:] != "AA" else "BB")])

    with pytest.raises(InvalidTokenError):
        signer.parse(tampered)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token_is_rejected(signer, token):
    with pytest.raises(InvalidTokenError):
        signer.parse(token)


def test_expired_token_raises_expired_unless_tolerated(signer):
    with freeze_time("2030-01-01 12:00:00"):
        token = signer.create(AccessClaims(username="bob", refresh_token_id=7))

    with freeze_time("2030-01-01 12:10:00"):
        with pytest.raises(ExpiredError):
            signer.parse(token)
        with pytest.raises(ExpiredError):
            signer.verify(token)

        claims = signer.parse(token, allow_expired=True)

    assert claims.username == "bob"
    assert claims.refresh_token_id == 7


def test_token_signed_with_another_key_is_rejected(app, signer):
    token = signer.create(AccessClaims(username="alice", refresh_token_id=1))

    original = app.config["JWT_SECRET_KEY"]
    app.config["JWT_SECRET_KEY"] = "another-secret-key-of-reasonable-length-for-hs512-0000000000"
    try:
        with pytest.raises(InvalidTokenError):
            signer.parse(token)
    finally:
        app.config["JWT_SECRET_KEY"] = original


def test_create_wraps_signing_failures(app, signer):
    with pytest.raises(InternalError):
        signer.create(AccessClaims(username="alice", refresh_token_id="not-an-int"))  # type: ignore[arg-type]
