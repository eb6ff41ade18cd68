"""User authentication endpoints: sign-up, sign-in and token refresh."""

from __future__ import annotations

from flask import Blueprint, current_app

from catalog.api.deps import json_body, json_response, service_context, timing
from catalog.infra.jwt.flask_jwt_token_signer import JWTTokenSigner
from catalog.schemas import CredentialsSchema, TokenPairSchema
from catalog.services.auth.service import AuthService
from catalog.services.refresh_tokens.service import RefreshTokenService

bp = Blueprint("user", __name__)

credentials_schema = CredentialsSchema()
token_pair_schema = TokenPairSchema()


def _auth_service() -> AuthService:
    config = current_app.config
    ctx = service_context()
    refresh_tokens = RefreshTokenService(
        ttl_minutes=int(config["REFRESH_TOKEN_TTL_MINUTES"]),
        token_bytes=int(config["REFRESH_TOKEN_BYTES"]),
        ctx=ctx,
    )
    return AuthService(signer=JWTTokenSigner(), refresh_tokens=refresh_tokens, ctx=ctx)


@bp.post("/sign-up")
@timing
def sign_up():
    """Register a user and return their first token pair."""

    credentials = credentials_schema.load(json_body())
    pair = _auth_service().sign_up(credentials)
    return json_response(token_pair_schema.dump(pair), status=201)


@bp.post("/sign-in")
@timing
def sign_in():
    """Authenticate credentials and issue a fresh token pair."""

    credentials = credentials_schema.load(json_body())
    pair = _auth_service().sign_in(credentials)
    return json_response(token_pair_schema.dump(pair))


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a token pair. The presented refresh token becomes unusable."""

    pair = token_pair_schema.load(json_body())
    rotated = _auth_service().refresh(pair)
    return json_response(token_pair_schema.dump(rotated))
