"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, post_load, validate

from catalog.services._shared.dto import Credentials, TokenPair


class CredentialsSchema(Schema):
    """Input payload for sign-up and sign-in.

    Username format rules live in the service layer so non-HTTP callers get
    them too; here only presence is checked.
    """

    username = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))

    @post_load
    def make_credentials(self, data: dict[str, Any], **_: Any) -> Credentials:
        return Credentials(username=data["username"], password=data["password"])


class TokenPairSchema(Schema):
    """Token pair exchanged by sign-up, sign-in and refresh."""

    access_token = fields.String(required=True, validate=validate.Length(min=1))
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))

    @post_load
    def make_pair(self, data: dict[str, Any], **_: Any) -> TokenPair:
        return TokenPair(access_token=data["access_token"], refresh_token=data["refresh_token"])
