"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load

from catalog.repositories.base import Window


class WindowQuerySchema(Schema):
    """Parse ``limit``/``offset`` query parameters into a :class:`Window`.

    Out-of-range values fall back to defaults instead of failing the request:
    ``limit <= 0`` selects the default page size and ``offset < 0`` becomes 0.
    """

    class Meta:
        unknown = EXCLUDE

    limit = fields.Integer(load_default=None)
    offset = fields.Integer(load_default=None)

    @post_load
    def to_window(self, data: dict[str, Any], **_: Any) -> Window:
        return Window.clamp(data.get("limit"), data.get("offset"))


class MetaSchema(Schema):
    """Metadata block for windowed responses."""

    limit = fields.Integer(required=True)
    offset = fields.Integer(required=True)


class IdSchema(Schema):
    """Response payload carrying only the affected entity id."""

    id = fields.Integer(required=True)


def build_meta(*, limit: int, offset: int) -> dict[str, int]:
    """Return a ``meta`` mapping for windowed responses."""

    return {"limit": int(limit), "offset": int(offset)}
