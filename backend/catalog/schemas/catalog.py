"""Category and product Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

NAME_LENGTH = validate.Length(min=1, max=255)


class CategorySchema(Schema):
    """Serialized representation of a category."""

    id = fields.Integer(dump_only=True)
    name = fields.String(required=True)


class CategoryWriteSchema(Schema):
    """Payload for creating or renaming a category."""

    name = fields.String(required=True, validate=NAME_LENGTH)


class ProductSchema(Schema):
    """Serialized representation of a product."""

    id = fields.Integer(dump_only=True)
    name = fields.String(required=True)
    category_id = fields.Integer(required=True)


class ProductCreateSchema(Schema):
    """Payload for creating a product."""

    name = fields.String(required=True, validate=NAME_LENGTH)
    category_id = fields.Integer(required=True, validate=validate.Range(min=1))


class ProductUpdateSchema(Schema):
    """Payload for updating a product, optionally moving it between categories."""

    name = fields.String(required=True, validate=NAME_LENGTH)
    old_category_id = fields.Integer(load_default=None, validate=validate.Range(min=1))
    new_category_id = fields.Integer(load_default=None, validate=validate.Range(min=1))


class ProductFilterSchema(Schema):
    """Query parameters for product listing."""

    class Meta:
        unknown = EXCLUDE

    category_id = fields.Integer(load_default=None, validate=validate.Range(min=1))
