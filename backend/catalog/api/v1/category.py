"""Category endpoints. Reads are public, writes require a bearer token."""

from __future__ import annotations

from flask import Blueprint

from catalog.api.deps import (
    json_body,
    json_response,
    parse_window,
    require_auth,
    service_context,
    timing,
)
from catalog.schemas import CategorySchema, CategoryWriteSchema, IdSchema, build_meta
from catalog.services.catalog.categories import CategoryService

bp = Blueprint("category", __name__)

category_schema = CategorySchema()
category_list_schema = CategorySchema(many=True)
category_write_schema = CategoryWriteSchema()
id_schema = IdSchema()


@bp.get("")
@timing
def list_categories():
    """Return categories newest first within a limit/offset window."""

    window = parse_window()
    page = CategoryService(ctx=service_context()).list(window)
    data = category_list_schema.dump(page.items)
    return json_response({"data": data, "meta": build_meta(limit=page.limit, offset=page.offset)})


@bp.get("/<int:category_id>")
@timing
def get_category(category_id: int):
    category = CategoryService(ctx=service_context()).get(category_id)
    return json_response({"data": category_schema.dump(category)})


@bp.post("")
@require_auth
@timing
def create_category():
    payload = category_write_schema.load(json_body())
    category_id = CategoryService(ctx=service_context()).create(payload["name"])
    return json_response(id_schema.dump({"id": category_id}), status=201)


@bp.put("/<int:category_id>")
@require_auth
@timing
def update_category(category_id: int):
    payload = category_write_schema.load(json_body())
    updated = CategoryService(ctx=service_context()).update(category_id, payload["name"])
    return json_response(id_schema.dump({"id": updated}))


@bp.delete("/<int:category_id>")
@require_auth
@timing
def delete_category(category_id: int):
    """Delete a category together with its products."""

    deleted = CategoryService(ctx=service_context()).delete(category_id)
    return json_response(id_schema.dump({"id": deleted}))
