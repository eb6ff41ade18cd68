"""Product endpoints. Reads are public, writes require a bearer token."""

from __future__ import annotations

from flask import Blueprint, request

from catalog.api.deps import (
    json_body,
    json_response,
    parse_window,
    require_auth,
    service_context,
    timing,
)
from catalog.schemas import (
    IdSchema,
    ProductCreateSchema,
    ProductFilterSchema,
    ProductSchema,
    ProductUpdateSchema,
    build_meta,
)
from catalog.services.catalog.dto import ProductCreateIn, ProductUpdateIn
from catalog.services.catalog.products import ProductService

bp = Blueprint("product", __name__)

product_list_schema = ProductSchema(many=True)
product_create_schema = ProductCreateSchema()
product_update_schema = ProductUpdateSchema()
product_filter_schema = ProductFilterSchema()
id_schema = IdSchema()


@bp.get("")
@timing
def list_products():
    """Return products newest first, optionally restricted to one category."""

    filters = product_filter_schema.load(request.args)
    window = parse_window()
    service = ProductService(ctx=service_context())
    if filters["category_id"] is not None:
        page = service.list_by_category(filters["category_id"], window)
    else:
        page = service.list(window)
    data = product_list_schema.dump(page.items)
    return json_response({"data": data, "meta": build_meta(limit=page.limit, offset=page.offset)})


@bp.post("")
@require_auth
@timing
def create_product():
    payload = product_create_schema.load(json_body())
    product_id = ProductService(ctx=service_context()).create(ProductCreateIn(**payload))
    return json_response(id_schema.dump({"id": product_id}), status=201)


@bp.put("/<int:product_id>")
@require_auth
@timing
def update_product(product_id: int):
    """Rename a product and optionally move it to another category."""

    payload = product_update_schema.load(json_body())
    updated = ProductService(ctx=service_context()).update(ProductUpdateIn(id=product_id, **payload))
    return json_response(id_schema.dump({"id": updated}))


@bp.delete("/<int:product_id>")
@require_auth
@timing
def delete_product(product_id: int):
    deleted = ProductService(ctx=service_context()).delete(product_id)
    return json_response(id_schema.dump({"id": deleted}))
