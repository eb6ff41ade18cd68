"""Integration tests for the category and product endpoints."""

from __future__ import annotations

import pytest
from freezegun import freeze_time

from tests.helpers.http import build_url, json_headers, sign_up


@pytest.fixture()
def token(client) -> str:
    return sign_up(client)["access_token"]


def _create_category(client, token: str, name: str) -> int:
    resp = client.post(build_url("/category"), json={"name": name}, headers=json_headers(token))
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["id"]


def _create_product(client, token: str, name: str, category_id: int) -> int:
    resp = client.post(
        build_url("/product"),
        json={"name": name, "category_id": category_id},
        headers=json_headers(token),
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["id"]


def test_writes_require_bearer_token(client) -> None:
    missing = client.post(build_url("/category"), json={"name": "Dogs"})
    garbage = client.post(
        build_url("/category"), json={"name": "Dogs"}, headers=json_headers("garbage")
    )

    assert missing.status_code == 401
    assert missing.get_json()["code"] == "unauthorized"
    assert garbage.status_code == 401
    assert garbage.get_json()["code"] == "invalid_token"


def test_expired_access_token_is_rejected(client) -> None:
    with freeze_time("2030-01-01 12:00:00"):
        token = sign_up(client)["access_token"]

    with freeze_time("2030-01-01 13:00:00"):
        resp = client.post(
            build_url("/category"), json={"name": "Dogs"}, headers=json_headers(token)
        )

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "token_expired"


def test_category_crud(client, token) -> None:
    category_id = _create_category(client, token, "Dogs")

    got = client.get(build_url(f"/category/{category_id}"))
    assert got.get_json()["data"] == {"id": category_id, "name": "Dogs"}

    dup = client.post(build_url("/category"), json={"name": "Dogs"}, headers=json_headers(token))
    assert dup.status_code == 409

    renamed = client.put(
        build_url(f"/category/{category_id}"), json={"name": "Hounds"}, headers=json_headers(token)
    )
    assert renamed.get_json() == {"id": category_id}

    deleted = client.delete(build_url(f"/category/{category_id}"), headers=json_headers(token))
    assert deleted.get_json() == {"id": category_id}
    assert client.get(build_url(f"/category/{category_id}")).status_code == 404


def test_category_list_window(client, token) -> None:
    ids = [_create_category(client, token, f"c{i}") for i in range(3)]

    body = client.get(build_url("/category", limit=2, offset=0)).get_json()
    fallback = client.get(build_url("/category", limit=0, offset=-5)).get_json()

    assert [c["id"] for c in body["data"]] == [ids[2], ids[1]]
    assert body["meta"] == {"limit": 2, "offset": 0}
    assert fallback["meta"] == {"limit": 10, "offset": 0}


def test_product_crud_and_filter(client, token) -> None:
    dogs = _create_category(client, token, "Dogs")
    cats = _create_category(client, token, "Cats")
    rex = _create_product(client, token, "Rex", dogs)
    _create_product(client, token, "Tom", cats)

    only_dogs = client.get(build_url("/product", category_id=dogs)).get_json()
    assert [p["id"] for p in only_dogs["data"]] == [rex]
    assert len(client.get(build_url("/product")).get_json()["data"]) == 2

    moved = client.put(
        build_url(f"/product/{rex}"),
        json={"name": "Rex", "old_category_id": dogs, "new_category_id": cats},
        headers=json_headers(token),
    )
    assert moved.get_json() == {"id": rex}
    assert client.get(build_url("/product", category_id=dogs)).get_json()["data"] == []

    deleted = client.delete(build_url(f"/product/{rex}"), headers=json_headers(token))
    assert deleted.status_code == 200
    again = client.delete(build_url(f"/product/{rex}"), headers=json_headers(token))
    assert again.status_code == 404


def test_product_in_missing_category(client, token) -> None:
    resp = client.post(
        build_url("/product"), json={"name": "Rex", "category_id": 999}, headers=json_headers(token)
    )
    listing = client.get(build_url("/product", category_id=999))

    assert resp.status_code == 404
    assert listing.status_code == 404


def test_unknown_route_is_problem_json(client) -> None:
    resp = client.get(build_url("/nope"))

    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
