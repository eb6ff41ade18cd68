"""HTTP client writing pets into a remote catalog API (the external sink)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from catalog.poller.dto import Pet
from catalog.services._shared.errors import InternalError

log = logging.getLogger(__name__)

SIGN_IN_PATH = "/api/v1/user/sign-in"
CATEGORY_PATH = "/api/v1/category"
PRODUCT_PATH = "/api/v1/product"


@dataclass(slots=True)
class CatalogApiClient:
    """
    Mirror a pet into the catalog: sign in, create its category, then create
    the product inside that category.

    Any failing step aborts the whole call with :class:`InternalError`; a
    response without a positive ``id`` counts as a failure.
    """

    base_url: str
    username: str
    password: str
    timeout: float = 10.0
    session: requests.Session = field(default_factory=requests.Session)

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{path}"

    def _post(self, path: str, payload: dict[str, Any], *, token: str | None = None) -> Any:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = self.session.post(
                self._url(path), json=payload, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise InternalError(f"POST {path} failed") from exc
        except ValueError as exc:
            raise InternalError(f"POST {path} returned invalid JSON") from exc

    @staticmethod
    def _created_id(body: Any, what: str) -> int:
        entity_id = body.get("id") if isinstance(body, dict) else None
        if not isinstance(entity_id, int) or entity_id <= 0:
            raise InternalError(f"{what} not created")
        return entity_id

    def sign_in(self) -> str:
        body = self._post(SIGN_IN_PATH, {"username": self.username, "password": self.password})
        token = body.get("access_token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token:
            raise InternalError("sign-in returned no access token")
        return token

    def create(self, pet: Pet) -> int:
        """
        Create the pet's category and product remotely.

        :returns: Id of the created product.
        :raises InternalError: On any failed step.
        """
        token = self.sign_in()
        body = self._post(CATEGORY_PATH, {"name": pet.category.name}, token=token)
        category_id = self._created_id(body, "category")
        body = self._post(
            PRODUCT_PATH, {"name": pet.name, "category_id": category_id}, token=token
        )
        product_id = self._created_id(body, "product")
        log.info(
            "pet %s mirrored as product %s",
            pet.id,
            product_id,
            extra={"unit": "petstore", "pet_id": pet.id},
        )
        return product_id
