"""HTTP client for the storefront API.

A thin synchronous wrapper over ``httpx.Client`` that attaches the bearer
token and turns error responses and transport failures into the
``storefront.errors`` taxonomy. Requests are sent once; the client never
retries on its own.
"""

from decimal import Decimal

import httpx
import structlog

from storefront.errors import (
    ApiError,
    AuthenticationError,
    GatewayError,
    GatewayErrorKind,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

_GATEWAY_KINDS = {
    402: GatewayErrorKind.DECLINED,
    502: GatewayErrorKind.UNAVAILABLE,
    504: GatewayErrorKind.AMBIGUOUS,
}


def _body(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_detail(body):
    if isinstance(body, dict):
        return body.get("error", body.get("detail", body))
    return body


class StorefrontClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: str | None = None,
        timeout: float = 10.0,
        http: httpx.Client | None = None,
    ) -> None:
        self.token = token
        self._http = http if http is not None else httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "StorefrontClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------
    def _request(self, method: str, path: str, **kwargs):
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = self._http.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("api_timeout", method=method, path=path)
            raise NetworkError(f"{method} {path} timed out") from exc
        except httpx.TransportError as exc:
            logger.warning("api_unreachable", method=method, path=path, error=str(exc))
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            return _body(response)
        self._raise_for(response)

    @staticmethod
    def _raise_for(response: httpx.Response) -> None:
        body = _body(response)
        detail = _error_detail(body)
        status = response.status_code

        if status in (400, 422):
            raise ValidationError(detail)
        if status == 401:
            raise AuthenticationError(str(detail))
        if status == 403:
            raise PermissionDeniedError(str(detail))
        if status == 404:
            raise NotFoundError(str(detail))
        if status in _GATEWAY_KINDS:
            raise GatewayError(_GATEWAY_KINDS[status], str(detail))
        if status == 503:
            raise PersistenceError(str(detail))
        raise ApiError(status, body)

    # -------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------
    def register(self, name: str, email: str, password: str) -> str:
        body = self._request("POST", "/users", json={"name": name, "email": email, "password": password})
        return body["user_id"]

    def login(self, email: str, password: str) -> str:
        body = self._request("POST", "/auth/token", json={"email": email, "password": password})
        self.token = body["access_token"]
        return self.token

    # -------------------------------------------------------------------
    # Catalogue
    # -------------------------------------------------------------------
    def list_products(
        self,
        category: str | None = None,
        search: str | None = None,
        sort: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> dict:
        params = {"category": category, "search": search, "sort": sort, "page": page, "limit": limit}
        return self._request("GET", "/products", params={k: v for k, v in params.items() if v is not None})

    def get_product(self, product_id: str) -> dict:
        return self._request("GET", f"/products/{product_id}")

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def create_order(self, items, shipping_address: dict, payment_method: str) -> dict:
        """POST /orders. Returns ``{"order": ..., "client_secret": ...}``."""
        payload = {
            "items": [
                {
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price": float(item.unit_price) if isinstance(item.unit_price, Decimal) else item.unit_price,
                    "name": item.name,
                }
                for item in items
            ],
            "shipping_address": shipping_address,
            "payment_method": payment_method,
        }
        return self._request("POST", "/orders", json=payload)

    def get_order(self, order_id: str) -> dict:
        return self._request("GET", f"/orders/{order_id}")

    def list_orders(self) -> list[dict]:
        return self._request("GET", "/orders")["orders"]
