# sdk/client.py
import requests
from typing import Any, Dict, Optional


class ServiceClientError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ServiceClient:
    """Thin client for product-service and user-service."""

    def __init__(
        self,
        product_url: str = "http://localhost:3001",
        user_url: str = "http://localhost:3002",
        timeout: int = 10,
        session: Optional[Any] = None,
    ):
        self.product_url = product_url.rstrip("/")
        self.user_url = user_url.rstrip("/")
        self.timeout = timeout
        # anything with requests' get/post/put signature (e.g. a TestClient)
        self.session = session if session is not None else requests.Session()

    def _unwrap(self, r):
        if r.status_code >= 400:
            try:
                message = r.json().get("error", r.text)
            except ValueError:
                message = r.text
            raise ServiceClientError(r.status_code, message)
        return r.json()

    def health(self, service: str = "product-service"):
        base = self.user_url if service == "user-service" else self.product_url
        r = self.session.get(f"{base}/health", timeout=self.timeout)
        return self._unwrap(r)

    # Products
    def list_products(self, category: Optional[str] = None, in_stock: Optional[bool] = None):
        params = {}
        if category:
            params["category"] = category
        if in_stock is not None:
            params["inStock"] = "true" if in_stock else "false"
        r = self.session.get(f"{self.product_url}/api/products", params=params, timeout=self.timeout)
        return self._unwrap(r)

    def create_product(self, name: str, description: str, price: float, category: str, in_stock: Optional[bool] = None):
        payload: Dict[str, Any] = {
            "name": name, "description": description, "price": price, "category": category
        }
        if in_stock is not None:
            payload["inStock"] = in_stock
        r = self.session.post(f"{self.product_url}/api/products", json=payload, timeout=self.timeout)
        return self._unwrap(r)

    def get_product(self, product_id: str):
        r = self.session.get(f"{self.product_url}/api/products/{product_id}", timeout=self.timeout)
        return self._unwrap(r)

    def update_product(self, product_id: str, **fields):
        if "in_stock" in fields:
            fields["inStock"] = fields.pop("in_stock")
        r = self.session.put(f"{self.product_url}/api/products/{product_id}", json=fields, timeout=self.timeout)
        return self._unwrap(r)

    # Users
    def list_users(self, email: Optional[str] = None):
        params = {"email": email} if email else {}
        r = self.session.get(f"{self.user_url}/api/users", params=params, timeout=self.timeout)
        return self._unwrap(r)

    def create_user(self, name: str, email: str):
        r = self.session.post(f"{self.user_url}/api/users", json={"name": name, "email": email}, timeout=self.timeout)
        return self._unwrap(r)

    def get_user(self, user_id: str):
        r = self.session.get(f"{self.user_url}/api/users/{user_id}", timeout=self.timeout)
        return self._unwrap(r)

    def update_user(self, user_id: str, **fields):
        r = self.session.put(f"{self.user_url}/api/users/{user_id}", json=fields, timeout=self.timeout)
        return self._unwrap(r)
