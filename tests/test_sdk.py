# tests/test_sdk.py
import pytest
from fastapi.testclient import TestClient

from app.database import MemoryStore
from app.main import create_app
from sdk.client import ServiceClient, ServiceClientError

products = ServiceClient(
    product_url="http://testserver",
    session=TestClient(create_app("product-service", store=MemoryStore())),
)
users = ServiceClient(
    user_url="http://testserver",
    session=TestClient(create_app("user-service", store=MemoryStore())),
)

def test_health():
    assert products.health()["service"] == "product-service"
    assert users.health("user-service")["service"] == "user-service"

def test_product_round_trip():
    created = products.create_product("Kettle", "Electric kettle", 39.0, "Kitchen")
    assert created["inStock"] is True

    updated = products.update_product(created["_id"], in_stock=False, price=35.0)
    assert updated["inStock"] is False
    assert updated["price"] == 35.0

    assert products.get_product(created["_id"])["price"] == 35.0
    listed = products.list_products(category="Kitchen", in_stock=False)
    assert [p["_id"] for p in listed] == [created["_id"]]

def test_errors_raise_with_server_message():
    with pytest.raises(ServiceClientError) as exc:
        products.get_product("507f1f77bcf86cd799439011")
    assert exc.value.status_code == 404
    assert exc.value.message == "Product not found"

    with pytest.raises(ServiceClientError) as exc:
        products.create_product("Bad", "Negative", -1, "Kitchen")
    assert exc.value.status_code == 400

def test_user_calls():
    created = users.create_user("Sam", "sam@example.com")
    assert users.get_user(created["_id"])["email"] == "sam@example.com"
    assert users.update_user(created["_id"], name="Samira")["name"] == "Samira"
    assert [u["_id"] for u in users.list_users(email="sam@example.com")] == [created["_id"]]
    with pytest.raises(ServiceClientError) as exc:
        users.create_user("Other", "sam@example.com")
    assert exc.value.status_code == 409
