# tests/test_validation.py
from app.core import validate_payload
from app.models import ProductIn, ProductUpdate, UserIn

PRODUCT = {"name": "Lamp", "description": "Desk lamp", "price": 25.5, "category": "Home"}

def test_valid_product_gets_defaults():
    doc, violations = validate_payload(ProductIn, PRODUCT)
    assert violations == []
    assert doc == {**PRODUCT, "inStock": True}

def test_explicit_in_stock_kept():
    doc, _ = validate_payload(ProductIn, {**PRODUCT, "inStock": False})
    assert doc["inStock"] is False

def test_every_missing_field_reported():
    doc, violations = validate_payload(ProductIn, {})
    assert doc == {}
    assert set(violations) == {
        "name is required", "description is required",
        "price is required", "category is required",
    }

def test_price_must_be_positive():
    _, violations = validate_payload(ProductIn, {**PRODUCT, "price": 0})
    assert violations == ["price must be greater than 0"]

def test_price_must_be_finite():
    _, violations = validate_payload(ProductIn, {**PRODUCT, "price": float("inf")})
    assert violations == ["price must be a number"]
    _, violations = validate_payload(ProductUpdate, {"price": float("nan")}, partial=True)
    assert violations == ["price must be a number"]

def test_wrong_types():
    _, violations = validate_payload(ProductIn, {**PRODUCT, "price": "cheap", "name": 12})
    assert "price must be a number" in violations
    assert "name must be a string" in violations

def test_partial_checks_only_supplied_fields():
    doc, violations = validate_payload(ProductUpdate, {"price": 12}, partial=True)
    assert violations == []
    assert doc == {"price": 12}

def test_partial_rejects_bad_supplied_field():
    _, violations = validate_payload(ProductUpdate, {"price": -1, "name": ""}, partial=True)
    assert "price must be greater than 0" in violations
    assert "name must not be empty" in violations

def test_partial_rejects_null():
    _, violations = validate_payload(ProductUpdate, {"category": None}, partial=True)
    assert violations == ["category must not be null"]

def test_partial_empty_payload_is_noop():
    assert validate_payload(ProductUpdate, {}, partial=True) == ({}, [])

def test_unknown_fields_dropped():
    doc, violations = validate_payload(UserIn, {"name": "A", "email": "a@x.io", "role": "admin"})
    assert violations == []
    assert doc == {"name": "A", "email": "a@x.io"}

def test_non_object_payload():
    assert validate_payload(UserIn, None) == ({}, ["request body must be a JSON object"])
    assert validate_payload(UserIn, "text") == ({}, ["request body must be a JSON object"])
