"""Fixtures for API tests: an app with the ordering routers and a product factory."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api import cart_router, order_router, product_router, register_exception_handlers

ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(cart_router)
    app.include_router(product_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def new_product(client):
    """Register a product through the API and return its id."""

    def _new(**overrides):
        body = {"name": "Widget", "price": 100.0, "stock": 10, "images": ["https://cdn.example.com/w.jpg"]}
        body.update(overrides)
        response = client.post("/products", json=body, headers=ADMIN)
        assert response.status_code == 201
        return response.json()["product_id"]

    return _new
