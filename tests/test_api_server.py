import pytest
from fastapi.testclient import TestClient

import api_server
from freshbasket.catalog import normalize_package
from freshbasket.errors import CatalogUnavailable
from freshbasket.service import CatalogService


@pytest.fixture
def client():
    return TestClient(api_server.app)


@pytest.fixture
def fake_catalog(monkeypatch, package_doc):
    def fetch(self, package_id):
        if package_id != "pkg1":
            raise CatalogUnavailable("not found", package_id=package_id, status_code=404)
        return normalize_package(package_doc)

    monkeypatch.setattr(CatalogService, "fetch_package", fetch)


def test_quote(client):
    response = client.post("/quote", json={
        "basePrice": 50,
        "valuePrice": 40,
        "items": [{"price": 10, "quantity": 2}, {"price": 5, "quantity": 2}],
    })
    assert response.status_code == 200
    assert response.json()["priceAdjustment"] == "-10.00"
    assert response.json()["finalPrice"] == "40.00"


def test_quote_without_benchmark(client):
    response = client.post("/quote", json={"basePrice": 50, "items": [{"price": 99, "quantity": 1}]})
    assert response.json()["finalPrice"] == "50.00"
    assert response.json()["strategy"] == "fixed"


def test_quote_rejects_negative_quantity(client):
    response = client.post("/quote", json={"basePrice": 50, "items": [{"price": 1, "quantity": -1}]})
    assert response.status_code == 422


def test_quote_batch(client):
    response = client.post("/quote/batch", json=[
        {"reference": "a", "basePrice": 50, "valuePrice": 40, "items": [{"price": 55, "quantity": 1}]},
        {"reference": "b", "basePrice": 50, "valuePrice": 40, "items": []},
    ])
    assert [(r["reference"], r["finalPrice"]) for r in response.json()] == [("a", "65.00"), ("b", "40.00")]


def test_package_session(client, fake_catalog):
    response = client.get("/packages/pkg1/session")
    assert response.status_code == 200
    body = response.json()
    assert [line["productId"] for line in body["basket"]] == ["p1", "p2", "p3"]
    assert body["quote"]["finalPrice"] == "50.00"
    assert body["canProceed"] is True


def test_package_session_catalog_down(client, fake_catalog):
    response = client.get("/packages/missing/session")
    assert response.status_code == 502


def test_customize(client, fake_catalog):
    response = client.post("/packages/pkg1/customize", json={"actions": ["swap:p1:s1", "qty:s1:+1", "add:s2"]})
    body = response.json()
    assert response.status_code == 200
    assert [a["applied"] for a in body["actions"]] == [True, True, True]
    # p2 10 + p3 10 + s1 3x5 + s2 12.50
    assert body["quote"]["itemsTotalValue"] == "47.50"
    assert body["handoff"]["finalPrice"] == "57.50"


def test_customize_empty_basket_has_no_handoff(client, fake_catalog):
    response = client.post("/packages/pkg1/customize", json={"actions": ["remove:p1", "remove:p2", "remove:p3"]})
    body = response.json()
    assert body["canProceed"] is False
    assert body["handoff"] is None


def test_quote_with_huge_price(client):
    response = client.post("/quote", json={"basePrice": 50, "valuePrice": 40, "items": [{"price": 1e30, "quantity": 1}]})
    assert response.status_code == 200
    assert response.json()["itemsTotalValue"] == "1000000000000000000000000000000.00"


def test_customize_invalid_action(client, fake_catalog):
    response = client.post("/packages/pkg1/customize", json={"actions": ["juggle:p1"]})
    assert response.status_code == 422
