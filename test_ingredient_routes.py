"""Tests for the /api/ingredients endpoints"""
import csv

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from routers.ingredients import NOT_AVAILABLE_DESCRIPTION, UNKNOWN_INGREDIENT_NAME, router
from services.ingredient_lookup import IngredientLookupService, get_ingredient_service


def make_client(service: IngredientLookupService) -> TestClient:
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_ingredient_service] = lambda: service
    return TestClient(app)


@pytest.fixture
def client(tmp_path):
    csv_path = tmp_path / "ingredients.csv"
    with open(csv_path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=["name", "short_description", "what_does_it_do", "url"])
        writer.writeheader()
        writer.writerow({"name": "Niacinamide", "short_description": "Brightening agent",
                         "what_does_it_do": "Reduces inflammation", "url": "https://example.com/niacinamide"})
        writer.writerow({"name": "Alcohol, Fragrance", "short_description": ""})

    service = IngredientLookupService(json_path=str(tmp_path / "missing.json"), csv_path=str(csv_path))
    with make_client(service) as test_client:
        yield test_client


@pytest.fixture
def empty_client(tmp_path):
    service = IngredientLookupService(
        json_path=str(tmp_path / "missing.json"),
        csv_path=str(tmp_path / "missing.csv"),
    )
    with make_client(service) as test_client:
        yield test_client


def test_lookup_found(client):
    response = client.get("/api/ingredients/lookup", params={"name": "Niacinamide 10%"})

    assert response.status_code == 200
    data = response.json()
    assert data["found"] is True
    assert data["display_name"] == "Niacinamide"
    assert data["short_description"] == "Brightening agent"
    assert data["ingredient"]["what_does_it_do"] == "Reduces inflammation"
    assert data["ingredient"]["reference_url"] == "https://example.com/niacinamide"


def test_lookup_found_without_description_uses_placeholder(client):
    data = client.get("/api/ingredients/lookup", params={"name": "Fragrance"}).json()

    assert data["found"] is True
    assert data["display_name"] == "Alcohol, Fragrance"
    assert data["short_description"] == NOT_AVAILABLE_DESCRIPTION


def test_lookup_not_found(client):
    response = client.get("/api/ingredients/lookup", params={"name": "Unobtainium-9000"})

    assert response.status_code == 200
    data = response.json()
    assert data["found"] is False
    assert data["ingredient"] is None
    assert data["display_name"] == "Unobtainium-9000"
    assert data["short_description"] == NOT_AVAILABLE_DESCRIPTION


def test_lookup_blank_name_uses_unknown_label(client):
    data = client.get("/api/ingredients/lookup", params={"name": "  "}).json()

    assert data["found"] is False
    assert data["display_name"] == UNKNOWN_INGREDIENT_NAME


def test_lookup_requires_name(client):
    assert client.get("/api/ingredients/lookup").status_code == 422


def test_lookup_missing_dataset_degrades(empty_client):
    response = empty_client.get("/api/ingredients/lookup", params={"name": "Niacinamide"})

    assert response.status_code == 200
    assert response.json()["found"] is False


def test_batch_lookup(client):
    response = client.post(
        "/api/ingredients/lookup",
        json={"names": ["Water", "Niacinamide 10%", "Alcohol"]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 3
    assert data["found"] == 2
    assert [r["query"] for r in data["results"]] == ["Water", "Niacinamide 10%", "Alcohol"]
    assert [r["found"] for r in data["results"]] == [False, True, True]


def test_batch_lookup_rejects_empty_list(client):
    assert client.post("/api/ingredients/lookup", json={"names": []}).status_code == 422


def test_health_loaded(client):
    data = client.get("/api/ingredients/health").json()

    assert data["status"] == "healthy"
    assert data["loaded"] is True
    assert data["source"] == "csv"
    assert data["records"] == 2
    # niacinamide, alcohol fragrance, alcohol, fragrance
    assert data["entries"] == 4


def test_health_missing_dataset(empty_client):
    data = empty_client.get("/api/ingredients/health").json()

    assert data["status"] == "unhealthy"
    assert data["loaded"] is False
    assert "unavailable" in data["error"]
