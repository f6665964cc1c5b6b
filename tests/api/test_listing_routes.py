"""HTTP tests for /api/listings and /api/my-listings."""

import pytest


def _body(**overrides) -> dict:
    body = {
        "title": "Modern Studio Apartment - Downtown",
        "description": "Recently renovated studio.",
        "price": "950",
        "bedrooms": 1,
        "bathrooms": 1,
        "address": "456 Main Street, South Bend, IN 46601",
        "latitude": 41.6764,
        "longitude": -86.2520,
        "furnished": False,
        "availableFrom": "2025-02-01",
        "availableTo": "2025-08-31",
        "amenities": ["WiFi", "AC"],
        "images": ["https://example.com/studio.jpg"],
        "contactEmail": "grad@nd.edu",
    }
    body.update(overrides)
    return body


class TestSearch:

    async def test_filters_and_camel_case(self, client, make_listing):
        cheap = await make_listing(price="950", amenities=["WiFi", "AC"])
        await make_listing(price="1200", amenities=["WiFi"])
        await make_listing(price="9999", amenities=["WiFi", "AC"])

        resp = await client.get(
            "/api/listings",
            params={"priceMin": "900", "priceMax": "1300", "amenities": "WiFi,AC"},
        )

        assert resp.status_code == 200
        [item] = resp.json()
        assert item["id"] == cheap.id
        assert item["isAvailable"] is True
        assert "distanceToCampus" in item

    @pytest.mark.parametrize("params", [
        {"priceMin": "cheap"},
        {"priceMin": "2000", "priceMax": "100"},
        {"bedrooms": "-1"},
        {"furnished": "sometimes"},
        {"sort": "random"},
    ])
    async def test_malformed_filter_is_400(self, client, params):
        resp = await client.get("/api/listings", params=params)

        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_filter"

    async def test_pins(self, client, make_listing):
        listing = await make_listing(title="On the map")

        resp = await client.get("/api/listings/pins", params={"sort": "distance"})

        assert resp.status_code == 200
        [pin] = resp.json()
        assert pin["id"] == listing.id
        assert set(pin) == {"id", "title", "latitude", "longitude", "price"}

    async def test_get_by_id(self, client, make_listing):
        listing = await make_listing()

        found = await client.get(f"/api/listings/{listing.id}")
        missing = await client.get("/api/listings/999")

        assert found.status_code == 200
        assert found.json()["title"] == listing.title
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"


class TestOwnerRoutes:

    async def test_create_requires_auth(self, client):
        resp = await client.post("/api/listings", json=_body())

        assert resp.status_code == 401

    async def test_create_and_list_mine(self, client, make_user, auth_headers):
        owner = await make_user("grad@nd.edu")
        headers = auth_headers(owner)

        created = await client.post("/api/listings", json=_body(), headers=headers)
        mine = await client.get("/api/my-listings", headers=headers)

        assert created.status_code == 201
        assert created.json()["userId"] == owner.id
        assert [l["id"] for l in mine.json()] == [created.json()["id"]]

    async def test_create_validation_is_422(self, client, make_user, auth_headers):
        owner = await make_user()

        resp = await client.post(
            "/api/listings", json=_body(price="12.345", images=[]), headers=auth_headers(owner),
        )

        assert resp.status_code == 422

    async def test_update_by_owner(self, client, make_listing, auth_headers):
        listing = await make_listing(price="1000")

        resp = await client.put(
            f"/api/listings/{listing.id}",
            json={"price": "1100", "furnished": True},
            headers=auth_headers(listing.owner),
        )

        assert resp.status_code == 200
        assert resp.json()["price"] == "1100"
        assert resp.json()["furnished"] is True

    async def test_non_owner_gets_403(self, client, make_user, make_listing, auth_headers):
        listing = await make_listing()
        headers = auth_headers(await make_user())

        put = await client.put(f"/api/listings/{listing.id}", json={"price": "1"}, headers=headers)
        patch = await client.patch(
            f"/api/listings/{listing.id}/availability", json={"isAvailable": False}, headers=headers,
        )
        delete = await client.delete(f"/api/listings/{listing.id}", headers=headers)

        for resp in (put, patch, delete):
            assert resp.status_code == 403
            assert resp.json()["error"] == "not_owner"

    async def test_availability_toggle_hides_from_search(self, client, make_listing, auth_headers):
        listing = await make_listing()

        resp = await client.patch(
            f"/api/listings/{listing.id}/availability",
            json={"isAvailable": False},
            headers=auth_headers(listing.owner),
        )
        search = await client.get("/api/listings")

        assert resp.status_code == 200
        assert resp.json()["isAvailable"] is False
        assert search.json() == []

    async def test_delete(self, client, make_listing, auth_headers):
        listing = await make_listing()

        resp = await client.delete(f"/api/listings/{listing.id}", headers=auth_headers(listing.owner))

        assert resp.status_code == 204
        assert (await client.get(f"/api/listings/{listing.id}")).status_code == 404
