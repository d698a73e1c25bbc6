from conftest import sign_in


def test_add_list_and_remove_favorites(client, outbox, catalog):
    user_id, headers = sign_in(client, outbox)
    vehicle_id = catalog["corolla_2024"]

    added = client.post(f"/api/users/{user_id}/favorites", json={"vehicleId": vehicle_id}, headers=headers)
    assert added.status_code == 201
    assert added.json()["message"] == "Vehicle added to favorites"

    listing = client.get(f"/api/users/{user_id}/favorites", headers=headers)
    assert listing.status_code == 200
    assert [item["id"] for item in listing.json()] == [vehicle_id]
    assert listing.json()[0]["brand"]["name"] == "Toyota"

    removed = client.delete(f"/api/users/{user_id}/favorites/{vehicle_id}", headers=headers)
    assert removed.status_code == 200
    assert client.get(f"/api/users/{user_id}/favorites", headers=headers).json() == []


def test_adding_same_favorite_twice_is_idempotent(client, outbox, catalog):
    user_id, headers = sign_in(client, outbox)
    payload = {"vehicleId": catalog["f150_2021"]}

    assert client.post(f"/api/users/{user_id}/favorites", json=payload, headers=headers).status_code == 201
    again = client.post(f"/api/users/{user_id}/favorites", json=payload, headers=headers)
    assert again.status_code == 200
    assert again.json()["message"] == "Vehicle already in favorites"
    assert len(client.get(f"/api/users/{user_id}/favorites", headers=headers).json()) == 1


def test_favorites_require_authentication(client, catalog):
    assert client.get("/api/users/1/favorites").status_code == 401
    assert client.post("/api/users/1/favorites", json={"vehicleId": catalog["f150_2021"]}).status_code == 401


def test_favorites_of_another_user_are_forbidden(client, outbox, catalog):
    owner_id, _ = sign_in(client, outbox, email="owner@example.com")
    _, intruder_headers = sign_in(client, outbox, email="intruder@example.com")

    response = client.get(f"/api/users/{owner_id}/favorites", headers=intruder_headers)
    assert response.status_code == 403
    assert response.json()["code"] == "permission_denied"

    delete = client.delete(f"/api/users/{owner_id}/favorites/{catalog['f150_2021']}", headers=intruder_headers)
    assert delete.status_code == 403


def test_favorite_errors(client, outbox, catalog):
    user_id, headers = sign_in(client, outbox)

    unknown_vehicle = client.post(f"/api/users/{user_id}/favorites", json={"vehicleId": 9999}, headers=headers)
    assert unknown_vehicle.status_code == 404

    not_favorited = client.delete(f"/api/users/{user_id}/favorites/{catalog['f150_2021']}", headers=headers)
    assert not_favorited.status_code == 404

    invalid = client.post(f"/api/users/{user_id}/favorites", json={"vehicleId": 0}, headers=headers)
    assert invalid.status_code == 400
