from conftest import sign_in


def _opinions_url(vehicle_id: int) -> str:
    return f"/api/vehicles/{vehicle_id}/opinions"


def test_posting_twice_updates_the_same_opinion(client, outbox, catalog):
    user_id, headers = sign_in(client, outbox)
    url = _opinions_url(catalog["corolla_2024"])

    created = client.post(url, json={"rate": 5, "comment": "  Great commuter  "}, headers=headers)
    assert created.status_code == 201
    body = created.json()
    assert body["comment"] == "Great commuter"
    assert body["vehicleId"] == catalog["corolla_2024"]
    assert body["user"] == {"userId": user_id, "name": "Test Driver", "photoURL": None}

    updated = client.post(url, json={"rate": 3}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["id"] == body["id"]
    assert updated.json()["rate"] == 3
    assert updated.json()["comment"] is None

    listing = client.get(url)
    assert listing.status_code == 200
    assert [item["id"] for item in listing.json()] == [body["id"]]


def test_opinions_are_listed_newest_first(client, outbox, catalog):
    url = _opinions_url(catalog["f150_2021"])
    _, first = sign_in(client, outbox, email="first@example.com")
    _, second = sign_in(client, outbox, email="second@example.com")

    older = client.post(url, json={"rate": 2}, headers=first).json()
    newer = client.post(url, json={"rate": 4}, headers=second).json()

    assert [item["id"] for item in client.get(url).json()] == [newer["id"], older["id"]]


def test_opinion_validation(client, outbox, catalog):
    _, headers = sign_in(client, outbox)
    url = _opinions_url(catalog["f150_2021"])

    assert client.post(url, json={"rate": 6}, headers=headers).status_code == 400
    assert client.post(url, json={"rate": 0}, headers=headers).status_code == 400
    assert client.post(url, json={"rate": 3, "comment": "x" * 256}, headers=headers).status_code == 400
    assert client.post(url, json={"rate": 3}).status_code == 401
    assert client.post(_opinions_url(9999), json={"rate": 3}, headers=headers).status_code == 404
    assert client.get(_opinions_url(9999)).status_code == 404


def test_edit_and_delete_own_opinion(client, outbox, catalog):
    _, headers = sign_in(client, outbox)
    url = _opinions_url(catalog["f150_2023"])
    opinion = client.post(url, json={"rate": 2, "comment": "Thirsty"}, headers=headers).json()

    patched = client.patch(f"{url}/{opinion['id']}", json={"rate": 4}, headers=headers)
    assert patched.status_code == 200
    assert patched.json()["rate"] == 4
    assert patched.json()["comment"] == "Thirsty"

    cleared = client.patch(f"{url}/{opinion['id']}", json={"comment": None}, headers=headers)
    assert cleared.json()["comment"] is None

    assert client.patch(f"{url}/{opinion['id']}", json={}, headers=headers).status_code == 400

    deleted = client.delete(f"{url}/{opinion['id']}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(url).json() == []


def test_opinion_ownership_and_vehicle_checks(client, outbox, catalog):
    _, author = sign_in(client, outbox, email="author@example.com")
    _, other = sign_in(client, outbox, email="other@example.com")
    url = _opinions_url(catalog["f150_2023"])
    opinion = client.post(url, json={"rate": 5}, headers=author).json()

    forbidden = client.patch(f"{url}/{opinion['id']}", json={"rate": 1}, headers=other)
    assert forbidden.status_code == 403
    assert client.delete(f"{url}/{opinion['id']}", headers=other).status_code == 403

    wrong_vehicle = client.delete(f"{_opinions_url(catalog['f150_2021'])}/{opinion['id']}", headers=author)
    assert wrong_vehicle.status_code == 400

    assert client.delete(f"{url}/9999", headers=author).status_code == 404
