from sqlmodel import select

from models.facility import FacilityConfiguration

CLINIC = {
    "name": "St. Mary's Clinic",
    "address": "200 Harbor Rd, Boston, MA",
    "center_latitude": 42.3601,
    "center_longitude": -71.0589,
    "perimeter_radius_km": 0.75,
}


def test_validate_location_inside(login, worker, facility):
    response = login(worker).post(
        "/location/validate", json={"latitude": 40.7300, "longitude": -74.0060}
    )

    assert response.status_code == 200
    assert response.json() == {
        "within_perimeter": True,
        "distance_km": 1.9,
        "perimeter_radius_km": 2.0,
    }


def test_validate_location_outside(login, worker, facility):
    response = login(worker).post(
        "/location/validate", json={"latitude": 40.8000, "longitude": -74.0060}
    )

    assert response.json()["within_perimeter"] is False
    assert response.json()["distance_km"] == 9.7


def test_validate_location_errors(login, worker):
    client = login(worker)

    missing = client.post("/location/validate", json={"latitude": 40.7})
    unconfigured = client.post("/location/validate", json={"latitude": 40.7, "longitude": -74.0})

    assert missing.status_code == 400
    assert unconfigured.status_code == 409


def test_validate_location_requires_session(client, facility):
    response = client.post("/location/validate", json={"latitude": 40.7, "longitude": -74.0})
    assert response.status_code == 401


def test_settings_are_public(client, facility):
    response = client.get("/location/settings")

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Mercy General"
    assert body["perimeter_radius_km"] == 2.0
    assert body["version"] == 1


def test_settings_empty_when_unconfigured(client):
    response = client.get("/location/settings")

    assert response.status_code == 200
    assert response.json() is None


def test_manager_replaces_settings(login, session, manager, facility):
    client = login(manager)

    response = client.put("/location/settings", json=CLINIC)

    assert response.status_code == 200
    body = response.json()
    assert {k: body[k] for k in CLINIC} == CLINIC
    assert body["version"] == 2
    assert client.get("/location/settings").json()["name"] == "St. Mary's Clinic"
    assert len(session.exec(select(FacilityConfiguration)).all()) == 1


def test_manager_creates_first_settings(login, manager):
    response = login(manager).put("/location/settings", json=CLINIC)

    assert response.status_code == 200
    assert response.json()["version"] == 1


def test_invalid_settings_rejected(login, manager, facility):
    response = login(manager).put(
        "/location/settings", json={**CLINIC, "perimeter_radius_km": -2}
    )

    assert response.status_code == 400


def test_malformed_settings_body_is_unprocessable(login, manager, facility):
    client = login(manager)
    missing_center = {k: v for k, v in CLINIC.items() if k != "center_latitude"}

    missing = client.put("/location/settings", json=missing_center)
    wrong_type = client.put("/location/settings", json={**CLINIC, "perimeter_radius_km": "wide"})

    assert missing.status_code == 422
    assert wrong_type.status_code == 422
    assert client.get("/location/settings").json()["name"] == "Mercy General"


def test_worker_cannot_replace_settings(login, worker, facility):
    client = login(worker)

    valid = client.put("/location/settings", json=CLINIC)
    invalid = client.put(
        "/location/settings", json={**CLINIC, "center_latitude": 200, "perimeter_radius_km": -1}
    )

    assert valid.status_code == 403
    assert invalid.status_code == 403
    assert client.get("/location/settings").json()["name"] == "Mercy General"
