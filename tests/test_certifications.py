from datetime import date, timedelta

import pytest

from app.services.certification_service import certification_status


def days(n):
    return (date.today() + timedelta(days=n)).isoformat()


def add_cert(client, name="AWS SAA", org="Amazon", earned=None, **fields):
    payload = {"name": name, "orgName": org, "dateEarned": earned or days(-365), **fields}
    response = client.post("/api/certifications", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]["certification"]


@pytest.mark.parametrize("expiration,never_expires,expected", [
    (None, True, "permanent"),
    (None, False, "no_expiration"),
    (-1, False, "expired"),
    (10, False, "expiring_soon"),
    (30, False, "expiring_soon"),
    (31, False, "active"),
])
def test_status(expiration, never_expires, expected):
    expiration_date = date.today() + timedelta(days=expiration) if expiration is not None else None
    assert certification_status(expiration_date, never_expires) == expected


def test_date_rules(auth_client):
    future = auth_client.post("/api/certifications", json={
        "name": "X", "orgName": "Y", "dateEarned": days(5),
    })
    assert future.status_code == 400
    assert future.json()["error"]["message"] == "Date earned cannot be in the future"

    before = auth_client.post("/api/certifications", json={
        "name": "X", "orgName": "Y", "dateEarned": days(-10), "expirationDate": days(-10),
    })
    assert before.status_code == 400
    assert before.json()["error"]["message"] == "Expiration date must be after date earned"


def test_never_expires_drops_expiration(auth_client):
    cert = add_cert(auth_client, neverExpires=True, expirationDate=days(100))
    assert cert["expirationDate"] is None
    assert cert["status"] == "permanent"
    assert cert["daysUntilExpiration"] is None


def test_current_history_and_expiring(auth_client):
    expired = add_cert(auth_client, name="Old", earned=days(-800), expirationDate=days(-5))
    soon = add_cert(auth_client, name="Soon", expirationDate=days(10))
    later = add_cert(auth_client, name="Later", expirationDate=days(200))
    add_cert(auth_client, name="Forever", neverExpires=True)

    current = {c["name"] for c in auth_client.get("/api/certifications/current").json()["data"]["certifications"]}
    assert current == {"Soon", "Later", "Forever"}

    history = auth_client.get("/api/certifications/history").json()["data"]["certifications"]
    assert [c["id"] for c in history] == [expired["id"]]

    expiring = auth_client.get("/api/certifications/expiring").json()["data"]["certifications"]
    assert [c["id"] for c in expiring] == [expired["id"], soon["id"]]

    wide = auth_client.get("/api/certifications/expiring", params={"days": 365}).json()["data"]["certifications"]
    assert later["id"] in [c["id"] for c in wide]

    stats = auth_client.get("/api/certifications/statistics").json()["data"]
    assert stats == {
        "totalCertifications": 4,
        "permanentCertifications": 1,
        "expiringCertifications": 3,
        "expiredCertifications": 1,
        "expiringSoon": 1,
        "active": 1,
    }


def test_search_and_organization(auth_client):
    add_cert(auth_client, name="AWS Solutions Architect", org="Amazon Web Services")
    add_cert(auth_client, name="CKA", org="Linux Foundation")

    found = auth_client.get("/api/certifications/search", params={"q": "aws"}).json()["data"]["certifications"]
    assert [c["name"] for c in found] == ["AWS Solutions Architect"]

    by_org = auth_client.get("/api/certifications/organization",
                             params={"name": "linux"}).json()["data"]["certifications"]
    assert [c["name"] for c in by_org] == ["CKA"]


def test_update_to_never_expires(auth_client):
    cert = add_cert(auth_client, expirationDate=days(20))
    url = f"/api/certifications/{cert['id']}"

    updated = auth_client.put(url, json={"neverExpires": True}).json()["data"]["certification"]
    assert updated["neverExpires"] is True
    assert updated["expirationDate"] is None

    bad = auth_client.put(url, json={"neverExpires": False, "expirationDate": days(-400)})
    assert bad.status_code == 400

    assert auth_client.delete(url).status_code == 200
    assert auth_client.get(url).status_code == 404
