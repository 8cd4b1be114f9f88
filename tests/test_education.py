def add_education(client, **fields):
    payload = {"school": "State University", "degreeType": "BS", **fields}
    response = client.post("/api/education", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]["education"]


def test_create_maps_date_columns(auth_client):
    education = add_education(auth_client, field="Computer Science", gpa=3.75,
                              startDate="2014-09-01", endDate="2018-05-15")
    assert education["startDate"] == "2014-09-01"
    assert education["endDate"] == "2018-05-15"
    assert education["gpa"] == 3.75
    assert education["isEnrolled"] is False


def test_enrolled_first_then_latest_graduation(auth_client):
    add_education(auth_client, school="Old College", endDate="2012-05-01")
    add_education(auth_client, school="Grad School", endDate="2016-05-01")
    add_education(auth_client, school="Night School", isEnrolled=True, startDate="2023-01-01")

    schools = [e["school"] for e in auth_client.get("/api/education").json()["data"]["educations"]]
    assert schools == ["Night School", "Grad School", "Old College"]


def test_gpa_bounds_and_dates(auth_client):
    assert auth_client.post("/api/education", json={"school": "X", "degreeType": "BS", "gpa": 4.5}).status_code == 400

    response = auth_client.post("/api/education", json={
        "school": "X", "degreeType": "BS", "startDate": "2020-01-01", "endDate": "2019-01-01",
    })
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "End date cannot be before start date"


def test_update_and_delete(auth_client):
    education = add_education(auth_client, startDate="2014-09-01")
    url = f"/api/education/{education['id']}"

    updated = auth_client.put(url, json={"honors": "Cum Laude", "isEnrolled": True}).json()["data"]["education"]
    assert updated["honors"] == "Cum Laude"
    assert updated["isEnrolled"] is True
    assert updated["school"] == "State University"

    bad = auth_client.put(url, json={"endDate": "2010-01-01"})
    assert bad.status_code == 400

    assert auth_client.delete(url).status_code == 200
    missing = auth_client.get(url)
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Education not found"
