def add_skill(client, name, proficiency="Intermediate", **fields):
    return client.post("/api/skills", json={"skillName": name, "proficiency": proficiency, **fields})


def test_create_strips_name(auth_client):
    response = add_skill(auth_client, "  Python  ", "Expert", category="Technical")
    assert response.status_code == 201
    skill = response.json()["data"]["skill"]
    assert skill["skillName"] == "Python"
    assert skill["category"] == "Technical"


def test_duplicate_name_is_conflict(auth_client):
    add_skill(auth_client, "Python")
    response = add_skill(auth_client, "python")
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "DUPLICATE_SKILL"


def test_invalid_proficiency_and_category(auth_client):
    assert add_skill(auth_client, "Go", "Guru").status_code == 400
    assert add_skill(auth_client, "Go", category="Hobbies").status_code == 400


def test_filter_and_group_by_category(auth_client):
    add_skill(auth_client, "Python", category="Technical")
    add_skill(auth_client, "SQL", category="Technical")
    add_skill(auth_client, "Public Speaking", category="Soft Skills")
    add_skill(auth_client, "Juggling")

    technical = auth_client.get("/api/skills", params={"category": "Technical"}).json()["data"]["skills"]
    assert [s["skillName"] for s in technical] == ["Python", "SQL"]

    grouped = auth_client.get("/api/skills/categories").json()["data"]
    assert grouped["categoryCounts"] == {"Technical": 2, "Soft Skills": 1, "Uncategorized": 1}
    assert grouped["skillsByCategory"]["Uncategorized"][0]["skillName"] == "Juggling"


def test_update_and_delete(auth_client):
    skill = add_skill(auth_client, "Python").json()["data"]["skill"]
    url = f"/api/skills/{skill['id']}"

    updated = auth_client.put(url, json={"proficiency": "Advanced", "skillBadge": "https://badges.example.com/py"})
    assert updated.status_code == 200
    assert updated.json()["data"]["skill"]["proficiency"] == "Advanced"

    assert auth_client.delete(url).status_code == 200
    assert auth_client.get(url).status_code == 404
