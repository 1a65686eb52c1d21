"""Tests for people, group, relationship-type and relationship endpoints."""


class TestPeople:
    def test_requires_auth(self, client):
        assert client.get("/api/people").status_code == 401

    def test_create_and_list(self, alice_client):
        resp = alice_client.post("/api/people", json={"name": "  Dana ", "surname": "Ruiz"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Dana"
        people = alice_client.get("/api/people").json()
        assert [p["name"] for p in people] == ["Dana"]

    def test_blank_name(self, alice_client):
        resp = alice_client.post("/api/people", json={"name": "   "})
        assert resp.status_code == 422

    def test_unknown_relationship_to_user(self, alice_client):
        resp = alice_client.post("/api/people", json={"name": "Dana",
                                                      "relationship_to_user_id": "nope"})
        assert resp.status_code == 400

    def test_delete(self, alice_client, person_rae):
        assert alice_client.delete(f"/api/people/{person_rae.id}").status_code == 200
        assert alice_client.get("/api/people").json() == []
        assert alice_client.delete(f"/api/people/{person_rae.id}").status_code == 404

    def test_other_user_cannot_see(self, make_authenticated_client, person_rae):
        bob = make_authenticated_client("bob@test.com", "Bob")
        assert bob.get("/api/people").json() == []
        assert bob.delete(f"/api/people/{person_rae.id}").status_code == 404


class TestRelationshipTypes:
    def test_create_with_inverse_label(self, alice_client):
        resp = alice_client.post("/api/relationship-types",
                                 json={"label": "Parent", "inverse_label": "Child"})
        assert resp.status_code == 200
        parent = resp.json()
        types = {t["label"]: t for t in alice_client.get("/api/relationship-types").json()}
        assert set(types) == {"Parent", "Child"}
        assert parent["inverse_id"] == types["Child"]["id"]
        assert types["Child"]["inverse_id"] == parent["id"]

    def test_create_with_existing_inverse(self, alice_client):
        boss = alice_client.post("/api/relationship-types", json={"label": "Boss"}).json()
        resp = alice_client.post("/api/relationship-types",
                                 json={"label": "Report", "inverse_id": boss["id"]})
        assert resp.status_code == 200
        assert resp.json()["inverse_id"] == boss["id"]

    def test_unknown_inverse(self, alice_client):
        resp = alice_client.post("/api/relationship-types",
                                 json={"label": "Report", "inverse_id": "nope"})
        assert resp.status_code == 400

    def test_delete(self, alice_client):
        t = alice_client.post("/api/relationship-types", json={"label": "Boss"}).json()
        assert alice_client.delete(f"/api/relationship-types/{t['id']}").status_code == 200
        assert alice_client.get("/api/relationship-types").json() == []


class TestRelationships:
    def test_create(self, alice_client, person_quinn, person_rae, type_colleague):
        resp = alice_client.post("/api/relationships", json={
            "person_id": person_quinn.id, "related_person_id": person_rae.id,
            "relationship_type_id": type_colleague.id,
        })
        assert resp.status_code == 200
        rel_id = resp.json()["id"]
        assert alice_client.delete(f"/api/relationships/{rel_id}").status_code == 200

    def test_invalid(self, alice_client, person_rae, type_colleague):
        resp = alice_client.post("/api/relationships", json={
            "person_id": person_rae.id, "related_person_id": person_rae.id,
            "relationship_type_id": type_colleague.id,
        })
        assert resp.status_code == 400


class TestGroups:
    def test_create_and_members(self, alice_client, person_rae):
        g = alice_client.post("/api/groups", json={"name": "Work", "color": "#000000"}).json()
        resp = alice_client.post(f"/api/groups/{g['id']}/members", json={"person_id": person_rae.id})
        assert resp.status_code == 200
        members = alice_client.get(f"/api/groups/{g['id']}/members").json()
        assert [m["id"] for m in members] == [person_rae.id]
        resp = alice_client.delete(f"/api/groups/{g['id']}/members/{person_rae.id}")
        assert resp.status_code == 200

    def test_unknown_group(self, alice_client, person_rae):
        resp = alice_client.post("/api/groups/nope/members", json={"person_id": person_rae.id})
        assert resp.status_code == 404
        assert alice_client.get("/api/groups/nope/members").status_code == 404

    def test_delete(self, alice_client):
        g = alice_client.post("/api/groups", json={"name": "Work"}).json()
        assert alice_client.delete(f"/api/groups/{g['id']}").status_code == 200
        assert alice_client.get("/api/groups").json() == []


class TestImportantDates:
    def test_create(self, alice_client, person_rae):
        resp = alice_client.post("/api/important-dates", json={
            "person_id": person_rae.id, "title": "Birthday", "date": "1991-02-03",
            "reminder_enabled": True,
        })
        assert resp.status_code == 200
        assert resp.json()["date"] == "1991-02-03"

    def test_unknown_person(self, alice_client):
        resp = alice_client.post("/api/important-dates", json={
            "person_id": "nope", "title": "Birthday", "date": "1991-02-03",
        })
        assert resp.status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
