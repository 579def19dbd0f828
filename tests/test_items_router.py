"""Tests for conductor/api/routers/items.py -- directory notifications."""

from tests.conftest import auth_header


def _setup_masters(client):
    for name, selected in (("m1", ["jobA", "jobB"]), ("m2", ["jobB"]), ("m3", ["jobC"])):
        client.post("/masters", json={"name": name}, headers=auth_header())
        client.post(
            f"/masters/{name}/configure",
            json={"selected_names": selected},
            headers=auth_header(),
        )


def test_list_items(client):
    assert client.get("/items").json() == {"items": ["jobA", "jobB", "jobC"]}


def test_register_item(client):
    resp = client.post("/items", json={"name": "jobD"}, headers=auth_header())
    assert resp.status_code == 201
    assert "jobD" in client.get("/items").json()["items"]


def test_register_duplicate_conflicts(client):
    resp = client.post("/items", json={"name": "jobA"}, headers=auth_header())
    assert resp.status_code == 409


def test_delete_fans_out_to_members_only(client):
    _setup_masters(client)
    resp = client.delete("/items/jobB", headers=auth_header())
    assert resp.status_code == 200
    assert sorted(resp.json()["masters_updated"]) == ["m1", "m2"]
    assert client.get("/masters/m1").json()["job_names"] == ["jobA"]
    assert client.get("/masters/m2").json()["job_names"] == []
    assert client.get("/masters/m3").json()["job_names"] == ["jobC"]


def test_rename_fans_out(client):
    _setup_masters(client)
    resp = client.post("/items/jobA/rename", json={"new_name": "jobA-next"}, headers=auth_header())
    assert resp.status_code == 200
    assert resp.json() == {"name": "jobA-next", "masters_updated": ["m1"]}
    assert client.get("/masters/m1").json()["job_names"] == ["jobB", "jobA-next"]


def test_delete_unknown_item(client):
    resp = client.delete("/items/ghost", headers=auth_header())
    assert resp.status_code == 404


def test_rename_requires_token(client):
    resp = client.post("/items/jobA/rename", json={"new_name": "x"})
    assert resp.status_code == 401
