import pytest


@pytest.fixture(params=["memory", "sql"])
def api(request, make_client):
    return make_client(auth_enabled=False, storage_backend=request.param)


def _add_abc(api, abc_records, partition="default"):
    for record in abc_records:
        r = api.post(f"/api/add-entity?repo_name={partition}", json=record)
        assert r.status_code == 200, r.text
        assert r.json() == {"status": "success"}


def _names(body):
    return [item["repo_name"] for item in body["data"]]


def test_health(api):
    r = api.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "success"}


def test_missing_partition(api):
    r = api.get("/api/entities")
    assert r.status_code == 400
    assert r.json() == {"status": "failure", "data": "repo undefined"}


def test_unknown_partition(api):
    r = api.get("/api/entities?repo_name=nope")
    assert r.status_code == 404
    assert r.json() == {"status": "failure", "data": "repo not found"}


def test_add_stores_body_unchanged(api, record_factory):
    record = record_factory("A", 70, created="2024-01-01T00:00:00Z")
    api.post("/api/add-entity?repo_name=default", json=record)
    body = api.get("/api/entities?repo_name=default").json()
    assert body["status"] == "success"
    item = body["data"][0]
    assert item["created"] == "2024-01-01T00:00:00Z"
    assert item["updated"] is None
    assert item["found"] is None
    assert item["scan"]["keys_found"] == ["A_KEY|src/config.py"]


def test_add_then_delete_with_identical_body(api, record_factory):
    record = record_factory("A", 70)
    assert api.post("/api/add-entity?repo_name=default", json=record).status_code == 200
    r = api.request("DELETE", "/api/delete?repo_name=default", json=record)
    assert r.status_code == 200, r.text
    assert api.get("/api/entities?repo_name=default").json()["data"] == []


def test_added_body_addresses_the_stored_record(api, record_factory):
    record = record_factory("A", 70)
    assert api.post("/api/add-entity?repo_name=default", json=record).status_code == 200
    edited = record_factory("A", 75)
    r = api.patch("/api/modify-entity?repo_name=default", json=[record, edited])
    assert r.status_code == 200, r.text
    r = api.request("DELETE", "/api/delete?repo_name=default", json=edited)
    assert r.status_code == 200, r.text
    assert r.json() == {"status": "success"}
    assert api.get("/api/entities?repo_name=default").json()["data"] == []


def test_add_rejects_invalid_percent(api, record_factory):
    r = api.post("/api/add-entity?repo_name=default", json=record_factory("A", "70"))
    assert r.status_code == 400
    assert r.json() == {"status": "failure", "data": "invalid entity, percent is not number"}
    assert api.get("/api/entities?repo_name=default").json()["data"] == []


def test_modify_entity(api, record_factory):
    api.post("/api/add-entity?repo_name=default", json=record_factory("A", 70))
    stored = api.get("/api/entities?repo_name=default").json()["data"][0]
    edited = {**stored, "scan": {**stored["scan"], "percent": 80}}
    r = api.patch("/api/modify-entity?repo_name=default", json=[stored, edited])
    assert r.status_code == 200, r.text
    item = api.get("/api/entities?repo_name=default").json()["data"][0]
    assert item["scan"]["percent"] == 80
    assert item["created"] == stored["created"]


def test_modify_unknown_entity(api, record_factory):
    r = api.patch(
        "/api/modify-entity?repo_name=default",
        json=[record_factory("A", 1), record_factory("A", 2)],
    )
    assert r.status_code == 400
    assert r.json()["data"] == "entity not found"


def test_modify_requires_pair(api, record_factory):
    r = api.patch("/api/modify-entity?repo_name=default", json=record_factory("A", 1))
    assert r.status_code == 400
    assert r.json() == {"status": "failure", "data": "invalid body, expected [old, new]"}


def test_delete_entity(api, abc_records):
    _add_abc(api, abc_records)
    stored = api.get("/api/entities?repo_name=default").json()["data"]
    r = api.request("DELETE", "/api/delete?repo_name=default", json=stored[0])
    assert r.status_code == 200
    assert _names(api.get("/api/entities?repo_name=default").json()) == ["B", "C"]
    again = api.request("DELETE", "/api/delete?repo_name=default", json=stored[0])
    assert again.status_code == 400
    assert again.json() == {"status": "failure", "data": "entity not found"}


def test_filter_entities(api, abc_records):
    _add_abc(api, abc_records)
    assert _names(api.get("/api/filter-entities?repo_name=default&percent=75").json()) == ["B"]
    assert _names(api.get("/api/filter-entities?repo_name=default&percent=0").json()) == ["A", "B", "C"]
    for bad in ("abc", "nan", ""):
        r = api.get(f"/api/filter-entities?repo_name=default&percent={bad}")
        assert r.status_code == 400
        assert r.json() == {"status": "failure", "data": "invalid percent"}
    assert api.get("/api/filter-entities?repo_name=default").json()["data"] == "invalid percent"


def test_sort_entities(api, abc_records):
    _add_abc(api, abc_records)
    assert _names(api.get("/api/sort-entities?repo_name=default").json()) == ["B", "A", "C"]
    assert _names(api.get("/api/sort-entities?repo_name=default&order=asc").json()) == ["A", "C", "B"]
    r = api.get("/api/sort-entities?repo_name=default&order=sideways")
    assert r.status_code == 400
    assert r.json() == {"status": "failure", "data": "unknown sort method"}
    r = api.get("/api/sort-entities?repo_name=default&by=stars")
    assert r.json() == {"status": "failure", "data": "unknown sort field"}


def test_pagination(api, abc_records):
    _add_abc(api, abc_records)
    body = api.get("/api/entities?repo_name=default&page=2&limit=2").json()
    assert body["status"] == "success"
    assert [item["repo_name"] for item in body["data"]["items"]] == ["C"]
    assert body["data"]["total_items"] == 3
    assert body["data"]["total_pages"] == 2
    r = api.get("/api/entities?repo_name=default&page=0")
    assert r.status_code == 400
    assert r.json()["data"] == "invalid page"


def test_stats(api, abc_records):
    _add_abc(api, abc_records)
    stats = api.get("/api/stats?repo_name=default").json()["data"]
    assert stats["total"] == 3
    assert stats["analyzed"] == 0
    assert stats["not_analyzed"] == 3
    assert stats["highest"] == 90
    assert stats["lowest"] == 70


def test_partitions_are_independent(api, abc_records):
    _add_abc(api, abc_records, partition="ai")
    assert api.get("/api/entities?repo_name=default").json()["data"] == []
    assert _names(api.get("/api/entities?repo_name=ai").json()) == ["A", "B", "C"]


def test_sort_by_found_date(api, record_factory):
    api.post("/api/add-entity?repo_name=default", json=record_factory("late", 10, found="2024-03-01T00:00:00Z"))
    api.post("/api/add-entity?repo_name=default", json=record_factory("never", 20))
    api.post("/api/add-entity?repo_name=default", json=record_factory("early", 30, found="2024-01-01T00:00:00Z"))
    body = api.get("/api/sort-entities?repo_name=default&order=asc&by=found").json()
    assert _names(body) == ["never", "early", "late"]


@pytest.mark.parametrize("query", ["page=abc", "page=1&limit=ten", "page=1.5", "page=1&limit="])
def test_non_integer_page_arguments(api, abc_records, query):
    _add_abc(api, abc_records)
    r = api.get(f"/api/entities?repo_name=default&{query}")
    assert r.status_code == 400
    assert r.json() == {"status": "failure", "data": "invalid page"}
