# tests/test_api.py
"""HTTP surface over an in-memory store."""
import uuid

import pytest
from fastapi.testclient import TestClient

from school_records.main import create_app
from school_records.store.memory import InMemoryRecordStore


@pytest.fixture
def client():
    with TestClient(create_app(store=InMemoryRecordStore())) as test_client:
        yield test_client


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "active"
    assert client.get("/health/").json()["status"] == "healthy"
    assert client.get("/health/store").json()["status"] == "healthy"


def test_student_duplicate_is_409(client):
    payload = {"name": "Rahim", "roll": "12", "class_name": "9"}
    created = client.post("/api/v1/students/", json=payload)
    assert created.status_code == 201

    duplicate = client.post("/api/v1/students/", json=payload)
    assert duplicate.status_code == 409
    body = duplicate.json()
    assert body["error"] == "duplicate"
    assert body["details"]["key"] == {"roll": "12", "class_name": "9"}

    other_class = client.post("/api/v1/students/", json={**payload, "class_name": "10"})
    assert other_class.status_code == 201


def test_student_listing_with_filters_and_pages(client):
    for roll in range(1, 13):
        client.post("/api/v1/students/", json={
            "name": f"Student {roll}", "roll": roll, "class_name": "9",
            "gender": "Female" if roll % 2 else "Male",
        })

    response = client.get("/api/v1/students/", params={"gender": "Female", "limit": "4", "page": "2"})
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 6
    assert body["pages"] == 2
    assert len(body["items"]) == 2

    searched = client.get("/api/v1/students/", params={"search": "student 1"})
    assert searched.json()["total"] == 4  # 1, 10, 11, 12


@pytest.mark.parametrize("params", [{"page": "0"}, {"limit": "-1"}, {"limit": "ten"}])
def test_bad_paging_is_400(client, params):
    response = client.get("/api/v1/students/", params=params)
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


def test_unknown_and_malformed_ids(client):
    assert client.get(f"/api/v1/students/{uuid.uuid4()}").status_code == 404
    assert client.get("/api/v1/students/12").status_code == 400


def test_update_conflict_leaves_record_unchanged(client):
    first = client.post("/api/v1/students/", json={"name": "A", "roll": "12", "class_name": "9"}).json()
    client.post("/api/v1/students/", json={"name": "B", "roll": "13", "class_name": "9"})

    response = client.put(f"/api/v1/students/{first['id']}", json={"roll": "13"})
    assert response.status_code == 409
    assert client.get(f"/api/v1/students/{first['id']}").json()["roll"] == "12"


def test_migrate_endpoint(client):
    ids = [
        client.post("/api/v1/students/", json={"name": n, "roll": n, "class_name": "9"}).json()["id"]
        for n in ("1", "2")
    ]
    missing = str(uuid.uuid4())

    response = client.post("/api/v1/students/migrate", json={
        "ids": ids + [missing], "class_name": "10", "academic_year": "2027",
    })
    assert response.status_code == 404
    assert response.json()["details"]["missing_ids"] == [missing]

    no_year = client.post("/api/v1/students/migrate", json={"ids": ids, "class_name": "10"})
    assert no_year.status_code == 400

    done = client.post("/api/v1/students/migrate", json={
        "ids": ids, "class_name": "10", "academic_year": "2027",
    })
    assert done.status_code == 200
    assert done.json()["modified"] == 2


def test_staff_and_reports(client):
    for index, subject in enumerate(["Math", "Math", "Math", "N/A", "N/A"]):
        response = client.post("/api/v1/staff/", json={
            "name": f"P{index}", "index_number": f"I-{index}", "subject": subject,
        })
        assert response.status_code == 201

    teachers = client.get("/api/v1/staff/teachers").json()
    assert teachers["total"] == 3
    assert client.get("/api/v1/staff/", params={"role": "support_staff"}).json()["total"] == 2
    assert client.get("/api/v1/staff/", params={"role": "cook"}).status_code == 400

    subjects = client.get("/api/v1/reports/teacher-subjects").json()
    assert {g["subject"]: g["count"] for g in subjects["groups"]} == {"Math": 3}

    overview = client.get("/api/v1/reports/overview").json()
    assert overview["support_staff"]["total"] == 2
    assert client.get("/api/v1/reports/unknown").status_code == 400


def test_admission_status_patch(client):
    created = client.post("/api/v1/admissions/", json={"name": "Nila", "status": "pending"}).json()

    patched = client.patch(f"/api/v1/admissions/{created['id']}/status", json={"status": "approved"})
    assert patched.json()["status"] == "approved"

    missing_status = client.patch(f"/api/v1/admissions/{created['id']}/status", json={})
    assert missing_status.status_code == 400

    assert client.delete(f"/api/v1/admissions/{created['id']}").status_code == 200
    assert client.delete(f"/api/v1/admissions/{created['id']}").status_code == 404


def test_migrate_accepts_numeric_class_and_year(client):
    student = client.post("/api/v1/students/", json={"name": "A", "roll": 1, "class_name": "9"}).json()

    response = client.post("/api/v1/students/migrate", json={
        "ids": [student["id"]], "class_name": 10, "academic_year": 2027,
    })
    assert response.status_code == 200
    assert response.json()["academic_year"] == "2027"

    moved = client.get(f"/api/v1/students/{student['id']}").json()
    assert (moved["class_name"], moved["academic_year"]) == ("10", "2027")


@pytest.mark.parametrize("method,path", [
    ("post", "/api/v1/students/"),
    ("post", "/api/v1/admissions/"),
    ("put", "/api/v1/students/{id}"),
])
def test_non_object_body_is_invalid_input(client, method, path):
    student = client.post("/api/v1/students/", json={"name": "A", "roll": "1", "class_name": "9"}).json()

    response = getattr(client, method)(path.format(id=student["id"]), json=[1, 2])

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_input"
    assert body["type"] == "InvalidInputError"
    assert body["message"]


def test_malformed_migrate_body_is_invalid_input(client):
    response = client.post("/api/v1/students/migrate", json={"ids": "abc", "class_name": "10"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_input"
    assert body["details"]["field"].startswith("ids")
