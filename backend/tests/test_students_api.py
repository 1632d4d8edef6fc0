"""HTTP tests for the student routes using FastAPI's TestClient."""


def test_root_is_plain_text(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Server is up :)"
    assert resp.headers["content-type"].startswith("text/plain")


def test_request_id_header(client):
    resp = client.get("/")
    assert resp.headers.get("X-Request-ID")


def test_health_reports_database(client, offline_client):
    assert client.get("/health").json()["database"] == "connected"
    assert offline_client.get("/health").json()["database"] == "unavailable"


def test_list_empty(client):
    resp = client.get("/students")
    assert resp.status_code == 200
    assert resp.json() == {"status": "SUCCESS", "data": []}


def test_create_and_list(client, lakshya):
    resp = client.post("/students", json=lakshya)
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "SUCCESS"
    assert body["message"] == "New student added successfully"
    student_id = body["result"]["_id"]

    data = client.get("/students").json()["data"]
    assert len(data) == 1
    assert data[0]["_id"] == student_id
    assert {k: data[0][k] for k in lakshya} == lakshya


def test_short_first_name_rejected_then_valid_one_listed(client):
    resp = client.post("/students", json={"firstName": "Al", "age": 22, "country": "UK"})
    assert resp.status_code == 500
    body = resp.json()
    assert body["status"] == "FAILED"
    assert body["message"] == "Error creating students"
    assert "First name must be at least 3 characters" in body["error"]
    assert body["errors"][0]["field"] == "firstName"
    assert body["errors"][0]["kind"] == "length"

    resp = client.post("/students", json={"firstName": "Alexander", "age": 22, "country": "UK"})
    assert resp.status_code == 201

    names = [s["firstName"] for s in client.get("/students").json()["data"]]
    assert names == ["Alexander"]


def test_create_reports_every_violation(client):
    resp = client.post("/students", json={"firstName": "Al", "age": 26, "country": "France"})
    kinds = {e["field"]: e["kind"] for e in resp.json()["errors"]}
    assert kinds == {"firstName": "length", "age": "range", "country": "enum"}


def test_create_without_body(client):
    resp = client.post("/students")
    assert resp.status_code == 500
    fields = {e["field"] for e in resp.json()["errors"]}
    assert fields == {"firstName", "age", "country"}


def test_create_with_non_object_body(client):
    resp = client.post("/students", json=["Lakshya", 20])
    assert resp.status_code == 500
    assert resp.json()["status"] == "FAILED"


def test_create_with_malformed_json(client):
    resp = client.post("/students", content=b"{not json",
                       headers={"Content-Type": "application/json"})
    assert resp.status_code == 500
    assert resp.json()["status"] == "FAILED"
    assert resp.json()["message"] == "Invalid request body"


def test_get_one(client, lakshya):
    student_id = client.post("/students", json=lakshya).json()["result"]["_id"]
    resp = client.get(f"/students/{student_id}")
    assert resp.status_code == 200
    assert resp.json()["result"]["firstName"] == "Lakshya"

    assert client.get("/students/missing").json() == {"status": "SUCCESS", "result": None}


def test_patch_returns_prior_document(client, lakshya):
    student_id = client.post("/students", json=lakshya).json()["result"]["_id"]

    resp = client.patch(f"/students/{student_id}",
                        json={"firstName": "Lakshya", "age": 21, "country": "USA"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Student details updated successfully"
    assert body["result"]["age"] == 20
    assert body["result"]["lastName"] == "Kumar"

    current = client.get(f"/students/{student_id}").json()["result"]
    assert current["age"] == 21
    assert current["country"] == "USA"
    assert current["lastName"] == "N/A"


def test_patch_unknown_id_succeeds_with_null(client, lakshya):
    resp = client.patch("/students/missing", json=lakshya)
    assert resp.status_code == 200
    assert resp.json()["result"] is None


def test_patch_invalid(client, lakshya):
    student_id = client.post("/students", json=lakshya).json()["result"]["_id"]
    resp = client.patch(f"/students/{student_id}", json={"firstName": "Lakshya", "age": 17})
    assert resp.status_code == 500
    body = resp.json()
    assert body["message"] == "Error updating student details"
    assert {e["field"] for e in body["errors"]} == {"age", "country"}


def test_delete(client, lakshya):
    student_id = client.post("/students", json=lakshya).json()["result"]["_id"]

    resp = client.delete(f"/students/{student_id}")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Student deleted successfully"
    assert resp.json()["result"]["_id"] == student_id
    assert client.get("/students").json()["data"] == []


def test_delete_missing_twice(client):
    for _ in range(2):
        resp = client.delete("/students/missing")
        assert resp.status_code == 200
        assert resp.json()["result"] is None


def test_routes_fail_without_database(offline_client, lakshya):
    cases = [
        (offline_client.get("/students"), "Error fetching students"),
        (offline_client.post("/students", json=lakshya), "Error creating students"),
        (offline_client.patch("/students/x", json=lakshya), "Error updating student details"),
        (offline_client.delete("/students/x"), "Error deleting student"),
    ]
    for resp, message in cases:
        assert resp.status_code == 500
        body = resp.json()
        assert body["status"] == "FAILED"
        assert body["message"] == message
        assert body["error"] == "Database connection is not established"
        assert "errors" not in body

    # Liveness is unaffected
    assert offline_client.get("/").status_code == 200


def test_create_from_form_body(client):
    resp = client.post("/students", data={"firstName": "Lakshya", "age": "20", "country": "India"})
    assert resp.status_code == 201
    result = resp.json()["result"]
    assert result["firstName"] == "Lakshya"
    assert result["age"] == 20
    assert result["lastName"] == "N/A"

    assert [s["_id"] for s in client.get("/students").json()["data"]] == [result["_id"]]


def test_form_body_repeated_key_becomes_list(client):
    resp = client.post("/students",
                       content=b"firstName=Alexander&age=22&country=UK&hobbies=chess&hobbies=rowing",
                       headers={"Content-Type": "application/x-www-form-urlencoded"})
    assert resp.status_code == 201
    assert resp.json()["result"]["hobbies"] == ["chess", "rowing"]


def test_patch_from_form_body(client, lakshya):
    student_id = client.post("/students", json=lakshya).json()["result"]["_id"]
    resp = client.patch(f"/students/{student_id}",
                        data={"firstName": "Lakshya", "age": "17", "country": "India"})
    assert resp.status_code == 500
    assert [e["kind"] for e in resp.json()["errors"]] == ["range"]


def test_create_response_matches_listing(client, lakshya):
    created = client.post("/students", json=dict(lakshya, address={})).json()["result"]
    assert client.get("/students").json()["data"] == [created]
