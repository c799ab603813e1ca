import asyncio
import io

import pytest
from openpyxl import load_workbook
from starlette.websockets import WebSocketDisconnect

REMOTE_PHOTO = "https://res.cloudinary.com/demo/image/upload/v1/trainers/alex.jpg"


def create_faq(client, question="Do you have parking?", answer="Yes, free for members."):
    return client.post("/api/admin/FAQ", json={"question": question, "answer": answer})


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_unknown_collection(client):
    response = client.get("/api/admin/invalid_collection")
    assert response.status_code == 404
    assert response.json()["detail"]["message"] == "Unknown collection: invalid_collection"


def test_create_and_list_faq(client):
    response = create_faq(client)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["notice"] == {"title": "Success", "message": "FAQ added successfully!"}

    listing = client.get("/api/admin/FAQ").json()
    assert listing["count"] == 1
    assert listing["limit"] == 5
    assert listing["records"][0]["id"] == data["id"]
    assert listing["records"][0]["createdAt"]


def test_sixth_faq_is_rejected(client):
    for n in range(5):
        assert create_faq(client, question=f"Question {n}?").status_code == 200

    response = create_faq(client, question="One too many?")
    assert response.status_code == 400
    assert response.json()["detail"]["title"] == "Limit Reached"
    assert client.get("/api/admin/FAQ").json()["count"] == 5


def test_validation_error_detail(client):
    response = client.post("/api/admin/blogs", json={
        "title": "Warm up", "readingTime": "5 min", "category": "strength training",
        "content": "Always warm up.", "imageUrl": REMOTE_PHOTO,
    })
    assert response.status_code == 400
    assert response.json()["detail"] == {"title": "Error", "message": "Category must be a single word"}


def test_blog_with_local_image_is_uploaded(client, uploader):
    response = client.post("/api/admin/blogs", json={
        "title": "Warm up", "readingTime": "5 min", "category": "Wellness",
        "content": "Always warm up.", "imageUrl": "file:///tmp/cover.jpg",
    })
    assert response.status_code == 200
    assert uploader.calls == ["file:///tmp/cover.jpg"]
    blog = client.get("/api/admin/blogs").json()["records"][0]
    assert blog["imageUrl"].startswith("https://res.cloudinary.com/")


def test_upload_failure_is_bad_gateway(client, uploader):
    uploader.fail = True
    response = client.post("/api/admin/trainers", json={
        "name": "Alex", "speciality": "Strength", "imageUrl": "file:///tmp/alex.jpg",
    })
    assert response.status_code == 502
    assert response.json()["detail"]["title"] == "Upload Failed"
    assert client.get("/api/admin/trainers").json()["count"] == 0


def test_edit_trainer_keeps_photo(client, uploader):
    created = client.post("/api/admin/trainers", json={
        "name": "Alex", "speciality": "Strength", "imageUrl": REMOTE_PHOTO,
    }).json()

    response = client.put(f"/api/admin/trainers/{created['id']}", json={"speciality": "Mobility"})
    assert response.status_code == 200
    assert response.json()["notice"]["message"] == "Trainer updated successfully!"
    assert uploader.calls == []

    trainer = client.get("/api/admin/trainers").json()["records"][0]
    assert trainer["speciality"] == "Mobility"
    assert trainer["imageUrl"] == REMOTE_PHOTO
    assert trainer["updatedAt"]


def test_edit_missing_record(client):
    response = client.put("/api/admin/trainers/missing", json={"name": "Alex"})
    assert response.status_code == 404


def test_delete_record(client):
    faq_id = create_faq(client).json()["id"]
    response = client.delete(f"/api/admin/FAQ/{faq_id}")
    assert response.status_code == 200
    assert client.get("/api/admin/FAQ").json()["count"] == 0
    assert client.delete(f"/api/admin/FAQ/{faq_id}").status_code == 404


def test_program_round_trip(client):
    response = client.post("/api/admin/programs", json={
        "programType": "Gym", "planType": "Monthly", "price": "49.99", "duration": "1 month",
        "description": "Full access", "facilities": ["Parking", "Lockers"],
    })
    assert response.status_code == 200
    program = client.get("/api/admin/programs").json()["records"][0]
    assert program["facilities"] == ["Parking", "Lockers"]
    assert program["price"] == 49.99


def test_add_facility(client):
    response = client.post("/api/admin/programs/facilities", json={"facilities": ["Parking"], "value": " Sauna "})
    assert response.json()["facilities"] == ["Parking", "Sauna"]

    full = ["Parking", "Lockers", "Sauna", "Showers"]
    response = client.post("/api/admin/programs/facilities", json={"facilities": full, "value": "Pool"})
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "You can only add up to 4 facilities."


def test_fractional_rating_is_rejected(client):
    for rating in (4.5, True):
        response = client.post("/api/admin/testimonials", json={
            "name": "Ann", "programType": "Gym", "review": "Great", "rating": rating,
        })
        assert response.status_code == 400
        assert response.json()["detail"]["message"] == "Rating must be between 1 and 5"
    assert client.get("/api/admin/testimonials").json()["count"] == 0


def test_facilities_string_is_rejected(client):
    response = client.post("/api/admin/programs", json={
        "programType": "Gym", "planType": "Monthly", "price": "49.99", "duration": "1 month",
        "description": "Full access", "facilities": "Parking",
    })
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Facilities must be a list"


def test_leads_are_not_creatable(client):
    response = client.post("/api/admin/user_data", json={"user_name": "Ann"})
    assert response.status_code == 405


@pytest.fixture
def leads(store):
    async def seed():
        return [
            await store.create("user_data", {"Data_id": "3", "user_name": "Ann", "user_contact": "5551234567",
                                             "created_at": "2024-03-01T10:00:00"}),
            await store.create("user_data", {"Data_id": "9", "user_name": "Ben", "user_contact": "",
                                             "created_at": "2024-02-01T10:00:00"}),
        ]
    return asyncio.run(seed())


def test_leads_cannot_be_edited_or_deleted(client, store, leads):
    response = client.put(f"/api/admin/user_data/{leads[0]}", json={"status": "archived"})
    assert response.status_code == 405
    assert client.delete(f"/api/admin/user_data/{leads[0]}").status_code == 405

    record = asyncio.run(store.get("user_data", leads[0]))
    assert "status" not in record
    assert "updatedAt" not in record


def test_list_leads_sorted(client, leads):
    data = client.get("/api/admin/user_data").json()
    assert [r["user_name"] for r in data["records"]] == ["Ann", "Ben"]
    data = client.get("/api/admin/user_data", params={"sort": "id_desc"}).json()
    assert [r["user_name"] for r in data["records"]] == ["Ben", "Ann"]
    assert client.get("/api/admin/user_data", params={"sort": "name"}).status_code == 400


def test_mark_lead_read(client, leads):
    response = client.post(f"/api/admin/user_data/{leads[0]}/read")
    assert response.status_code == 200
    records = client.get("/api/admin/user_data").json()["records"]
    assert records[0]["status"] == "read"
    assert records[1]["status"] == "unread"
    assert client.get("/api/admin/dashboard").json()["unread_leads"] == 1


def test_call_lead(client, leads):
    assert client.get(f"/api/admin/user_data/{leads[0]}/call").json() == {"url": "tel:5551234567"}
    assert client.get(f"/api/admin/user_data/{leads[1]}/call").status_code == 400
    assert client.get("/api/admin/user_data/missing/call").status_code == 404


def test_export_leads(client, leads):
    response = client.get("/api/admin/user_data/export")
    assert response.status_code == 200
    assert "attachment; filename=\"user_data_" in response.headers["content-disposition"]
    wb = load_workbook(io.BytesIO(response.content))
    assert wb["UserData"].max_row == 3


def test_export_without_leads(client):
    response = client.get("/api/admin/user_data/export")
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "No data to export"


def test_basic_details(client):
    assert client.get("/api/admin/basic-details").json()["phone"] == ""

    bad = client.put("/api/admin/basic-details", json={"phone": "1234567890", "email": "a@b", "address": "Main St"})
    assert bad.status_code == 400

    good = client.put("/api/admin/basic-details", json={"phone": "1234567890", "email": "a@b.com", "address": "Main St"})
    assert good.status_code == 200
    assert client.get("/api/admin/basic-details").json()["email"] == "a@b.com"


def test_dashboard_counts(client):
    create_faq(client)
    data = client.get("/api/admin/dashboard").json()
    assert data["counts"]["FAQ"] == 1
    assert data["counts"]["blogs"] == 0


def test_stage_image(client, tmp_path, monkeypatch):
    from service_modules.staging_service import staging_service
    monkeypatch.setattr(staging_service, "directory", str(tmp_path))

    response = client.post("/api/admin/staging", files={"file": ("cover.jpg", b"\xff\xd8\xff", "image/jpeg")})
    assert response.status_code == 200
    assert response.json()["reference"].startswith("file://")

    response = client.post("/api/admin/staging", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 400


def test_live_socket_snapshots(client):
    from sockets import manager

    with client.websocket_connect("/ws/FAQ") as websocket:
        first = websocket.receive_json()
        assert first == {"type": "snapshot", "collection": "FAQ", "records": []}
        assert manager.count("FAQ") == 1

        create_faq(client)
        second = websocket.receive_json()
        assert second["type"] == "snapshot"
        assert [r["question"] for r in second["records"]] == ["Do you have parking?"]


def test_live_socket_unknown_collection(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws/nope") as websocket:
            websocket.receive_json()
