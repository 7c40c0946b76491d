"""Customers, doctors and prescriptions over HTTP."""
import pytest

from medbill.core.config import settings

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


# ==============================================================================
# CUSTOMERS
# ==============================================================================

def test_create_and_fetch_customer(admin_client):
    resp = admin_client.post(
        "/api/customers",
        json={"name": "Priya Sharma", "phone": "9876543221", "email": "priya@example.com"},
    )
    assert resp.status_code == 201
    created = resp.json()

    fetched = admin_client.get(f"/api/customers/{created['id']}").json()
    assert fetched["name"] == "Priya Sharma"
    assert fetched["address"] is None


def test_lookup_by_phone(admin_client, customer):
    resp = admin_client.get(f"/api/customers/phone/{customer.phone}")
    assert resp.status_code == 200
    assert resp.json()["id"] == customer.id

    missing = admin_client.get("/api/customers/phone/0000000000")
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Customer not found"}


def test_duplicate_phone_is_conflict(admin_client, customer):
    resp = admin_client.post("/api/customers", json={"name": "Someone", "phone": customer.phone})
    assert resp.status_code == 409


def test_search_and_update_customer(admin_client, customer):
    admin_client.post("/api/customers", json={"name": "Rahul Singh", "phone": "9876543222"})

    found = admin_client.get("/api/customers", params={"search": "amit"}).json()
    assert [c["id"] for c in found] == [customer.id]

    resp = admin_client.patch(f"/api/customers/{customer.id}", json={"address": "12 Ring Rd, Delhi"})
    assert resp.status_code == 200
    assert resp.json()["address"] == "12 Ring Rd, Delhi"
    assert resp.json()["phone"] == customer.phone

    assert admin_client.patch("/api/customers/999", json={"name": "X"}).status_code == 404


def test_customers_require_login(client):
    assert client.get("/api/customers").status_code == 401


def test_patch_clears_optional_fields_but_not_required_ones(admin_client, customer):
    resp = admin_client.patch(f"/api/customers/{customer.id}", json={"email": None, "name": " Amit K. "})
    assert resp.status_code == 200
    assert resp.json()["email"] is None
    assert resp.json()["name"] == "Amit K."

    resp = admin_client.patch(f"/api/customers/{customer.id}", json={"phone": None})
    assert resp.status_code == 400
    assert '"phone"' in resp.json()["detail"]


# ==============================================================================
# DOCTORS
# ==============================================================================

def test_doctor_crud(admin_client):
    resp = admin_client.post("/api/doctors", json={"name": "Dr. Patel", "specialization": "Cardiologist"})
    assert resp.status_code == 201
    doctor_id = resp.json()["id"]

    updated = admin_client.patch(f"/api/doctors/{doctor_id}", json={"phone": "9876543211"}).json()
    assert updated["phone"] == "9876543211"
    assert updated["specialization"] == "Cardiologist"

    assert [d["name"] for d in admin_client.get("/api/doctors").json()] == ["Dr. Patel"]
    assert admin_client.get("/api/doctors/999").status_code == 404


# ==============================================================================
# PRESCRIPTIONS
# ==============================================================================

def test_prescription_record_without_image(admin_client, customer, doctor):
    resp = admin_client.post(
        "/api/prescriptions",
        json={"customer_id": customer.id, "doctor_id": doctor.id, "notes": "Cetirizine at night"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["prescription_image_path"] is None

    assert admin_client.get(f"/api/prescriptions/{body['id']}").json()["notes"] == "Cetirizine at night"
    assert admin_client.get(f"/api/prescriptions/{body['id']}/image").status_code == 404

    history = admin_client.get(f"/api/customers/{customer.id}/prescriptions").json()
    assert [p["id"] for p in history] == [body["id"]]


def test_prescription_for_unknown_customer_is_400(admin_client):
    assert admin_client.post("/api/prescriptions", json={"customer_id": 999}).status_code == 400


def test_upload_prescription_image(admin_client, customer, upload_dir):
    resp = admin_client.post(
        "/api/prescriptions/upload",
        data={"customer_id": str(customer.id), "notes": "scan"},
        files={"file": ("rx.png", PNG_BYTES, "image/png")},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()

    path = body["prescription_image_path"]
    assert path.startswith("/uploads/prescriptions/")
    assert path.endswith(".png")
    stored = list((upload_dir / "prescriptions").iterdir())
    assert len(stored) == 1
    assert stored[0].name == path.rsplit("/", 1)[-1]

    image = admin_client.get(f"/api/prescriptions/{body['id']}/image")
    assert image.status_code == 200
    assert image.content == PNG_BYTES


def test_upload_rejects_non_image(admin_client, customer, upload_dir):
    resp = admin_client.post(
        "/api/prescriptions/upload",
        data={"customer_id": str(customer.id)},
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert resp.status_code == 400
    assert "Invalid file type" in resp.json()["detail"]


def test_upload_rejects_oversized_file(admin_client, customer, upload_dir, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 16)
    resp = admin_client.post(
        "/api/prescriptions/upload",
        data={"customer_id": str(customer.id)},
        files={"file": ("rx.png", PNG_BYTES, "image/png")},
    )
    assert resp.status_code == 400
    assert "too large" in resp.json()["detail"]


def test_upload_for_unknown_customer_leaves_no_file(admin_client, upload_dir):
    resp = admin_client.post(
        "/api/prescriptions/upload",
        data={"customer_id": "999"},
        files={"file": ("rx.png", PNG_BYTES, "image/png")},
    )
    assert resp.status_code == 400
    assert list((upload_dir / "prescriptions").iterdir()) == []