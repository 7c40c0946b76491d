"""POS billing over HTTP: quotes, invoices, stock deduction."""
import re
from decimal import Decimal

import pytest

from medbill.core.exceptions import ConflictError
from medbill.models.invoice import Invoice
from medbill.models.medicine import Medicine
from medbill.schemas.invoice import InvoiceCreate, InvoiceItemCreate
from medbill.services import invoice_service


def _items(catalogue, **quantities):
    return [
        {"medicine_id": catalogue["medicines"][name].id, "quantity": qty}
        for name, qty in quantities.items()
    ]


def test_create_invoice_computes_totals_and_deducts_stock(admin_client, db, catalogue, customer, doctor):
    resp = admin_client.post(
        "/api/invoices",
        json={
            "customer_id": customer.id,
            "doctor_id": doctor.id,
            "items": _items(catalogue, paracetamol=2, amoxicillin=1),
        },
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    invoice = body["invoice"]

    # 2 x 25 @ 18% + 1 x 80 @ 5%
    assert Decimal(invoice["subtotal"]) == Decimal("130.00")
    assert Decimal(invoice["gst_amount"]) == Decimal("13.00")
    assert Decimal(invoice["total"]) == Decimal("143.00")
    assert invoice["customer_id"] == customer.id
    assert re.match(r"^INV-\d{8}-\d{4}$", invoice["invoice_number"])

    lines = {line["medicine_id"]: line for line in body["items"]}
    para = lines[catalogue["medicines"]["paracetamol"].id]
    assert para["quantity"] == 2
    assert Decimal(para["gst_amount"]) == Decimal("9.00")
    assert Decimal(para["total_price"]) == Decimal("59.00")

    db.expire_all()
    assert db.get(Medicine, catalogue["medicines"]["paracetamol"].id).stock == 98
    assert db.get(Medicine, catalogue["medicines"]["amoxicillin"].id).stock == 39


def test_client_supplied_totals_are_ignored(admin_client, catalogue):
    resp = admin_client.post(
        "/api/invoices",
        json={"items": _items(catalogue, paracetamol=1), "total": "1.00", "subtotal": "1.00"},
    )
    assert resp.status_code == 201
    assert Decimal(resp.json()["invoice"]["total"]) == Decimal("29.50")


def test_walk_in_sale_has_no_customer(admin_client, catalogue):
    resp = admin_client.post("/api/invoices", json={"items": _items(catalogue, cetirizine=1)})
    assert resp.status_code == 201
    assert resp.json()["invoice"]["customer_id"] is None


def test_insufficient_stock_rejects_whole_invoice(admin_client, db, catalogue):
    resp = admin_client.post(
        "/api/invoices",
        json={"items": _items(catalogue, paracetamol=5, cetirizine=4)},  # cetirizine has 3
    )
    assert resp.status_code == 400

    db.expire_all()
    assert db.query(Invoice).count() == 0
    assert db.get(Medicine, catalogue["medicines"]["paracetamol"].id).stock == 100
    assert db.get(Medicine, catalogue["medicines"]["cetirizine"].id).stock == 3


def test_unknown_references_are_400(admin_client, catalogue):
    bad_medicine = admin_client.post("/api/invoices", json={"items": [{"medicine_id": 999, "quantity": 1}]})
    assert bad_medicine.status_code == 400

    bad_customer = admin_client.post(
        "/api/invoices", json={"customer_id": 999, "items": _items(catalogue, paracetamol=1)}
    )
    assert bad_customer.status_code == 400

    bad_doctor = admin_client.post(
        "/api/invoices", json={"doctor_id": 999, "items": _items(catalogue, paracetamol=1)}
    )
    assert bad_doctor.status_code == 400


def test_empty_cart_and_bad_quantity_are_validation_errors(admin_client, catalogue):
    empty = admin_client.post("/api/invoices", json={"items": []})
    assert empty.status_code == 400
    assert empty.json()["detail"].startswith("Validation error:")

    zero = admin_client.post("/api/invoices", json={"items": _items(catalogue, paracetamol=0)})
    assert zero.status_code == 400


def test_invoice_lookup_by_id_and_number(admin_client, catalogue):
    created = admin_client.post("/api/invoices", json={"items": _items(catalogue, paracetamol=1)}).json()
    invoice_id = created["invoice"]["id"]
    number = created["invoice"]["invoice_number"]

    by_id = admin_client.get(f"/api/invoices/{invoice_id}")
    assert by_id.status_code == 200
    assert len(by_id.json()["items"]) == 1

    by_number = admin_client.get(f"/api/invoices/number/{number}")
    assert by_number.json()["invoice"]["id"] == invoice_id

    assert admin_client.get("/api/invoices/999").status_code == 404
    assert admin_client.get("/api/invoices/number/INV-19990101-0000").json() == {"detail": "Invoice not found"}


def test_list_invoices_newest_first(admin_client, catalogue):
    first = admin_client.post("/api/invoices", json={"items": _items(catalogue, paracetamol=1)}).json()
    second = admin_client.post("/api/invoices", json={"items": _items(catalogue, amoxicillin=1)}).json()

    ids = [inv["id"] for inv in admin_client.get("/api/invoices").json()]
    assert ids == [second["invoice"]["id"], first["invoice"]["id"]]


def test_customer_invoice_history(admin_client, catalogue, customer):
    admin_client.post("/api/invoices", json={"customer_id": customer.id, "items": _items(catalogue, paracetamol=1)})
    admin_client.post("/api/invoices", json={"items": _items(catalogue, paracetamol=1)})

    history = admin_client.get(f"/api/customers/{customer.id}/invoices").json()
    assert len(history) == 1
    assert history[0]["customer_id"] == customer.id


def test_invoices_require_login(client, catalogue):
    assert client.get("/api/invoices").status_code == 401
    assert client.post("/api/invoices", json={"items": _items(catalogue, paracetamol=1)}).status_code == 401


def test_cart_quote_prices_without_saving(admin_client, db, catalogue):
    resp = admin_client.post("/api/cart/quote", json={"items": _items(catalogue, paracetamol=2, cetirizine=1)})
    assert resp.status_code == 200
    quote = resp.json()

    # 50.00 + 9.00 and 30.00 + 3.60
    assert Decimal(quote["subtotal"]) == Decimal("80.00")
    assert Decimal(quote["gst_amount"]) == Decimal("12.60")
    assert Decimal(quote["total"]) == Decimal("92.60")
    assert [line["name"] for line in quote["items"]] == ["Paracetamol 500mg", "Cetirizine 10mg"]

    db.expire_all()
    assert db.query(Invoice).count() == 0
    assert db.get(Medicine, catalogue["medicines"]["paracetamol"].id).stock == 100


def test_cart_quote_merges_repeated_medicine_and_checks_stock(admin_client, catalogue):
    cetirizine = catalogue["medicines"]["cetirizine"].id
    merged = admin_client.post(
        "/api/cart/quote",
        json={"items": [{"medicine_id": cetirizine, "quantity": 1}, {"medicine_id": cetirizine, "quantity": 2}]},
    ).json()
    assert len(merged["items"]) == 1
    assert merged["items"][0]["quantity"] == 3

    too_many = admin_client.post("/api/cart/quote", json={"items": [{"medicine_id": cetirizine, "quantity": 4}]})
    assert too_many.status_code == 400


def _one_line(medicine, quantity=1):
    return InvoiceCreate(items=[InvoiceItemCreate(medicine_id=medicine.id, quantity=quantity)])


def test_taken_invoice_number_is_retried(db, catalogue, admin_user, monkeypatch):
    para = catalogue["medicines"]["paracetamol"]
    existing = invoice_service.create_invoice(db, admin_user.id, _one_line(para))

    # another counter grabbed the same number between the check and the insert
    numbers = iter([existing.invoice_number, "INV-20240101-0002"])
    monkeypatch.setattr(invoice_service, "generate_invoice_number", lambda db, now=None: next(numbers))

    second = invoice_service.create_invoice(db, admin_user.id, _one_line(para, 2))

    assert second.invoice_number == "INV-20240101-0002"
    db.expire_all()
    assert db.query(Invoice).count() == 2
    assert db.get(Medicine, para.id).stock == 97


def test_persistent_number_clash_is_conflict(admin_client, db, catalogue, admin_user, monkeypatch):
    para = catalogue["medicines"]["paracetamol"]
    taken = invoice_service.create_invoice(db, admin_user.id, _one_line(para)).invoice_number
    monkeypatch.setattr(invoice_service, "generate_invoice_number", lambda db, now=None: taken)

    with pytest.raises(ConflictError):
        invoice_service.create_invoice(db, admin_user.id, _one_line(para))

    resp = admin_client.post("/api/invoices", json={"items": _items(catalogue, paracetamol=1)})
    assert resp.status_code == 409

    db.expire_all()
    assert db.query(Invoice).count() == 1
    assert db.get(Medicine, para.id).stock == 99
