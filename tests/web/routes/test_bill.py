import pytest

from billrecon.models.bill import CompanyBill, VendorBill
from tests.web.conftest import create_bill_in_db


@pytest.fixture()
def stored_bills(test_engine):
    first = create_bill_in_db(
        test_engine,
        CompanyBill(
            id=0,
            invoice_number="CB-1",
            invoice_amount="100",
            paid_amount="0",
            balance_due="100",
            purchase_order_id=50,
            supplier_id=7,
            supplier_name="Gulf Lubricants",
        ),
    )
    orphan = create_bill_in_db(
        test_engine,
        CompanyBill(
            id=0,
            invoice_number="CB-2",
            invoice_amount="30",
            paid_amount="0",
            balance_due="30",
            purchase_order_id=51,
            supplier_id=8,
            supplier_name="Muscat Oils",
        ),
    )
    vendor = create_bill_in_db(
        test_engine,
        VendorBill(
            id=0,
            invoice_number="VB-1",
            invoice_amount="100",
            paid_amount="0",
            balance_due="100",
            supplier_id=7,
            supplier_name="Gulf Lubricants",
            covers_company_bills=[0],
        ),
    )
    return first, orphan, vendor


@pytest.fixture()
def linked_bills(test_engine):
    company = create_bill_in_db(
        test_engine,
        CompanyBill(id=0, invoice_number="CB-1", invoice_amount="100", balance_due="100", purchase_order_id=50),
    )
    orphan = create_bill_in_db(
        test_engine,
        CompanyBill(id=0, invoice_number="CB-2", invoice_amount="30", balance_due="30", purchase_order_id=51),
    )
    vendor = create_bill_in_db(
        test_engine,
        VendorBill(
            id=0,
            invoice_number="VB-1",
            invoice_amount="100",
            balance_due="100",
            covers_company_bills=[company.id],
        ),
    )
    return company, orphan, vendor


class TestBillList:
    def test_list_all(self, client, stored_bills):
        response = client.get("/bills")
        assert response.status_code == 200
        assert [bill["invoice_number"] for bill in response.json()] == ["CB-1", "CB-2", "VB-1"]

    def test_list_filtered(self, client, stored_bills):
        response = client.get("/bills", params={"bill_type": "company", "supplier_id": 8})
        assert [bill["invoice_number"] for bill in response.json()] == ["CB-2"]

    def test_amounts_are_numbers(self, client, stored_bills):
        bill = client.get("/bills").json()[0]
        assert bill["invoice_amount"] == 100.0

    def test_empty(self, client):
        assert client.get("/bills").json() == []


class TestBillGrouped:
    def test_grouped(self, client, linked_bills):
        company, orphan, vendor = linked_bills
        response = client.get("/bills/grouped")
        assert response.status_code == 200

        data = response.json()
        assert [vb["id"] for vb in data["groupedBills"]] == [vendor.id]
        assert [child["id"] for child in data["groupedBills"][0]["childBills"]] == [company.id]
        assert data["groupedBills"][0]["reconciliation"]["isMatched"] is True
        assert [bill["id"] for bill in data["orphanBills"]] == [orphan.id]

    def test_dangling_reference(self, client, stored_bills):
        # covers_company_bills=[0] points at no stored bill.
        data = client.get("/bills/grouped").json()
        rec = data["groupedBills"][0]["reconciliation"]
        assert rec["linkedBills"] == 0
        assert rec["missingBills"] == 1
        assert rec["difference"] == 100.0
        assert len(data["orphanBills"]) == 2

    def test_empty(self, client):
        assert client.get("/bills/grouped").json() == {"groupedBills": [], "orphanBills": []}


class TestBillSummary:
    def test_summary(self, client, stored_bills):
        data = client.get("/bills/summary").json()
        assert data["total"] == 3
        assert data["companyBills"] == 2
        assert data["vendorBills"] == 1
        assert data["totalAmount"] == 230.0


class TestBillDetail:
    def test_detail(self, client, linked_bills):
        company, _, _ = linked_bills
        response = client.get(f"/bills/{company.id}")
        assert response.status_code == 200
        assert response.json()["invoice_number"] == "CB-1"
        assert response.json()["payments"] == []

    def test_not_found(self, client):
        response = client.get("/bills/9999")
        assert response.status_code == 404
        assert response.json() == {"error": "Bill not found"}


class TestBillPayment:
    def test_partial_payment(self, client, linked_bills):
        company, _, _ = linked_bills
        response = client.post(
            f"/bills/{company.id}/payment",
            json={"amount": 40, "payment_method": "cash", "reference": "R-1"},
        )
        assert response.status_code == 200
        assert response.json()["payment_status"] == "partial"
        assert response.json()["balance_due"] == 60.0

        detail = client.get(f"/bills/{company.id}").json()
        assert detail["payments"][0]["reference"] == "R-1"

    def test_overpayment_rejected(self, client, linked_bills):
        company, _, _ = linked_bills
        response = client.post(f"/bills/{company.id}/payment", json={"amount": 500})
        assert response.status_code == 400
        assert "cannot exceed balance due" in response.json()["error"]

    def test_missing_bill(self, client):
        response = client.post("/bills/9999/payment", json={"amount": 1})
        assert response.status_code == 404

    def test_invalid_body(self, client, linked_bills):
        company, _, _ = linked_bills
        response = client.post(f"/bills/{company.id}/payment", json={"amount": 1, "payment_method": "barter"})
        assert response.status_code == 422


class TestBillSync:
    def test_sync(self, client, test_engine):
        create_bill_in_db(
            test_engine,
            CompanyBill(id=0, invoice_number="7", invoice_amount="30", paid_amount="30", balance_due="0"),
        )
        response = client.post("/bills/sync")
        assert response.status_code == 200
        assert response.json() == {"statusFixed": 1, "prefixesUpdated": 1, "orphansReset": 1}
