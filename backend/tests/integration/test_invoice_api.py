"""Integration tests for the HTTP API (SQLite)

Tests cover:
- POST /api/v1/invoices/{id}/process (200, 404, 422)
- GET /api/v1/invoices/{id}/audit
- GET /api/v1/memories/{vendor}
- Health, readiness, metrics and request IDs
"""

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from sqlalchemy.orm import Session

from domain.memory import FieldCorrection, FinalDecision, HumanCorrection
from infrastructure.repositories import HumanCorrectionRepository, InvoiceRepository, MemoryStore
from models import InvoiceRecord, PurchaseOrderRecord
from fixtures.in_memory_repositories import make_invoice


def seed_parts_invoice(db: Session, invoice_id="INV-B-001", with_review=True):
    InvoiceRepository(db).save_invoice(make_invoice(
        invoice_id,
        "Parts AG",
        confidence=0.73,
        raw_text="All prices MwSt. inkl.",
        currency="EUR",
        net_total=2380.0,
        tax_rate=0.19,
        tax_total=0.0,
        gross_total=2380.0,
    ))
    if with_review:
        HumanCorrectionRepository(db).save_human_correction(HumanCorrection(
            invoice_id=invoice_id,
            vendor="Parts AG",
            corrections=[
                FieldCorrection(field="netTotal", from_value=2380.0, to_value=2000.0, reason="VAT included"),
                FieldCorrection(field="taxTotal", from_value=0.0, to_value=380.0, reason="VAT included"),
            ],
            final_decision=FinalDecision.APPROVED,
        ))
    # The API uses its own session on the same connection
    db.commit()


class TestProcessInvoice:

    def test_process_returns_camel_case_result(self, client: TestClient, db_session: Session):
        seed_parts_invoice(db_session)

        response = client.post("/api/v1/invoices/INV-B-001/process")

        assert response.status_code == 200
        data = response.json()
        assert data["invoiceId"] == "INV-B-001"
        assert data["normalizedInvoice"]["netTotal"] == 2000.0
        assert data["normalizedInvoice"]["taxTotal"] == 380.0
        assert data["requiresHumanReview"] is True
        assert data["confidenceScore"] == 0.78
        assert data["auditPersisted"] is True
        assert len(data["memoryUpdates"]) == 2
        assert [e["step"] for e in data["auditTrail"]] == ["recall", "apply", "apply", "decide", "learn"]

    def test_learning_is_committed(self, client: TestClient, db_session: Session):
        seed_parts_invoice(db_session)

        client.post("/api/v1/invoices/INV-B-001/process")

        memory = MemoryStore(db_session).find_correction_memory("Parts AG", "netTotal")
        assert memory.confidence == 0.7

    def test_unknown_invoice_returns_404(self, client: TestClient, db_session: Session):
        response = client.post("/api/v1/invoices/INV-404/process")

        assert response.status_code == 404

    def test_malformed_invoice_returns_422(self, client: TestClient, db_session: Session):
        db_session.add(InvoiceRecord(
            invoice_id="INV-BAD",
            vendor="Parts AG",
            invoice_number="X",
            data={"invoiceId": "INV-BAD", "vendor": "Parts AG", "confidence": "high", "fields": {}},
        ))
        db_session.commit()

        response = client.post("/api/v1/invoices/INV-BAD/process")

        assert response.status_code == 422
        assert response.json()["detail"]["errors"]

    def test_malformed_purchase_order_returns_422(self, client: TestClient, db_session: Session):
        InvoiceRepository(db_session).save_invoice(make_invoice("INV-A-9", "Supplier GmbH"))
        db_session.add(PurchaseOrderRecord(
            po_number="PO-BAD",
            vendor="Supplier GmbH",
            data={"vendor": "Supplier GmbH", "date": "2024-01-05"},
        ))
        db_session.commit()

        response = client.post("/api/v1/invoices/INV-A-9/process")

        assert response.status_code == 422
        assert response.json()["detail"]["errors"]

    def test_processing_updates_metrics(self, client: TestClient, db_session: Session):
        seed_parts_invoice(db_session, with_review=False)
        labels = {"vendor": "Parts AG", "outcome": "needs_review"}
        before = REGISTRY.get_sample_value("invoice_memory_invoices_processed_total", labels) or 0.0

        client.post("/api/v1/invoices/INV-B-001/process")

        after = REGISTRY.get_sample_value("invoice_memory_invoices_processed_total", labels)
        assert after == before + 1


class TestAuditEndpoint:

    def test_audit_trail_accumulates_runs(self, client: TestClient, db_session: Session):
        seed_parts_invoice(db_session, with_review=False)

        client.post("/api/v1/invoices/INV-B-001/process")
        client.post("/api/v1/invoices/INV-B-001/process")
        response = client.get("/api/v1/invoices/INV-B-001/audit")

        assert response.status_code == 200
        data = response.json()
        assert data["invoiceId"] == "INV-B-001"
        steps = [e["step"] for e in data["entries"]]
        assert steps == ["recall", "apply", "apply", "decide", "learn"] * 2

    def test_unprocessed_invoice_has_empty_trail(self, client: TestClient, db_session: Session):
        response = client.get("/api/v1/invoices/INV-NEW/audit")

        assert response.status_code == 200
        assert response.json()["entries"] == []


class TestMemoriesEndpoint:

    def test_lists_learned_memories(self, client: TestClient, db_session: Session):
        seed_parts_invoice(db_session)
        client.post("/api/v1/invoices/INV-B-001/process")

        response = client.get("/api/v1/memories/Parts AG")

        assert response.status_code == 200
        data = response.json()
        assert data["vendor"] == "Parts AG"
        fields = {m["field"]: m for m in data["correctionMemories"]}
        assert set(fields) == {"netTotal", "taxTotal"}
        assert fields["netTotal"]["confidence"] == 0.7
        assert fields["netTotal"]["suggestedValue"] == {"to": 2000.0}

    def test_unknown_vendor_is_empty(self, client: TestClient, db_session: Session):
        response = client.get("/api/v1/memories/Nobody Ltd")

        assert response.status_code == 200
        assert response.json() == {"vendor": "Nobody Ltd", "vendorMemories": [], "correctionMemories": []}


class TestObservability:

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["components"]["database"]["status"] == "healthy"

    def test_ready(self, client: TestClient):
        assert client.get("/ready").json()["status"] == "ready"

    def test_metrics_exposed(self, client: TestClient):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "invoice_memory_http_request_duration_seconds" in response.text

    def test_request_id_echoed(self, client: TestClient):
        response = client.get("/", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"
        assert response.json()["name"] == "Invoice Memory API"
