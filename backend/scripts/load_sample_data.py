#!/usr/bin/env python
"""Load the sample invoices, purchase orders and human corrections.

Creates missing tables and upserts every document from backend/data, so the
script can be run repeatedly. Learned correction memories and audit trails
are left untouched unless --reset is given.

Usage:
    python backend/scripts/load_sample_data.py
    python backend/scripts/load_sample_data.py --reset

Environment Variables:
    DATABASE_URL: Database connection string
"""

import argparse
import json
import sys
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from pydantic import ValidationError
from sqlalchemy import delete

from database import create_tables, get_db_session
from domain.memory import HumanCorrection, Invoice, MemoryStoreError, PurchaseOrder
from infrastructure.repositories import (
    HumanCorrectionRepository,
    InvoiceRepository,
    MemoryStore,
    PurchaseOrderRepository,
)
from models import AuditTrailRecord, CorrectionMemoryRecord

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def read_json(path: Path) -> list:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def load(session, data_dir: Path) -> dict[str, int]:
    """Upsert all sample documents found in data_dir.

    Returns:
        Number of loaded documents per kind
    """
    counts = {}

    invoices = InvoiceRepository(session)
    for doc in read_json(data_dir / "invoices_extracted.json"):
        invoices.save_invoice(Invoice.model_validate(doc))
        counts["invoices"] = counts.get("invoices", 0) + 1

    purchase_orders = PurchaseOrderRepository(session)
    for doc in read_json(data_dir / "purchase_orders.json"):
        purchase_orders.save_purchase_order(PurchaseOrder.model_validate(doc))
        counts["purchase_orders"] = counts.get("purchase_orders", 0) + 1

    corrections = HumanCorrectionRepository(session)
    for doc in read_json(data_dir / "human_corrections.json"):
        corrections.save_human_correction(HumanCorrection.model_validate(doc))
        counts["human_corrections"] = counts.get("human_corrections", 0) + 1

    vendor_memories_file = data_dir / "vendor_memories.json"
    if vendor_memories_file.exists():
        store = MemoryStore(session)
        for doc in read_json(vendor_memories_file):
            store.save_vendor_memory(doc["vendor"], doc["key"], doc.get("value"))
            counts["vendor_memories"] = counts.get("vendor_memories", 0) + 1

    return counts


def main():
    parser = argparse.ArgumentParser(description="Load sample invoice data")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help=f"Directory with the sample JSON files (default: {DEFAULT_DATA_DIR})",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete learned correction memories and audit trails first",
    )
    args = parser.parse_args()

    create_tables()

    try:
        with get_db_session() as session:
            if args.reset:
                session.execute(delete(CorrectionMemoryRecord))
                session.execute(delete(AuditTrailRecord))
                print("Cleared correction memories and audit trails")

            counts = load(session, args.data_dir)

    except (OSError, ValidationError, MemoryStoreError) as e:
        print(f"ERROR: Failed to load sample data: {e}")
        sys.exit(1)

    print("SUCCESS: Sample data loaded")
    for kind, count in counts.items():
        print(f"  {kind}: {count}")


if __name__ == "__main__":
    main()
