#!/usr/bin/env python
"""Console walkthrough of the learning loop on the sample data.

For every vendor the sample invoices are processed in order: a first run
before anything is learned, a second run of the same invoice that picks up
its human correction, and runs of later invoices that benefit from the
learned memories. Duplicate detection and a per-vendor learning summary
close the walkthrough.

Usage:
    python backend/scripts/load_sample_data.py --reset
    python backend/scripts/run_demo.py [--no-color] [--vendor "Parts AG"]
"""

import argparse
import sys
from pathlib import Path

# Add backend/src to Python path
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from config import settings
from database import get_db_session
from dependencies import build_memory_engine
from domain.memory import EngineOutput, MemoryEngineError
from infrastructure.repositories import MemoryStore
from observability.logging_config import configure_logging

# Each step: (invoice_id, explanation)
SCENARIOS = {
    "Supplier GmbH": [
        ("INV-A-001", "First run: no memories yet, the human correction creates one"),
        ("INV-A-001", "Second run: the learned serviceDate memory raises confidence and is reinforced"),
        ("INV-A-002", "Learned serviceDate and single-PO suggestion applied"),
        ("INV-A-003", "Two purchase orders match, poNumber stays empty"),
    ],
    "Parts AG": [
        ("INV-B-001", "First run: VAT-included totals recomputed, corrections learned"),
        ("INV-B-001", "Second run: netTotal/taxTotal memories boost confidence"),
        ("INV-B-002", "Learned VAT recomputation applied"),
        ("INV-B-003", "Currency recovered from rawText"),
    ],
    "Freight & Co": [
        ("INV-C-001", "First run: Skonto terms and FREIGHT SKU, corrections learned"),
        ("INV-C-001", "Second run: discountTerms and SKU memories boost confidence"),
        ("INV-C-002", "Learned memories applied"),
    ],
}

DUPLICATES = [
    ("INV-A-004", "Same vendor and number as INV-A-003, one day later"),
    ("INV-B-004", "Same vendor and number as INV-B-003, one day later"),
]


class Palette:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def __call__(self, text, *codes: str) -> str:
        if not self.enabled or not codes:
            return str(text)
        return "".join(codes) + str(text) + self.RESET


STEP_COLORS = {
    "recall": Palette.CYAN,
    "apply": Palette.YELLOW,
    "decide": Palette.BLUE,
    "learn": Palette.MAGENTA,
}


def confidence_color(score: float) -> str:
    if score >= settings.AUTO_APPROVE_THRESHOLD:
        return Palette.GREEN
    if score >= 0.75:
        return Palette.YELLOW
    return Palette.RED


def section(c: Palette, title: str):
    print()
    print(c("=" * 90, Palette.BOLD, Palette.CYAN))
    print(c(title, Palette.BOLD, Palette.CYAN))
    print(c("=" * 90, Palette.BOLD, Palette.CYAN))


def show_output(c: Palette, output: EngineOutput, note: str):
    print()
    print(c(f"Invoice {output.invoice_id}", Palette.BOLD) + c(f"  ({output.vendor})", Palette.DIM))
    print(c(f"  {note}", Palette.DIM))

    print(c(f"  Proposed corrections: {len(output.proposed_corrections)}", Palette.YELLOW))
    for correction in output.proposed_corrections:
        print(f"    - {correction}")

    review = c("YES (needs review)", Palette.RED) if output.requires_human_review else c("NO (auto-approved)", Palette.GREEN)
    print(c("  Requires human review: ", Palette.YELLOW) + review)
    print(
        c("  Confidence: ", Palette.YELLOW)
        + c(f"{output.confidence_score * 100:.1f}%", confidence_color(output.confidence_score))
    )
    print(c("  Reasoning: ", Palette.MAGENTA) + output.reasoning)

    if output.memory_updates:
        print(c("  Memory updates:", Palette.MAGENTA))
        for update in output.memory_updates:
            print(f"    - {update}")

    print(c("  Audit trail:", Palette.MAGENTA))
    for entry in output.audit_trail:
        step = entry.step.value
        print(f"    {c(f'[{step.upper()}]', STEP_COLORS[step])} {entry.details}")
    if not output.audit_persisted:
        print(c("  WARNING: audit trail was not persisted", Palette.RED))


def show_memory_state(c: Palette, session, vendor: str):
    memories = MemoryStore(session).get_correction_memories(vendor)
    print()
    print(c(f"  Learned memory state for {vendor}:", Palette.MAGENTA))
    if not memories:
        print(c("    (no memories learned yet)", Palette.DIM))
    for memory in sorted(memories, key=lambda m: m.field):
        print(f"    {memory.field}: " + c(f"{memory.confidence * 100:.0f}%", confidence_color(memory.confidence)))


def run_invoice(session, invoice_id: str):
    """Process one invoice in its own transaction, like one API request."""
    engine = build_memory_engine(session)
    output = engine.process_invoice(invoice_id)
    session.commit()
    return output


def show_summary(c: Palette, session, vendors: list[str]):
    section(c, "SUMMARY: learned correction memories")

    store = MemoryStore(session)
    header = f"  {'Vendor':<16}{'Memories':>10}{'Avg':>10}{'Min':>10}{'Max':>10}"
    print(c(header, Palette.BOLD))

    total = 0
    high_confidence = 0
    for vendor in vendors:
        memories = store.get_correction_memories(vendor)
        if not memories:
            print(f"  {vendor:<16}{0:>10}{'-':>10}{'-':>10}{'-':>10}")
            continue
        scores = [m.confidence for m in memories]
        total += len(scores)
        high_confidence += sum(1 for s in scores if s >= settings.HIGH_CONFIDENCE_MEMORY_THRESHOLD)
        print(
            f"  {vendor:<16}{len(scores):>10}"
            f"{sum(scores) / len(scores) * 100:>9.0f}%"
            f"{min(scores) * 100:>9.0f}%"
            f"{max(scores) * 100:>9.0f}%"
        )

    print()
    print(c(f"  Total memories learned: {total}", Palette.BOLD))
    print(c(
        f"  High-confidence memories (>= {settings.HIGH_CONFIDENCE_MEMORY_THRESHOLD:.0%}): {high_confidence}",
        Palette.BOLD
    ))


def main():
    parser = argparse.ArgumentParser(description="Walk through the invoice learning loop")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    parser.add_argument("--vendor", choices=sorted(SCENARIOS), help="Only run one vendor's scenario")
    parser.add_argument("--log-level", default="WARNING", help="Log level for pipeline logs")
    args = parser.parse_args()

    configure_logging(level=args.log_level, json_format=False)
    c = Palette(enabled=not args.no_color and sys.stdout.isatty())

    vendors = [args.vendor] if args.vendor else list(SCENARIOS)

    try:
        with get_db_session() as session:
            for vendor in vendors:
                section(c, f"{vendor.upper()}: learning progression")
                for invoice_id, note in SCENARIOS[vendor]:
                    output = run_invoice(session, invoice_id)
                    if output is None:
                        print(c(f"Invoice {invoice_id} not found. Run load_sample_data.py first.", Palette.RED))
                        continue
                    show_output(c, output, note)
                    show_memory_state(c, session, vendor)

            if not args.vendor:
                section(c, "DUPLICATE DETECTION")
                for invoice_id, note in DUPLICATES:
                    output = run_invoice(session, invoice_id)
                    if output is not None:
                        show_output(c, output, note)

            show_summary(c, session, vendors)

    except MemoryEngineError as e:
        print(c(f"ERROR: {e}", Palette.RED))
        sys.exit(1)


if __name__ == "__main__":
    main()
