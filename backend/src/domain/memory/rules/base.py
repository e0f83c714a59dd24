"""Rule interface and vendor-keyed rule registry."""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Optional

from domain.memory.models import MemoryContext, NormalizedInvoiceFields, RuleOutcome


class CorrectionRule(ABC):
    """A single correction heuristic.

    Rules modify the normalized field set in place and report what they did.
    A rule must fire at most once per invocation and must not re-derive a
    value that is already present, so running it twice on its own output is
    a no-op. Missing or malformed input makes the rule return None; it never
    raises for bad document content.
    """

    name: str = "rule"

    @abstractmethod
    def apply(
        self,
        fields: NormalizedInvoiceFields,
        raw_text: str,
        context: MemoryContext
    ) -> Optional[RuleOutcome]:
        """Try to apply the rule.

        Args:
            fields: Normalized field set (mutated when the rule fires)
            raw_text: Raw invoice text
            context: Memory context from recall

        Returns:
            RuleOutcome if the rule fired, else None
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class RuleRegistry:
    """Rules grouped by vendor.

    Vendor-specific rules run first, in registration order, followed by the
    rules registered for all vendors.
    """

    def __init__(self):
        self._vendor_rules: dict[str, list[CorrectionRule]] = defaultdict(list)
        self._global_rules: list[CorrectionRule] = []

    def register(self, rule: CorrectionRule, vendor: Optional[str] = None) -> "RuleRegistry":
        """Register a rule for one vendor, or for every vendor if vendor is None."""
        if vendor is None:
            self._global_rules.append(rule)
        else:
            self._vendor_rules[vendor].append(rule)
        return self

    def rules_for(self, vendor: str) -> list[CorrectionRule]:
        return list(self._vendor_rules.get(vendor, [])) + list(self._global_rules)

    @property
    def vendors(self) -> list[str]:
        return sorted(self._vendor_rules)
