"""Correction rule implementations.

Each rule module contains rule objects for one vendor (or, for duplicate
detection, for all vendors). Rules are wired together in a RuleRegistry.
"""

from .base import CorrectionRule, RuleRegistry
from .duplicate_rules import DuplicateDetectionRule
from .engine import RuleApplicationEngine, RuleApplicationResult
from .freight_rules import DiscountTermsRule, ShippingSkuMappingRule
from .parts_rules import CurrencyRecoveryRule, TaxInclusiveRecomputationRule
from .registry import FREIGHT_AND_CO, PARTS_AG, SUPPLIER_GMBH, build_default_registry
from .supplier_rules import PurchaseOrderSuggestionRule, ServiceDateInferenceRule

__all__ = [
    "CorrectionRule",
    "RuleRegistry",
    "RuleApplicationEngine",
    "RuleApplicationResult",
    "build_default_registry",
    "SUPPLIER_GMBH",
    "PARTS_AG",
    "FREIGHT_AND_CO",
    "ServiceDateInferenceRule",
    "PurchaseOrderSuggestionRule",
    "TaxInclusiveRecomputationRule",
    "CurrencyRecoveryRule",
    "DiscountTermsRule",
    "ShippingSkuMappingRule",
    "DuplicateDetectionRule",
]
