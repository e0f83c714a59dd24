"""Default rule catalogue."""

from typing import Optional

from domain.memory.models import EngineConfig
from .base import RuleRegistry
from .duplicate_rules import DuplicateDetectionRule
from .freight_rules import DiscountTermsRule, ShippingSkuMappingRule
from .parts_rules import CurrencyRecoveryRule, TaxInclusiveRecomputationRule
from .supplier_rules import PurchaseOrderSuggestionRule, ServiceDateInferenceRule


SUPPLIER_GMBH = "Supplier GmbH"
PARTS_AG = "Parts AG"
FREIGHT_AND_CO = "Freight & Co"


def build_default_registry(config: Optional[EngineConfig] = None) -> RuleRegistry:
    """Build the registry with every known vendor rule plus duplicate detection.

    Args:
        config: Engine configuration (time windows); defaults apply if None

    Returns:
        Populated RuleRegistry
    """
    config = config or EngineConfig()

    registry = RuleRegistry()

    registry.register(ServiceDateInferenceRule(), vendor=SUPPLIER_GMBH)
    registry.register(PurchaseOrderSuggestionRule(window_days=config.po_match_window_days), vendor=SUPPLIER_GMBH)

    registry.register(TaxInclusiveRecomputationRule(), vendor=PARTS_AG)
    registry.register(CurrencyRecoveryRule(), vendor=PARTS_AG)

    registry.register(DiscountTermsRule(), vendor=FREIGHT_AND_CO)
    registry.register(ShippingSkuMappingRule(), vendor=FREIGHT_AND_CO)

    registry.register(DuplicateDetectionRule(window_days=config.duplicate_window_days))

    return registry
