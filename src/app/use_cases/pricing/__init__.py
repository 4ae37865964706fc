"""Pricing rule use cases"""
from .set_pricing_rule import SetPricingRule
from .get_pricing_rule import GetPricingRule
from .delete_pricing_rule import DeletePricingRule
from .list_pricing_rules import ListPricingRules
from .resolve_price import ResolvePrice
from .dtos import (
    SetPricingRuleCommandDTO,
    PricingRuleResponseDTO,
    ListPricingRulesResponseDTO,
    ResolvedPriceResponseDTO,
)

__all__ = [
    "SetPricingRule",
    "GetPricingRule",
    "DeletePricingRule",
    "ListPricingRules",
    "ResolvePrice",
    "SetPricingRuleCommandDTO",
    "PricingRuleResponseDTO",
    "ListPricingRulesResponseDTO",
    "ResolvedPriceResponseDTO",
]
